"""Shared fixtures for installer tests.

FakeMachine stands in for every external command the installer runs. It keeps
just enough state (dpkg database, importable modules, services, groups) for a
second run to observe what the first one installed.
"""

import logging
import os
import re
import subprocess
import types
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

import pytest

from canary_installer.config import DisplayServer, load_config
from canary_installer.lib import command
from canary_installer.pipeline import InstallCtx
from canary_installer.steps.step_65_verify_torch import VERIFY_CODE

SYSTEM_PYTHON = "/usr/bin/python3.12"

# Imports checked by the generated test_installation.py.
SMOKE_MODULES = ("torch", "soundfile", "pyaudio", "pynput", "nemo.collections.speechlm")

INTEL_LSPCI = "00:02.0 VGA compatible controller: Intel Corporation UHD Graphics 620 (rev 07)\n"
NVIDIA_LSPCI = (
    "00:02.0 VGA compatible controller: Intel Corporation UHD Graphics 620 (rev 07)\n"
    "01:00.0 VGA compatible controller: NVIDIA Corporation GA104 [GeForce RTX 3070] (rev a1)\n"
)


def nvidia_smi_text(cuda: str) -> str:
    return (
        "+---------------------------------------------------------------------------------------+\n"
        f"| NVIDIA-SMI 550.54.14   Driver Version: 550.54.14   CUDA Version: {cuda}      |\n"
        "+---------------------------------------------------------------------------------------+\n"
    )


def _requirement_name(req: str) -> str:
    if req.startswith("git+"):
        return "nemo_toolkit"
    return re.split(r"[\[=<>+ ]", req, maxsplit=1)[0].lower()


class FakeMachine:
    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.binaries: Dict[str, str] = {"python3.12": SYSTEM_PYTHON, "lspci": "/usr/bin/lspci"}
        self.python_versions: Dict[str, str] = {SYSTEM_PYTHON: "Python 3.12.3"}
        self.lspci = INTEL_LSPCI
        self.nvidia_smi: Optional[str] = None
        self.driver_version = "550.54.14"
        self.dpkg_installed: Set[str] = set()
        self.apt_fails = False
        self.modules: Set[str] = set()
        self.pip_failures: Set[str] = set()
        self.speechlm_after_install = True
        self.torch_verify_fails = False
        self.services_enabled: Set[str] = set()
        self.groups: Set[str] = {"tester"}
        self.venv_python_version = "Python 3.12.3"
        self.smoke_tools_ok = True

    # -- helpers used by tests -------------------------------------------------

    def with_nvidia(self, cuda: Optional[str] = "12.4", driver: bool = True) -> "FakeMachine":
        self.lspci = NVIDIA_LSPCI
        self.nvidia_smi = nvidia_smi_text(cuda) if (driver and cuda) else ("" if driver else None)
        return self

    def provisioned(self, packages) -> "FakeMachine":
        self.dpkg_installed.update(packages)
        self.modules.update(
            {"torch", "numpy", "soundfile", "librosa", "pyaudio", "pynput", "nemo.collections.speechlm"}
        )
        self.services_enabled.add("ydotoold")
        self.groups.add("input")
        return self

    def calls_matching(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if c[: len(prefix)] == list(prefix)]

    def pip_installs(self) -> List[List[str]]:
        return [c for c in self.calls if c[1:4] == ["-m", "pip", "install"]]

    def installs(self) -> List[List[str]]:
        """Every call that changes the machine."""
        out = []
        for c in self.calls:
            argv = c[1:] if c and c[0] == "sudo" else c
            if argv[:2] == ["apt-get", "install"]:
                out.append(c)
            elif argv[1:4] == ["-m", "pip", "install"]:
                out.append(c)
            elif argv[1:3] == ["-m", "venv"]:
                out.append(c)
            elif argv[:2] == ["systemctl", "enable"] or argv[:1] == ["usermod"]:
                out.append(c)
        return out

    # -- patched entry points --------------------------------------------------

    def which(self, name: str) -> Optional[str]:
        if name == "nvidia-smi":
            return "/usr/bin/nvidia-smi" if self.nvidia_smi is not None else None
        if name == "ydotool" and "ydotool" in self.dpkg_installed:
            return "/usr/bin/ydotool"
        return self.binaries.get(name)

    def run(self, argv, text=True, stdout=None, stderr=None, cwd=None):
        argv = list(argv)
        self.calls.append(argv)
        rc, out, err = self._dispatch(argv[1:] if argv[0] == "sudo" else argv)
        return subprocess.CompletedProcess(argv, rc, out, err)

    def _dispatch(self, argv: List[str]):
        exe = argv[0]
        if exe == "apt-get":
            if argv[1] == "install":
                if self.apt_fails:
                    return 100, "", "E: Unable to locate package"
                self.dpkg_installed.update(argv[3:])
            return 0, "", ""
        if exe == "dpkg-query":
            if argv[-1] in self.dpkg_installed:
                return 0, "install ok installed", ""
            return 1, "", f"dpkg-query: no packages found matching {argv[-1]}"
        if exe == "systemctl":
            unit = argv[-1]
            if argv[1] == "is-enabled":
                return (0, "enabled\n", "") if unit in self.services_enabled else (1, "disabled\n", "")
            self.services_enabled.add(unit)
            return 0, "", ""
        if exe == "id":
            return 0, " ".join(sorted(self.groups)) + "\n", ""
        if exe == "usermod":
            self.groups.add(argv[3])
            return 0, "", ""
        if exe == "lspci":
            return 0, self.lspci, ""
        if exe == "nvidia-smi":
            if len(argv) > 1:
                return 0, self.driver_version + "\n", ""
            return 0, self.nvidia_smi or "", ""
        if exe in self.python_versions:
            if argv[1:3] == ["-m", "venv"]:
                self._create_venv(Path(argv[3]))
                return 0, "", ""
            return 0, self.python_versions[exe] + "\n", ""
        if exe.endswith("/bin/python"):
            return self._venv_python(argv)
        return 0, "", ""

    def _create_venv(self, root: Path) -> None:
        (root / "bin").mkdir(parents=True, exist_ok=True)
        (root / "bin" / "activate").write_text("# activate\n")
        (root / "bin" / "python").write_text("")
        self.venv_python_version = self.python_versions[SYSTEM_PYTHON]
        self.modules.clear()

    def _venv_python(self, argv: List[str]):
        if argv[1] == "--version":
            return 0, self.venv_python_version + "\n", ""
        if argv[1] == "-c":
            code = argv[2]
            if code == VERIFY_CODE:
                if "torch" not in self.modules or self.torch_verify_fails:
                    return 1, "", "ModuleNotFoundError: No module named 'torch'"
                cuda = self.nvidia_smi is not None and bool(self.nvidia_smi)
                tail = "GPU device: NVIDIA GeForce RTX 3070\n" if cuda else "Running in CPU mode\n"
                return 0, f"PyTorch version: 2.4.1\nCUDA available: {cuda}\n{tail}", ""
            module = code[len("import "):]
            if module in self.modules:
                return 0, "", ""
            return 1, "", f"ModuleNotFoundError: No module named '{module}'"
        if argv[1:4] == ["-m", "pip", "install"]:
            return self._pip_install(argv[4:])
        return self._smoke_test()

    def _smoke_test(self):
        ok = self.smoke_tools_ok and all(m in self.modules for m in SMOKE_MODULES)
        return (0 if ok else 1), "", ""

    def _pip_install(self, args: List[str]):
        reqs = []
        skip = False
        for a in args:
            if skip:
                skip = False
                continue
            if a == "--index-url":
                skip = True
                continue
            if a.startswith("--"):
                continue
            reqs.append(a)
        for req in reqs:
            if req in self.pip_failures:
                return 1, "", f"ERROR: Could not install {req}"
        for req in reqs:
            name = _requirement_name(req)
            if name == "nemo_toolkit":
                self.modules.add("nemo")
                if self.speechlm_after_install:
                    self.modules.add("nemo.collections.speechlm")
            else:
                self.modules.add(name)
        return 0, "", ""


@pytest.fixture
def machine(monkeypatch) -> FakeMachine:
    fake = FakeMachine()
    monkeypatch.setattr(command, "subprocess", types.SimpleNamespace(run=fake.run, PIPE=subprocess.PIPE))
    monkeypatch.setattr(command, "shutil", types.SimpleNamespace(which=fake.which))
    monkeypatch.setattr(os, "geteuid", lambda: 1000)
    monkeypatch.setenv("USER", "tester")
    return fake


@pytest.fixture
def project(tmp_path) -> Path:
    p = tmp_path / "speech-to-text"
    p.mkdir()
    (p / "speech_to_text.py").write_text("print('stt')\n")
    (p / "speech_hotkey.py").write_text("print('hotkey')\n")
    return p


@pytest.fixture
def make_ctx(project) -> Callable[..., InstallCtx]:
    def _make(answers=(), display=DisplayServer.X11, **overrides) -> InstallCtx:
        base = {"project": {"dir": str(project)}, "run": {"launch": False}}
        for key, value in overrides.items():
            base.setdefault(key, {}).update(value)
        replies = list(answers)

        def _input(prompt: str) -> str:
            if not replies:
                raise AssertionError(f"unexpected prompt: {prompt}")
            return replies.pop(0)

        return InstallCtx(cfg=load_config(overrides=base), display=display, input_fn=_input)

    return _make


@pytest.fixture(autouse=True)
def reset_logging():
    """configure_logging() is once-per-process; undo it between tests."""
    root = logging.getLogger()
    before = list(root.handlers)
    yield
    for h in list(root.handlers):
        if h not in before:
            root.removeHandler(h)
            h.close()
    for attr in ("_canary_configured", "_canary_log_path"):
        if hasattr(root, attr):
            delattr(root, attr)
