from __future__ import annotations

import copy
import enum
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .lib.manifests import load_defaults, load_yaml

Version = Tuple[int, int]


class DisplayServer(str, enum.Enum):
    X11 = "x11"
    WAYLAND = "wayland"


def detect_display_server(env: Optional[Mapping[str, str]] = None) -> DisplayServer:
    """XDG_SESSION_TYPE selects wayland; anything else (or unset) is x11."""
    env = os.environ if env is None else env
    raw = (env.get("XDG_SESSION_TYPE") or "x11").strip().lower()
    if raw == DisplayServer.WAYLAND.value:
        return DisplayServer.WAYLAND
    return DisplayServer.X11


def parse_major_minor(value: Any) -> Version:
    parts = str(value).strip().split(".")
    if len(parts) < 2:
        raise ValueError(f"Version must be MAJOR.MINOR, got {value!r}")
    return int(parts[0]), int(parts[1])


def deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge override into a copy of base. Mappings merge, everything else replaces."""
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(out.get(key), dict):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = copy.deepcopy(value)
    return out


@dataclass(frozen=True)
class TorchChannel:
    name: str
    requirements: List[str]
    index_url: str
    cuda_major_min: Optional[int] = None
    cuda_major_max: Optional[int] = None

    def matches(self, cuda_major: int) -> bool:
        if self.cuda_major_min is not None and cuda_major < self.cuda_major_min:
            return False
        if self.cuda_major_max is not None and cuda_major > self.cuda_major_max:
            return False
        return True


def _channel(raw: Mapping[str, Any]) -> TorchChannel:
    lo = raw.get("cuda_major_min")
    hi = raw.get("cuda_major_max")
    return TorchChannel(
        name=str(raw["name"]),
        requirements=[str(r) for r in raw.get("requirements") or []],
        index_url=str(raw["index_url"]),
        cuda_major_min=None if lo is None else int(lo),
        cuda_major_max=None if hi is None else int(hi),
    )


@dataclass(frozen=True)
class InstallerConfig:
    raw: Dict[str, Any]

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    # python
    @property
    def python_candidates(self) -> List[str]:
        return [str(c) for c in self._section("python").get("candidates") or []]

    @property
    def python_range(self) -> Tuple[Version, Version]:
        py = self._section("python")
        return parse_major_minor(py.get("min_version", "3.11")), parse_major_minor(py.get("max_version", "3.12"))

    @property
    def python_install_hint(self) -> str:
        return str(self._section("python").get("install_hint") or "")

    # accelerator
    @property
    def gpu_vendor_pattern(self) -> str:
        return str(self._section("accelerator").get("vendor_pattern") or "nvidia")

    @property
    def driver_hint(self) -> str:
        return str(self._section("accelerator").get("driver_hint") or "")

    # system packages
    @property
    def base_packages(self) -> List[str]:
        return [str(p) for p in self._section("system_packages").get("base") or []]

    def display_tools(self, display: DisplayServer) -> List[str]:
        tools = self._section("system_packages").get("display_tools") or {}
        return [str(p) for p in tools.get(display.value) or []]

    @property
    def input_daemon(self) -> str:
        return str(self._section("system_packages").get("input_daemon") or "ydotoold")

    @property
    def input_group(self) -> str:
        return str(self._section("system_packages").get("input_group") or "input")

    # project
    @property
    def project_dir_override(self) -> Optional[str]:
        value = self._section("project").get("dir")
        return str(value) if value else None

    @property
    def project_dir_name(self) -> str:
        return str(self._section("project").get("dir_name") or "speech-to-text")

    @property
    def project_home_dir(self) -> Path:
        return Path(os.path.expanduser(str(self._section("project").get("home_dir") or "~/speech-to-text")))

    @property
    def project_markers(self) -> List[str]:
        return [str(m) for m in self._section("project").get("markers") or []]

    @property
    def required_files(self) -> List[str]:
        return [self.artifact("main_script"), self.artifact("hotkey_script")]

    @property
    def venv_dir(self) -> str:
        return str(self._section("project").get("venv_dir") or "venv")

    @property
    def state_file(self) -> str:
        return str(self._section("project").get("state_file") or ".canary-installer/state.json")

    # torch
    @property
    def torch_channels(self) -> List[TorchChannel]:
        return [_channel(c) for c in self._section("torch").get("channels") or []]

    @property
    def torch_cpu_channel(self) -> TorchChannel:
        return _channel(self._section("torch")["cpu"])

    # aux libraries
    @property
    def aux_libraries(self) -> Dict[str, str]:
        return {str(k): str(v) for k, v in (self.raw.get("aux_libraries") or {}).items()}

    # nemo
    @property
    def nemo_check_module(self) -> str:
        return str(self._section("nemo").get("check_module") or "nemo.collections.speechlm")

    @property
    def nemo_prerequisites(self) -> List[str]:
        return [str(p) for p in self._section("nemo").get("prerequisites") or []]

    @property
    def nemo_strategies(self) -> List[Tuple[str, str]]:
        return [(str(s["name"]), str(s["requirement"])) for s in self._section("nemo").get("strategies") or []]

    @property
    def nemo_extras(self) -> List[str]:
        return [str(p) for p in self._section("nemo").get("extras") or []]

    @property
    def require_speechlm(self) -> bool:
        return bool(self._section("nemo").get("require_speechlm", False))

    # artifacts
    def artifact(self, key: str) -> str:
        return str(self._section("artifacts")[key])

    # smoke test
    def smoke_tools(self, display: DisplayServer) -> List[str]:
        tools = self._section("smoke_test").get("tools") or {}
        return [str(t) for t in tools.get(display.value) or []]

    @property
    def smoke_shared_tools(self) -> List[str]:
        return [str(t) for t in self._section("smoke_test").get("shared_tools") or []]

    @property
    def smoke_timeout_s(self) -> int:
        return int(self._section("smoke_test").get("timeout_s", 5))

    # run
    @property
    def assume_yes(self) -> bool:
        return bool(self._section("run").get("assume_yes", False))

    @property
    def launch(self) -> bool:
        return bool(self._section("run").get("launch", True))

    @property
    def dry_run(self) -> bool:
        return bool(self._section("run").get("dry_run", False))


def load_config(path: Optional[str] = None, overrides: Optional[Mapping[str, Any]] = None) -> InstallerConfig:
    raw = load_defaults()

    if path:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(path)
        if p.suffix.lower() not in {".yaml", ".yml"}:
            raise ValueError("installer config must be YAML")
        raw = deep_merge(raw, load_yaml(p))

    if overrides:
        raw = deep_merge(raw, overrides)

    return InstallerConfig(raw=raw)
