from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .command import CmdResult, run_cmd
from .pyruntime import PyVersion, probe_version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VirtualEnv:
    root: Path

    @property
    def python(self) -> Path:
        return self.root / "bin" / "python"

    @property
    def activate_script(self) -> Path:
        return self.root / "bin" / "activate"

    def exists(self) -> bool:
        return self.root.is_dir() and self.activate_script.is_file()


def venv_version(venv: VirtualEnv) -> Optional[PyVersion]:
    if not venv.python.exists():
        return None
    return probe_version(str(venv.python))


def create_venv(interpreter: str, venv: VirtualEnv, *, dry_run: bool = False) -> None:
    run_cmd([interpreter, "-m", "venv", str(venv.root)], dry_run=dry_run)


def remove_venv(venv: VirtualEnv, *, dry_run: bool = False) -> None:
    if dry_run:
        logger.info("Would remove %s", venv.root)
        return
    shutil.rmtree(venv.root)


def run_python(venv: VirtualEnv, code: str, *, check: bool = False) -> CmdResult:
    return run_cmd([str(venv.python), "-c", code], check=check)


def can_import(venv: VirtualEnv, module: str) -> bool:
    """Probe importability inside the venv; a missing interpreter means False."""
    if not venv.python.exists():
        return False
    return run_python(venv, f"import {module}").ok


def pip_install(
    venv: VirtualEnv,
    requirements: Sequence[str],
    *,
    index_url: Optional[str] = None,
    upgrade: bool = False,
    dry_run: bool = False,
) -> None:
    if not requirements:
        return
    argv = [str(venv.python), "-m", "pip", "install"]
    if upgrade:
        argv.append("--upgrade")
    argv += list(requirements)
    if index_url:
        argv += ["--index-url", index_url]
    run_cmd(argv, stream=True, dry_run=dry_run)
