from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from ..lib.hwdetect import AcceleratorInfo
from ..lib.pyenv import VirtualEnv
from ..pipeline import InstallCtx


def project_dir(state: Dict[str, Any]) -> Path:
    project = state.get("project") or {}
    if not project.get("dir"):
        raise RuntimeError("project.dir missing (run 40_resolve_project_dir first)")
    return Path(project["dir"])


def project_venv(ctx: InstallCtx, state: Dict[str, Any]) -> VirtualEnv:
    return VirtualEnv(project_dir(state) / ctx.cfg.venv_dir)


def runtime_path(state: Dict[str, Any]) -> str:
    runtime = state.get("runtime") or {}
    if not runtime.get("path"):
        raise RuntimeError("runtime.path missing (run 10_resolve_runtime first)")
    return str(runtime["path"])


def accelerator(state: Dict[str, Any]) -> AcceleratorInfo:
    raw = state.get("accelerator") or {}
    return AcceleratorInfo(
        gpu_present=bool(raw.get("gpu_present", False)),
        gpu_name=raw.get("gpu_name"),
        driver_present=bool(raw.get("driver_present", False)),
        driver_version=raw.get("driver_version"),
        cuda_version=raw.get("cuda_version"),
    )
