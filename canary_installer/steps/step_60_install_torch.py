from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from ..config import TorchChannel
from ..lib.hwdetect import cuda_major
from ..lib.pyenv import can_import, pip_install
from ..logging_utils import log_success
from ..pipeline import InstallCtx
from ..state_store import record_decision
from .common import accelerator, project_venv

logger = logging.getLogger(__name__)


def select_torch_channel(
    *,
    gpu_available: bool,
    cuda_version: Optional[str],
    channels: Sequence[TorchChannel],
    cpu_channel: TorchChannel,
) -> TorchChannel:
    """Pick the first CUDA channel matching the driver's CUDA major, else CPU."""

    if not gpu_available:
        return cpu_channel
    major = cuda_major(cuda_version)
    if major is None:
        return cpu_channel
    for channel in channels:
        if channel.matches(major):
            return channel
    return cpu_channel


class InstallTorchStep:
    step_id = "60_install_torch"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        venv = project_venv(ctx, state)

        if can_import(venv, "torch"):
            log_success(logger, "PyTorch already installed")
            state["torch"] = {"channel": None, "installed": False}
            return state

        info = accelerator(state)
        channel = select_torch_channel(
            gpu_available=info.available,
            cuda_version=info.cuda_version,
            channels=ctx.cfg.torch_channels,
            cpu_channel=ctx.cfg.torch_cpu_channel,
        )

        if channel.name == ctx.cfg.torch_cpu_channel.name:
            if info.available:
                logger.warning("Unsupported CUDA version (%s), installing CPU-only PyTorch", info.cuda_version)
            else:
                logger.info("Installing CPU-only PyTorch...")
        else:
            logger.info("Installing PyTorch with %s support...", channel.name)

        pip_install(venv, channel.requirements, index_url=channel.index_url, dry_run=ctx.dry_run)

        state["torch"] = {"channel": channel.name, "installed": True}
        record_decision(state, "torch_channel", channel.name)
        return state
