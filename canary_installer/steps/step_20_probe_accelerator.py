from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import InstallerError
from ..lib.hwdetect import detect_accelerator
from ..logging_utils import log_success
from ..pipeline import InstallCtx
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class ProbeAcceleratorStep:
    step_id = "20_probe_accelerator"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Checking NVIDIA GPU and drivers...")
        info = detect_accelerator(ctx.cfg.gpu_vendor_pattern)

        if info.available:
            log_success(logger, "NVIDIA GPU detected: %s", info.gpu_name)
            log_success(logger, "NVIDIA drivers installed: %s (CUDA %s)", info.driver_version, info.cuda_version)
        elif info.gpu_present:
            log_success(logger, "NVIDIA GPU detected: %s", info.gpu_name)
            logger.warning("NVIDIA GPU found but drivers not installed")
            logger.info("Install drivers with: %s", ctx.cfg.driver_hint)
            if not ctx.ask("Continue without GPU acceleration?", default=False):
                raise InstallerError(
                    "Aborted: NVIDIA drivers are not installed",
                    hints=["Please install NVIDIA drivers and re-run this installer"],
                )
            logger.warning("Continuing in CPU-only mode")
        else:
            logger.warning("No NVIDIA GPU detected. Will use CPU-only mode.")

        state["accelerator"] = info.to_dict()
        record_decision(state, "gpu_available", info.available)
        return state
