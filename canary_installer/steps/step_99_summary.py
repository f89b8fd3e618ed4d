from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import DisplayServer
from ..lib.pkg import user_in_group
from ..logging_utils import log_success
from ..pipeline import InstallCtx
from ..state_store import record_decision
from .common import accelerator, project_dir

logger = logging.getLogger(__name__)


class SummaryStep:
    step_id = "99_summary"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        project = project_dir(state)
        runtime = state.get("runtime") or {}
        info = accelerator(state)
        caps = state.get("capabilities") or {}

        gpu = f"Yes ({info.gpu_name})" if info.available else "No (CPU only)"
        launcher = ctx.cfg.artifact("launcher")

        log_success(logger, "Installation completed successfully!")
        logger.info("📁 Project directory: %s", project)
        logger.info("🐍 Python version: %s", runtime.get("version", "unknown"))
        logger.info("🎮 GPU support: %s", gpu)
        logger.info("🖥️  Display server: %s", ctx.display.value)
        logger.info(
            "🧩 Capabilities: %s",
            ", ".join(f"{k}={'yes' if v else 'no'}" for k, v in sorted(caps.items())) or "none",
        )
        logger.info("🚀 Ready to use! Start with: cd %s && ./%s", project, launcher)
        logger.info("📱 Hotkey: %s", ctx.cfg.artifact("hotkey_long"))

        if ctx.display is DisplayServer.WAYLAND and not user_in_group(ctx.cfg.input_group):
            logger.warning("For Wayland support, log out and back in for group changes to take effect")

        launch = False
        if ctx.cfg.launch and ctx.dry_run:
            logger.info("Would offer to start %s", launcher)
        elif ctx.cfg.launch:
            launch = ctx.ask("Start the speech-to-text service now?", default=True)
        record_decision(state, "launch", launch)
        state["launch"] = {"requested": launch, "command": str(project / launcher)}
        return state
