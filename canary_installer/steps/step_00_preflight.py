from __future__ import annotations

import logging
import os
from typing import Any, Dict

from ..errors import InstallerError
from ..pipeline import InstallCtx
from ..state_store import record_decision

logger = logging.getLogger(__name__)


def refuse_root() -> None:
    # Files created under sudo would end up owned by root.
    if os.geteuid() == 0:
        raise InstallerError(
            "Don't run this installer as root!",
            hints=["Run it as your normal user; sudo is invoked only where needed"],
        )


class PreflightStep:
    step_id = "00_preflight"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        refuse_root()

        logger.info("🎤 NVIDIA Canary Speech-to-Text Installer")
        if ctx.dry_run:
            logger.warning("Dry run: commands that change the system are logged, not executed")

        state["display_server"] = ctx.display.value
        record_decision(state, "display_server", ctx.display.value)
        return state
