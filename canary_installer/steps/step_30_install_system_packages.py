from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..config import DisplayServer
from ..lib.command import which
from ..lib.pkg import (
    add_user_to_group,
    apt_install,
    apt_update,
    dedup,
    enable_service,
    missing_packages,
    service_is_enabled,
    user_in_group,
)
from ..logging_utils import log_success
from ..pipeline import InstallCtx
from ..state_store import add_warning, record_decision

logger = logging.getLogger(__name__)


class InstallSystemPackagesStep:
    step_id = "30_install_system_packages"

    def desired_packages(self, ctx: InstallCtx) -> List[str]:
        return dedup([*ctx.cfg.base_packages, *ctx.cfg.display_tools(ctx.display)])

    def _configure_input_tools(self, ctx: InstallCtx, state: Dict[str, Any]) -> None:
        if not which("ydotool"):
            return
        logger.info("Configuring ydotool...")

        daemon = ctx.cfg.input_daemon
        if service_is_enabled(daemon):
            logger.debug("%s already enabled", daemon)
        elif not enable_service(daemon, dry_run=ctx.dry_run):
            logger.warning("%s setup skipped", daemon)
            add_warning(state, {"step": self.step_id, "reason": f"{daemon}_enable_failed"})

        group = ctx.cfg.input_group
        if user_in_group(group):
            logger.debug("User already in group %s", group)
        elif add_user_to_group(group, dry_run=ctx.dry_run):
            record_decision(state, "input_group_added", True)
        else:
            logger.warning("%s group assignment skipped", group)
            add_warning(state, {"step": self.step_id, "reason": f"{group}_group_failed"})

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Installing system dependencies...")
        logger.info("Display server detected: %s", ctx.display.value)
        if ctx.display is DisplayServer.WAYLAND:
            logger.info("Wayland tools are primary, X11 tools are the fallback")
        else:
            logger.info("X11 tools are primary, Wayland tools are the fallback")

        desired = self.desired_packages(ctx)
        missing = missing_packages(desired)

        if missing:
            logger.info("Installing: %s", " ".join(missing))
            # Failure here is fatal: CommandError propagates.
            apt_update(dry_run=ctx.dry_run)
            apt_install(missing, dry_run=ctx.dry_run)
        else:
            log_success(logger, "All system packages already installed")

        state.setdefault("system_packages", {})["desired"] = desired
        state["system_packages"]["installed"] = missing

        self._configure_input_tools(ctx, state)
        return state
