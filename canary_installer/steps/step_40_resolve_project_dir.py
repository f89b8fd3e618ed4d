from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..pipeline import InstallCtx
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class ResolveProjectDirStep:
    step_id = "40_resolve_project_dir"

    def _is_checkout(self, ctx: InstallCtx, cwd: Path) -> bool:
        """True when we are already inside a clone of the project."""
        if cwd.name != ctx.cfg.project_dir_name:
            return False
        return any((cwd / marker).is_file() for marker in ctx.cfg.project_markers)

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cwd = Path.cwd()
        override = ctx.cfg.project_dir_override

        if override:
            project = Path(override).expanduser().resolve()
            logger.info("Using configured project directory: %s", project)
        elif self._is_checkout(ctx, cwd):
            project = cwd
            logger.info("Using current directory as project: %s", project)
        else:
            project = ctx.cfg.project_home_dir
            logger.info("Creating project directory: %s", project)

        if project.is_dir():
            if project != cwd:
                logger.warning("Project directory exists. Continuing...")
        elif ctx.dry_run:
            logger.info("Would create %s", project)
        else:
            project.mkdir(parents=True, exist_ok=True)

        state["project"] = {"dir": str(project)}
        record_decision(state, "project_dir", str(project))
        return state
