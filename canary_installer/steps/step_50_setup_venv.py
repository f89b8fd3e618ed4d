from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.pyenv import create_venv, pip_install, remove_venv, venv_version
from ..lib.pyruntime import version_in_range
from ..logging_utils import log_success
from ..pipeline import InstallCtx
from ..state_store import record_decision
from .common import project_venv, runtime_path

logger = logging.getLogger(__name__)


class SetupVenvStep:
    step_id = "50_setup_venv"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        venv = project_venv(ctx, state)
        lo, hi = ctx.cfg.python_range
        reuse = False

        if venv.exists():
            logger.info("Existing virtual environment found, checking compatibility...")
            version = venv_version(venv)
            shown = ".".join(str(v) for v in version) if version else "unknown"
            if version is not None and version_in_range(version, lo, hi):
                log_success(logger, "Compatible virtual environment found (Python %s)", shown)
                reuse = True
            else:
                logger.warning("Incompatible Python version in venv (%s), recreating...", shown)
                remove_venv(venv, dry_run=ctx.dry_run)

        if reuse:
            logger.info("Using existing virtual environment")
        else:
            logger.info("Creating new Python virtual environment...")
            create_venv(runtime_path(state), venv, dry_run=ctx.dry_run)
            logger.info("Upgrading pip...")
            pip_install(venv, ["pip"], upgrade=True, dry_run=ctx.dry_run)

        state["venv"] = {"path": str(venv.root), "created": not reuse}
        record_decision(state, "venv_created", not reuse)
        return state
