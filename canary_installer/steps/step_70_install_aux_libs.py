from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..lib.pyenv import can_import, pip_install
from ..logging_utils import log_success
from ..pipeline import InstallCtx
from .common import project_venv

logger = logging.getLogger(__name__)


class InstallAuxLibsStep:
    step_id = "70_install_aux_libs"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Installing Python dependencies...")
        venv = project_venv(ctx, state)

        missing: List[str] = []
        for module, requirement in ctx.cfg.aux_libraries.items():
            if can_import(venv, module):
                log_success(logger, "%s already installed", module)
            else:
                missing.append(requirement)

        if missing:
            logger.info("Installing missing dependencies: %s", " ".join(missing))
            pip_install(venv, missing, dry_run=ctx.dry_run)
        else:
            log_success(logger, "All basic dependencies already installed")

        state["aux_libraries"] = {"installed": missing}
        return state
