from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ..errors import CommandError, InstallerError
from ..lib.pyenv import VirtualEnv, can_import, pip_install
from ..logging_utils import log_success
from ..pipeline import InstallCtx
from ..state_store import add_warning, record_decision, set_capability
from .common import project_venv

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallStrategy:
    name: str
    requirement: str

    def attempt(self, venv: VirtualEnv, *, dry_run: bool = False) -> bool:
        logger.info("Installing NeMo Toolkit (%s): %s", self.name, self.requirement)
        try:
            pip_install(venv, [self.requirement], dry_run=dry_run)
        except CommandError as e:
            logger.warning("NeMo install strategy '%s' failed (exit %s)", self.name, e.returncode)
            return False
        return True


def install_with_fallback(
    strategies: Sequence[InstallStrategy],
    venv: VirtualEnv,
    *,
    dry_run: bool = False,
) -> Optional[InstallStrategy]:
    """Try strategies in order; return the first that succeeds, None if all fail."""

    for strategy in strategies:
        if strategy.attempt(venv, dry_run=dry_run):
            return strategy
    return None


class InstallNemoStep:
    step_id = "80_install_nemo"

    def strategies(self, ctx: InstallCtx) -> List[InstallStrategy]:
        return [InstallStrategy(name=n, requirement=r) for n, r in ctx.cfg.nemo_strategies]

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        venv = project_venv(ctx, state)
        module = ctx.cfg.nemo_check_module

        if can_import(venv, module):
            log_success(logger, "NeMo Toolkit already installed and functional")
            set_capability(state, "nemo_speechlm", True)
            state["nemo"] = {"strategy": None}
            return state

        logger.info("Installing NVIDIA NeMo Toolkit (this may take a while)...")
        if ctx.cfg.nemo_prerequisites:
            logger.info("Installing NeMo prerequisites: %s", " ".join(ctx.cfg.nemo_prerequisites))
            pip_install(venv, ctx.cfg.nemo_prerequisites, dry_run=ctx.dry_run)

        chosen = install_with_fallback(self.strategies(ctx), venv, dry_run=ctx.dry_run)
        if chosen is None:
            raise InstallerError(
                "All NeMo installation methods failed!",
                hints=[
                    "You may need to install NeMo manually:",
                    "pip install 'nemo_toolkit[all]' or pip install 'git+https://github.com/NVIDIA/NeMo.git'",
                ],
            )
        state["nemo"] = {"strategy": chosen.name}
        record_decision(state, "nemo_strategy", chosen.name)

        logger.info("Installing additional NeMo dependencies...")
        pip_install(venv, ctx.cfg.nemo_extras, dry_run=ctx.dry_run)

        logger.info("Verifying NeMo %s module...", module)
        available = can_import(venv, module)
        set_capability(state, "nemo_speechlm", available)
        if available:
            log_success(logger, "NeMo speechlm module loaded successfully")
            return state

        hints = [
            "This might be a version compatibility issue",
            "Try running: pip install 'git+https://github.com/NVIDIA/NeMo.git@main'",
        ]
        if ctx.cfg.require_speechlm:
            raise InstallerError(f"{module} not available after installation", hints=hints)

        logger.warning("%s not available after installation", module)
        for hint in hints:
            logger.info("%s", hint)
        add_warning(state, {"step": self.step_id, "reason": "speechlm_unavailable", "module": module})
        return state
