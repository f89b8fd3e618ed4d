from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.pyruntime import resolve_runtime
from ..pipeline import InstallCtx
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class ResolveRuntimeStep:
    step_id = "10_resolve_runtime"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Checking Python version...")
        lo, hi = ctx.cfg.python_range
        rt = resolve_runtime(
            ctx.cfg.python_candidates,
            lo,
            hi,
            install_hint=ctx.cfg.python_install_hint,
        )
        state["runtime"] = {"command": rt.command, "path": rt.path, "version": rt.version_str}
        record_decision(state, "python", f"{rt.command} ({rt.version_str})")
        return state
