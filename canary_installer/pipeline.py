from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .config import DisplayServer, InstallerConfig
from .lib.prompt import InputFn, ask_yes_no

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallCtx:
    """Per-run context handed to every step; steps never read globals."""

    cfg: InstallerConfig
    display: DisplayServer
    input_fn: InputFn = field(default=input)

    @property
    def dry_run(self) -> bool:
        return self.cfg.dry_run

    def ask(self, question: str, *, default: bool) -> bool:
        if self.cfg.assume_yes:
            logger.info("%s -> yes (assume_yes)", question)
            return True
        return ask_yes_no(question, default=default, input_fn=self.input_fn)


class Step(Protocol):
    """A single idempotent step."""

    step_id: str

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]


def run_pipeline(
    *,
    ctx: InstallCtx,
    state: Dict[str, Any],
    steps: Sequence[Step],
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in order. Each step decides for itself whether work is needed."""

    ran: List[str] = []

    for step in steps:
        state.setdefault("execution", {})["current_step"] = step.step_id
        logger.debug("Running step %s", step.step_id)
        state = step.run(ctx, state)
        ran.append(step.step_id)
        state.setdefault("execution", {}).setdefault("ran_steps", []).append(step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran)
