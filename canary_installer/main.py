from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .config import detect_display_server, load_config
from .errors import InstallerError
from .lib.prompt import InputFn
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import InstallCtx, run_pipeline
from .state_store import ensure_defaults, save_state
from .steps import (
    GenerateArtifactsStep,
    InstallAuxLibsStep,
    InstallNemoStep,
    InstallSystemPackagesStep,
    InstallTorchStep,
    PreflightStep,
    ProbeAcceleratorStep,
    ResolveProjectDirStep,
    ResolveRuntimeStep,
    SetupVenvStep,
    SmokeTestStep,
    SummaryStep,
    VerifyTorchStep,
)
from .steps.step_00_preflight import refuse_root

logger = logging.getLogger(__name__)


def build_steps():
    return [
        PreflightStep(),
        ResolveRuntimeStep(),
        ProbeAcceleratorStep(),
        InstallSystemPackagesStep(),
        ResolveProjectDirStep(),
        SetupVenvStep(),
        InstallTorchStep(),
        VerifyTorchStep(),
        InstallAuxLibsStep(),
        InstallNemoStep(),
        GenerateArtifactsStep(),
        SmokeTestStep(),
        SummaryStep(),
    ]


def _state_path(explicit: Optional[str], state: Dict[str, Any], rel: str) -> Optional[str]:
    if explicit:
        return explicit
    project = (state.get("project") or {}).get("dir")
    if not project:
        return None
    return str(Path(project) / rel)


def run(
    *,
    config_path: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    state_path: Optional[str] = None,
    log_path: str = DEFAULT_LOG_PATH,
    stop_after: Optional[str] = None,
    verbose: bool = False,
    env: Optional[Mapping[str, str]] = None,
    input_fn: InputFn = input,
) -> Dict[str, Any]:
    """Run the installer pipeline and write the run report."""

    # Before the log file exists, so a root run leaves nothing behind.
    refuse_root()
    actual_log_path = configure_logging(log_path=log_path, level=logging.DEBUG if verbose else logging.INFO)

    cfg = load_config(config_path, overrides)
    ctx = InstallCtx(cfg=cfg, display=detect_display_server(env), input_fn=input_fn)

    state = ensure_defaults({})
    state["execution"]["log_path"] = actual_log_path

    try:
        result = run_pipeline(ctx=ctx, state=state, steps=build_steps(), stop_after=stop_after)
        return result.state
    except Exception as e:
        state.setdefault("execution", {}).setdefault("errors", []).append(
            {
                "step": (state.get("execution") or {}).get("current_step"),
                "error": str(e),
            }
        )
        raise
    finally:
        path = _state_path(state_path, state, cfg.state_file)
        if path and not cfg.dry_run:
            save_state(path, state)


def handoff(command: str) -> None:
    """Replace this process with the generated launcher."""
    logger.info("Starting service...")
    os.execv(command, [command])


def _overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    run_cfg: Dict[str, Any] = {}
    if args.dry_run:
        run_cfg["dry_run"] = True
    if args.yes:
        run_cfg["assume_yes"] = True
    if args.no_launch:
        run_cfg["launch"] = False
    if run_cfg:
        overrides["run"] = run_cfg
    if args.project_dir:
        overrides["project"] = {"dir": args.project_dir}
    if args.require_speechlm:
        overrides["nemo"] = {"require_speechlm": True}
    return overrides


def main(argv: Optional[list[str]] = None, *, input_fn: InputFn = input) -> int:
    p = argparse.ArgumentParser(
        prog="canary-installer",
        description="Provision a machine for the NVIDIA Canary speech-to-text service.",
    )
    p.add_argument("--config", default=None, help="YAML file merged over the built-in defaults")
    p.add_argument("--project-dir", default=None, help="Project directory (default: auto-detect)")
    p.add_argument("--state", default=None, help="Path to run report (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    p.add_argument("--stop-after", default=None, help="Stop after step_id (e.g. 50_setup_venv)")
    p.add_argument("--dry-run", action="store_true", help="Log system-changing commands without running them")
    p.add_argument("--yes", action="store_true", help="Answer yes to every prompt")
    p.add_argument("--no-launch", action="store_true", help="Do not offer to start the service")
    p.add_argument("--require-speechlm", action="store_true", help="Fail if the NeMo speechlm module is unavailable")
    p.add_argument("-v", "--verbose", action="store_true", help="Show debug output on the console")

    args = p.parse_args(argv)

    try:
        state = run(
            config_path=args.config,
            overrides=_overrides_from_args(args),
            state_path=args.state,
            log_path=args.log,
            stop_after=args.stop_after,
            verbose=bool(args.verbose),
            input_fn=input_fn,
        )
    except InstallerError as e:
        logger.error("%s", e)
        for hint in e.hints:
            logger.info("%s", hint)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted; re-run the installer to resume")
        return 130
    except Exception:
        logger.exception("Installer failed")
        return 1

    launch = state.get("launch") or {}
    if launch.get("requested"):
        handoff(str(launch["command"]))
    return 0
