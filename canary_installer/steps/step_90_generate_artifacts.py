from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import DisplayServer, InstallerConfig
from ..errors import InstallerError
from ..lib.assets import make_executable, render_template, write_file
from ..logging_utils import log_success
from ..pipeline import InstallCtx
from .common import project_dir

logger = logging.getLogger(__name__)


def template_values(cfg: InstallerConfig) -> Dict[str, str]:
    display_tools = {d.value: cfg.smoke_tools(d) for d in DisplayServer}
    return {
        "VENV_DIR": cfg.venv_dir,
        "MAIN_SCRIPT": cfg.artifact("main_script"),
        "HOTKEY_SCRIPT": cfg.artifact("hotkey_script"),
        "LAUNCHER": cfg.artifact("launcher"),
        "SMOKE_TEST": cfg.artifact("smoke_test"),
        "HOTKEY": cfg.artifact("hotkey"),
        "DISPLAY_TOOLS": repr(display_tools),
        "SHARED_TOOLS": repr(cfg.smoke_shared_tools),
        "TOOL_TIMEOUT_S": str(cfg.smoke_timeout_s),
        "TOOLKIT_MODULE": cfg.nemo_check_module,
    }


class GenerateArtifactsStep:
    step_id = "90_generate_artifacts"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        project = project_dir(state)
        cfg = ctx.cfg

        logger.info("Verifying required Python scripts...")
        missing = [name for name in cfg.required_files if not (project / name).is_file()]
        if missing:
            raise InstallerError(
                f"Required Python scripts not found in {project}: {', '.join(missing)}",
                hints=[
                    "Make sure you're running the installer from the cloned repository directory",
                    f"Expected files: {' and '.join(cfg.required_files)}",
                ],
            )
        log_success(logger, "Required Python scripts found")
        for name in cfg.required_files:
            make_executable(project / name, dry_run=ctx.dry_run)

        values = template_values(cfg)
        outputs = [
            ("launcher", "run_speech_service.sh.tmpl", 0o755),
            ("smoke_test", "test_installation.py.tmpl", 0o755),
            ("readme", "README.md.tmpl", None),
        ]
        written = []
        for key, template, mode in outputs:
            path = project / cfg.artifact(key)
            logger.info("Writing %s", path.name)
            write_file(path, render_template(template, values), mode=mode, dry_run=ctx.dry_run)
            written.append(str(path))

        state["artifacts"] = written
        return state
