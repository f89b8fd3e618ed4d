from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import InstallerError
from ..lib.pyenv import run_python
from ..logging_utils import log_success
from ..pipeline import InstallCtx
from ..state_store import set_capability
from .common import project_venv

logger = logging.getLogger(__name__)

VERIFY_CODE = """\
import torch
print(f'PyTorch version: {torch.__version__}')
print(f'CUDA available: {torch.cuda.is_available()}')
if torch.cuda.is_available():
    print(f'GPU device: {torch.cuda.get_device_name(0)}')
    print(f'GPU memory: {torch.cuda.get_device_properties(0).total_memory / 1024**3:.1f} GB')
else:
    print('Running in CPU mode')
"""


def parse_cuda_available(output: str) -> bool:
    for line in output.splitlines():
        if line.startswith("CUDA available:"):
            return line.split(":", 1)[1].strip() == "True"
    return False


class VerifyTorchStep:
    step_id = "65_verify_torch"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Testing PyTorch installation...")
        if ctx.dry_run:
            logger.info("Would verify PyTorch in %s", project_venv(ctx, state).root)
            return state

        r = run_python(project_venv(ctx, state), VERIFY_CODE)
        for line in r.stdout.splitlines():
            logger.info("%s", line)
        if not r.ok:
            raise InstallerError(
                "PyTorch test failed!",
                hints=r.stderr.strip().splitlines()[-3:],
            )

        cuda = parse_cuda_available(r.stdout)
        set_capability(state, "torch", True)
        set_capability(state, "cuda", cuda)
        log_success(logger, "PyTorch installation successful!")
        return state
