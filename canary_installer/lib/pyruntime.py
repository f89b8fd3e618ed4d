from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..errors import InstallerError
from ..logging_utils import log_success
from .command import run_cmd, which

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"Python\s+(\d+)\.(\d+)(?:\.(\d+))?")

PyVersion = Tuple[int, int, int]


@dataclass(frozen=True)
class PythonRuntime:
    command: str
    path: str
    version: PyVersion

    @property
    def version_str(self) -> str:
        return ".".join(str(v) for v in self.version)


def parse_python_version(text: str) -> Optional[PyVersion]:
    """Parse `python --version` output ("Python 3.12.3") into a tuple."""
    m = _VERSION_RE.search(text or "")
    if not m:
        return None
    return int(m.group(1)), int(m.group(2)), int(m.group(3) or 0)


def version_in_range(version: Sequence[int], lo: Tuple[int, int], hi: Tuple[int, int]) -> bool:
    """Inclusive on both ends, compared on (major, minor)."""
    major_minor = (int(version[0]), int(version[1]))
    return lo <= major_minor <= hi


def probe_version(executable: str) -> Optional[PyVersion]:
    # Python < 3.4 printed --version to stderr.
    r = run_cmd([executable, "--version"], check=False)
    if not r.ok:
        return None
    return parse_python_version(r.stdout or r.stderr)


def resolve_runtime(
    candidates: Sequence[str],
    lo: Tuple[int, int],
    hi: Tuple[int, int],
    *,
    install_hint: str = "",
) -> PythonRuntime:
    """Return the first candidate on PATH whose version is inside [lo, hi]."""

    for cmd in candidates:
        path = which(cmd)
        if not path:
            logger.debug("Python candidate %s not on PATH", cmd)
            continue
        version = probe_version(path)
        if version is None:
            logger.debug("Could not read version from %s", path)
            continue
        if version_in_range(version, lo, hi):
            rt = PythonRuntime(command=cmd, path=path, version=version)
            log_success(logger, "Found compatible Python: %s (%s)", cmd, rt.version_str)
            return rt
        logger.debug("Python candidate %s has unsupported version %s", cmd, version)

    want = f"{lo[0]}.{lo[1]}" if lo == hi else f"{lo[0]}.{lo[1]} - {hi[0]}.{hi[1]}"
    raise InstallerError(
        f"No compatible Python found! Need Python {want}",
        hints=[f"Install with: {install_hint}"] if install_hint else [],
    )
