from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = "~/.local/state/canary-installer/install.log"

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_RESET = "\033[0m"
_STYLES = {
    logging.DEBUG: ("\033[0;34m", "·  "),
    logging.INFO: ("\033[0;34m", "ℹ️  "),
    SUCCESS: ("\033[0;32m", "✅ "),
    logging.WARNING: ("\033[1;33m", "⚠️  "),
    logging.ERROR: ("\033[0;31m", "❌ "),
    logging.CRITICAL: ("\033[0;31m", "❌ "),
}


class StatusFormatter(logging.Formatter):
    """Console formatter: one coloured, iconographic status line per record."""

    def __init__(self, *, color: bool = True) -> None:
        super().__init__(fmt="%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        color, icon = _STYLES.get(record.levelno, ("", ""))
        if not self.color:
            return f"{icon}{msg}"
        return f"{color}{icon}{msg}{_RESET}"


def log_success(logger: logging.Logger, msg: str, *args: object) -> None:
    logger.log(SUCCESS, msg, *args)


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging.

    The file handler gets full timestamped records; the console gets status
    lines. If the requested log path is not writable we fall back to a file in
    the working directory and keep going.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_canary_configured", False):
        return getattr(logger, "_canary_log_path", log_path)

    requested = os.path.expanduser(log_path)
    chosen_path = requested
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(requested) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(requested)
    except OSError:
        # Fall back to a writable location.
        chosen_path = str(Path.cwd() / "canary-installer.log")
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setFormatter(fmt)
    file_handler.setLevel(logging.DEBUG)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(StatusFormatter(color=sys.stdout.isatty()))
        console.setLevel(level)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_canary_configured", True)
    setattr(logger, "_canary_log_path", chosen_path)

    logging.getLogger(__name__).debug(
        "Logging initialized (requested=%s, actual=%s)", requested, chosen_path
    )
    return chosen_path
