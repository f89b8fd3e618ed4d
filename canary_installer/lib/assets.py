from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

from .manifests import read_template

logger = logging.getLogger(__name__)


def render_template(name: str, values: Mapping[str, str]) -> str:
    """Fill @KEY@ placeholders in a packaged template.

    @KEY@ is used instead of $KEY because the templates are shell and Python.
    """

    text = read_template(name)
    for key, value in values.items():
        text = text.replace(f"@{key}@", value)
    return text


def write_file(path: Path, contents: str, *, mode: Optional[int] = None, dry_run: bool = False) -> None:
    if dry_run:
        logger.info("Would write %s", path)
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    if mode is not None:
        path.chmod(mode)


def make_executable(path: Path, *, dry_run: bool = False) -> None:
    if dry_run:
        return
    path.chmod(path.stat().st_mode | 0o111)
