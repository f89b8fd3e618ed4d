from __future__ import annotations

import getpass
import logging
import os
from typing import List, Optional, Sequence

from .command import run_cmd, sudo

logger = logging.getLogger(__name__)


def dedup(items: Sequence[str]) -> List[str]:
    """De-dup while preserving order."""
    out: List[str] = []
    for item in items:
        if item not in out:
            out.append(item)
    return out


def dpkg_is_installed(package: str) -> bool:
    r = run_cmd(["dpkg-query", "-W", "-f=${Status}", package], check=False)
    return r.ok and "install ok installed" in r.stdout


def missing_packages(packages: Sequence[str]) -> List[str]:
    return [p for p in dedup(packages) if not dpkg_is_installed(p)]


def apt_update(*, dry_run: bool = False) -> None:
    run_cmd(sudo(["apt-get", "update"]), stream=True, dry_run=dry_run)


def apt_install(packages: Sequence[str], *, dry_run: bool = False) -> None:
    if not packages:
        return
    run_cmd(sudo(["apt-get", "install", "-y", *packages]), stream=True, dry_run=dry_run)


def service_is_enabled(unit: str) -> bool:
    r = run_cmd(["systemctl", "is-enabled", unit], check=False)
    return r.ok and r.stdout.strip() == "enabled"


def enable_service(unit: str, *, dry_run: bool = False) -> bool:
    r = run_cmd(sudo(["systemctl", "enable", "--now", unit]), check=False, stream=True, dry_run=dry_run)
    return r.ok


def current_user() -> str:
    return os.environ.get("USER") or getpass.getuser()


def user_groups(user: Optional[str] = None) -> List[str]:
    r = run_cmd(["id", "-nG", user or current_user()], check=False)
    return r.stdout.split() if r.ok else []


def user_in_group(group: str, user: Optional[str] = None) -> bool:
    return group in user_groups(user)


def add_user_to_group(group: str, user: Optional[str] = None, *, dry_run: bool = False) -> bool:
    r = run_cmd(
        sudo(["usermod", "-a", "-G", group, user or current_user()]),
        check=False,
        stream=True,
        dry_run=dry_run,
    )
    return r.ok
