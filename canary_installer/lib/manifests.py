from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml


def _package_root() -> Path:
    # canary_installer/lib/manifests.py -> canary_installer
    return Path(__file__).resolve().parents[1]


def load_yaml(path: Path) -> Dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML file must contain a mapping/dict: {path}")
    return data


def load_yaml_rel(rel_path: str) -> Dict[str, Any]:
    """Load a YAML file shipped inside the package (manifests/...)."""
    return load_yaml(_package_root() / rel_path.lstrip("/"))


def load_defaults() -> Dict[str, Any]:
    return load_yaml_rel("manifests/defaults.yaml")


def read_template(name: str) -> str:
    return (_package_root() / "templates" / name).read_text(encoding="utf-8")
