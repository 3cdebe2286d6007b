"""Config file discovery.

The nearest ``grpcwiz.toml`` wins.  A ``pyproject.toml`` carrying a
``[tool.grpcwiz]`` table counts as a config file in the same walk, so a
project can keep its generator settings next to its packaging metadata.
``GRPCWIZ_CONFIG`` short-circuits the walk.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "grpcwiz.toml"
PYPROJECT_FILENAME = "pyproject.toml"
CONFIG_ENV_VAR = "GRPCWIZ_CONFIG"


def _tool_table(data: dict[str, Any]) -> dict[str, Any] | None:
    table = data.get("tool", {}).get("grpcwiz")
    return table if isinstance(table, dict) else None


def _declares_tool_table(pyproject: Path) -> bool:
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError:
        # Someone else's broken file; keep walking.
        return False
    return _tool_table(data) is not None


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file governing *start* (default: cwd), or None."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = directory / PYPROJECT_FILENAME
        if pyproject.is_file() and _declares_tool_table(pyproject):
            return pyproject
    return None


def read_config(path: Path) -> dict[str, Any]:
    """Parse *path* into settings data.

    Raises:
        tomllib.TOMLDecodeError: The file is not valid TOML.
    """
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    if path.name == PYPROJECT_FILENAME:
        return _tool_table(data) or {}
    return data
