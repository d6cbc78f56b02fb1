"""Config file discovery and loading.

Walk-up finder locates groupgraph.toml, similar to how git finds .git/.
Supports the GROUPGRAPH_CONFIG env var and --config CLI flag overrides.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from groupgraph.config.models import GroupGraphConfig

CONFIG_FILENAME = "groupgraph.toml"
CONFIG_ENV_VAR = "GROUPGRAPH_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for groupgraph.toml.

    Returns the path to the config file, or None if not found.
    Checks GROUPGRAPH_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def load_config(path: Path | None = None, cwd: Path | None = None) -> GroupGraphConfig:
    """Load and validate config from a TOML file.

    If *path* is None, uses find_config(*cwd*) to discover the file.
    Returns default GroupGraphConfig if no file is found.
    """
    if path is None:
        path = find_config(cwd)
    if path is None:
        return GroupGraphConfig()

    data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    return GroupGraphConfig.model_validate(data)
