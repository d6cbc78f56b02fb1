"""Jinja2 template loading with per-workspace override support."""

from __future__ import annotations

from pathlib import Path

from jinja2 import BaseLoader, ChoiceLoader, Environment, FileSystemLoader, PackageLoader

from groupgraph.infrastructure.database.engine import DATA_DIRNAME


def build_template_environment(group: str, *, workspace_root: Path | None = None) -> Environment:
    """Build a Jinja2 environment with workspace overrides before packaged defaults.

    Overrides live in ``.groupgraph/templates/<group>/`` inside the workspace,
    so a re-initialized workspace keeps its own config layout.
    """
    loaders: list[BaseLoader] = []
    if workspace_root is not None:
        override_dir = workspace_root / DATA_DIRNAME / "templates" / group
        loaders.append(FileSystemLoader(str(override_dir)))

    loaders.append(PackageLoader("groupgraph", f"templates/{group}"))
    return Environment(loader=ChoiceLoader(loaders), keep_trailing_newline=True)
