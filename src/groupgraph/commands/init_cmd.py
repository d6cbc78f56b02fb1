"""Command: workspace initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from groupgraph.commands._base import GroupGraphCommand
from groupgraph.domain.types import INCLUSION_MODES
from groupgraph.services.init import InitService

if TYPE_CHECKING:
    from groupgraph.commands._context import AppContext

_INIT_EXAMPLES = """\
  groupgraph init
  groupgraph init /path/to/workspace
  groupgraph init . --default-mode selected --no-default-profiles
  groupgraph --owner 42 init --force"""


@click.command("init", cls=GroupGraphCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option(
    "--default-mode",
    type=click.Choice(INCLUSION_MODES, case_sensitive=False),
    default="all",
    help="Inclusion mode for edges created without --mode.",
)
@click.option(
    "--default-profiles/--no-default-profiles",
    default=True,
    help="Whether new edges show the child's direct profiles.",
)
@click.option("--force", is_flag=True, help="Rewrite an existing groupgraph.toml.")
@click.pass_obj
def init_cmd(
    app: AppContext,
    path: str,
    default_mode: str,
    default_profiles: bool,
    force: bool,
) -> None:
    """Initialize a groupgraph workspace."""
    app.emit(
        InitService.init_workspace(
            Path(path).resolve(),
            owner_id=app.owner_id,
            inclusion_mode=default_mode,
            include_direct_profiles=default_profiles,
            force=force,
        )
    )
