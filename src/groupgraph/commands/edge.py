"""Command group: governed parent -> child edges."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from groupgraph.commands._base import (
    GroupGraphGroup,
    fail_fast_option,
    mode_option,
    profiles_option,
    select_option,
)
from groupgraph.services.edges import EdgeService

if TYPE_CHECKING:
    from groupgraph.commands._context import AppContext

_EDGE_EXAMPLES = """\
  groupgraph edge create 1 2
  groupgraph edge create 1 2 --mode selected --select 5 --select 6
  groupgraph edge create 1 2 --mode none --no-profiles
  groupgraph edge update 4 --mode all
  groupgraph edge update 4 --clear-selection
  groupgraph edge delete 4"""


@click.group(cls=GroupGraphGroup, examples=_EDGE_EXAMPLES)
@click.pass_obj
def edge(app: AppContext) -> None:
    """Connect groups with inclusion policies."""


@edge.command(
    examples="""\
  groupgraph edge create 1 2
  groupgraph edge create 1 2 --mode selected --select 5
  groupgraph edge create 1 2 --mode none --no-profiles
  groupgraph --json edge create 2 1 --fail-fast"""
)
@click.argument("parent_id", type=int)
@click.argument("child_id", type=int)
@mode_option
@select_option
@profiles_option
@fail_fast_option
@click.pass_obj
def create(
    app: AppContext,
    parent_id: int,
    child_id: int,
    inclusion_mode: str | None,
    included_subgroup_ids: tuple[int, ...],
    include_direct_profiles: bool | None,
    fail_fast: bool,
) -> None:
    """Create an edge PARENT_ID -> CHILD_ID after validating it."""
    app.emit(
        EdgeService(app.workspace).create_edge(
            parent_id,
            child_id,
            inclusion_mode=inclusion_mode,
            included_subgroup_ids=included_subgroup_ids,
            include_direct_profiles=include_direct_profiles,
            sweep=not fail_fast,
        )
    )


@edge.command(
    examples="""\
  groupgraph edge update 4 --mode selected --select 9
  groupgraph edge update 4 --no-profiles
  groupgraph edge update 4 --clear-selection"""
)
@click.argument("edge_id", type=int)
@mode_option
@select_option
@click.option("--clear-selection", is_flag=True, help="Empty the selected subgroup list.")
@profiles_option
@click.pass_obj
def update(
    app: AppContext,
    edge_id: int,
    inclusion_mode: str | None,
    included_subgroup_ids: tuple[int, ...],
    clear_selection: bool,
    include_direct_profiles: bool | None,
) -> None:
    """Change an edge's policy. Omitted options keep their value."""
    selection: tuple[int, ...] | None = included_subgroup_ids or None
    if clear_selection:
        if included_subgroup_ids:
            raise click.UsageError("--select and --clear-selection are mutually exclusive.")
        selection = ()
    app.emit(
        EdgeService(app.workspace).update_edge(
            edge_id,
            inclusion_mode=inclusion_mode,
            included_subgroup_ids=selection,
            include_direct_profiles=include_direct_profiles,
        )
    )


@edge.command(
    examples="""\
  groupgraph edge delete 4"""
)
@click.argument("edge_id", type=int)
@click.pass_obj
def delete(app: AppContext, edge_id: int) -> None:
    """Delete an edge and the overrides declared on it."""
    app.emit(EdgeService(app.workspace).delete_edge(edge_id))
