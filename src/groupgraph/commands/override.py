"""Command group: per-edge inclusion overrides."""

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

_OVERRIDE_EXAMPLES = """\
  groupgraph override set 4 9 --mode none
  groupgraph override set 4 9 --mode selected --select 12 --no-profiles
  groupgraph override list 4
  groupgraph override delete 4 9"""


@click.group(cls=GroupGraphGroup, examples=_OVERRIDE_EXAMPLES)
@click.pass_obj
def override(app: AppContext) -> None:
    """Replace a reachable group's policy along one edge."""


@override.command(
    name="set",
    examples="""\
  groupgraph override set 4 9 --mode none
  groupgraph --json override set 4 9 --mode selected --select 12""",
)
@click.argument("edge_id", type=int)
@click.argument("target_group_id", type=int)
@mode_option
@select_option
@profiles_option
@fail_fast_option
@click.pass_obj
def set_cmd(
    app: AppContext,
    edge_id: int,
    target_group_id: int,
    inclusion_mode: str | None,
    included_subgroup_ids: tuple[int, ...],
    include_direct_profiles: bool | None,
    fail_fast: bool,
) -> None:
    """Create or replace the override for TARGET_GROUP_ID on EDGE_ID."""
    app.emit(
        EdgeService(app.workspace).upsert_override(
            edge_id,
            target_group_id,
            inclusion_mode=inclusion_mode,
            included_subgroup_ids=included_subgroup_ids,
            include_direct_profiles=include_direct_profiles,
            sweep=not fail_fast,
        )
    )


@override.command(
    name="list",
    examples="""\
  groupgraph override list 4""",
)
@click.argument("edge_id", type=int)
@click.pass_obj
def list_cmd(app: AppContext, edge_id: int) -> None:
    """List the overrides declared on EDGE_ID."""
    app.emit(EdgeService(app.workspace).list_overrides(edge_id))


@override.command(
    examples="""\
  groupgraph override delete 4 9"""
)
@click.argument("edge_id", type=int)
@click.argument("target_group_id", type=int)
@click.pass_obj
def delete(app: AppContext, edge_id: int, target_group_id: int) -> None:
    """Remove the override for TARGET_GROUP_ID on EDGE_ID."""
    app.emit(EdgeService(app.workspace).delete_override(edge_id, target_group_id))
