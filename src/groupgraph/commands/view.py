"""Command group: what is visible from a group."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from groupgraph.commands._base import GroupGraphGroup
from groupgraph.services.visibility import VisibilityService

if TYPE_CHECKING:
    from groupgraph.commands._context import AppContext

_VIEW_EXAMPLES = """\
  groupgraph view tree 1
  groupgraph view list 1
  groupgraph view profiles 1
  groupgraph view ancestors 5
  groupgraph view reachable 1"""


@click.group(cls=GroupGraphGroup, examples=_VIEW_EXAMPLES)
@click.pass_obj
def view(app: AppContext) -> None:
    """Resolve visibility through edges and overrides."""


@view.command(
    name="list",
    examples="""\
  groupgraph view list 1
  groupgraph -q view list 1""",
)
@click.argument("group_id", type=int)
@click.pass_obj
def list_cmd(app: AppContext, group_id: int) -> None:
    """Visible descendants of GROUP_ID, depth-first."""
    app.emit(VisibilityService(app.workspace).descendant_list(group_id))


@view.command(
    examples="""\
  groupgraph view tree 1
  groupgraph --json view tree 1"""
)
@click.argument("group_id", type=int)
@click.pass_obj
def tree(app: AppContext, group_id: int) -> None:
    """Nested tree of GROUP_ID's visible descendants and their profiles."""
    app.emit(VisibilityService(app.workspace).descendant_tree(group_id))


@view.command(
    examples="""\
  groupgraph view profiles 1
  groupgraph -v view profiles 1"""
)
@click.argument("group_id", type=int)
@click.pass_obj
def profiles(app: AppContext, group_id: int) -> None:
    """Every profile visible from GROUP_ID, including its own."""
    app.emit(VisibilityService(app.workspace).visible_profiles(group_id))


@view.command(
    examples="""\
  groupgraph view ancestors 5"""
)
@click.argument("group_id", type=int)
@click.pass_obj
def ancestors(app: AppContext, group_id: int) -> None:
    """Groups that can reach GROUP_ID, ignoring inclusion modes."""
    app.emit(VisibilityService(app.workspace).ancestor_ids(group_id))


@view.command(
    examples="""\
  groupgraph view reachable 1"""
)
@click.argument("group_id", type=int)
@click.pass_obj
def reachable(app: AppContext, group_id: int) -> None:
    """Groups reachable from GROUP_ID, ignoring inclusion modes."""
    app.emit(VisibilityService(app.workspace).full_reachable_ids(group_id))
