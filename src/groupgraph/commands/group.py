"""Command group: create, inspect, and delete groups."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from groupgraph.commands._base import GroupGraphGroup
from groupgraph.services.groups import GroupService

if TYPE_CHECKING:
    from groupgraph.commands._context import AppContext

_GROUP_EXAMPLES = """\
  groupgraph group create "Friends"
  groupgraph group create "Close Friends" --description "the inner circle"
  groupgraph group list
  groupgraph --owner 2 group list
  groupgraph group show 3
  groupgraph group delete 3"""


@click.group(cls=GroupGraphGroup, examples=_GROUP_EXAMPLES)
@click.pass_obj
def group(app: AppContext) -> None:
    """Create, list, and delete groups."""


@group.command(
    examples="""\
  groupgraph group create "Friends"
  groupgraph --owner 2 group create "Work" --description "colleagues"
  groupgraph --json group create Family"""
)
@click.argument("name")
@click.option("--description", default="", help="Free-text description.")
@click.pass_obj
def create(app: AppContext, name: str, description: str) -> None:
    """Create a group owned by the acting owner."""
    app.emit(GroupService(app.workspace).create_group(name, description=description))


@group.command(
    name="list",
    examples="""\
  groupgraph group list
  groupgraph -q group list""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List the acting owner's groups."""
    app.emit(GroupService(app.workspace).list_groups())


@group.command(
    examples="""\
  groupgraph group show 3
  groupgraph --json group show 3"""
)
@click.argument("group_id", type=int)
@click.pass_obj
def show(app: AppContext, group_id: int) -> None:
    """Show a group with its outgoing edges and direct profiles."""
    app.emit(GroupService(app.workspace).get_group(group_id))


@group.command(
    examples="""\
  groupgraph group delete 3"""
)
@click.argument("group_id", type=int)
@click.pass_obj
def delete(app: AppContext, group_id: int) -> None:
    """Delete a group together with its edges and memberships."""
    app.emit(GroupService(app.workspace).delete_group(group_id))
