"""Command group: profiles and their direct group memberships."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import click

from groupgraph.commands._base import GroupGraphGroup
from groupgraph.services.groups import GroupService

if TYPE_CHECKING:
    from groupgraph.commands._context import AppContext

_PROFILE_EXAMPLES = """\
  groupgraph profile create "Alice"
  groupgraph profile create "Bob" --attributes '{"email": "bob@example.com"}'
  groupgraph profile add 3 7
  groupgraph profile remove 3 7
  groupgraph profile delete 7"""


def _parse_attributes(
    _ctx: click.Context, _param: click.Parameter, value: str | None
) -> dict[str, Any] | None:
    if value is None:
        return None
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise click.BadParameter("must be a JSON object")
    return parsed


@click.group(cls=GroupGraphGroup, examples=_PROFILE_EXAMPLES)
@click.pass_obj
def profile(app: AppContext) -> None:
    """Create profiles and assign them to groups."""


@profile.command(
    examples="""\
  groupgraph profile create "Alice"
  groupgraph profile create "Bob" --attributes '{"city": "Lisbon"}'"""
)
@click.argument("name")
@click.option(
    "--attributes",
    default=None,
    callback=_parse_attributes,
    help="Opaque JSON object stored with the profile.",
)
@click.pass_obj
def create(app: AppContext, name: str, attributes: dict[str, Any] | None) -> None:
    """Create a profile owned by the acting owner."""
    app.emit(GroupService(app.workspace).create_profile(name, attributes=attributes))


@profile.command(
    examples="""\
  groupgraph profile delete 7"""
)
@click.argument("profile_id", type=int)
@click.pass_obj
def delete(app: AppContext, profile_id: int) -> None:
    """Delete a profile and all of its memberships."""
    app.emit(GroupService(app.workspace).delete_profile(profile_id))


@profile.command(
    examples="""\
  groupgraph profile add 3 7"""
)
@click.argument("group_id", type=int)
@click.argument("profile_id", type=int)
@click.pass_obj
def add(app: AppContext, group_id: int, profile_id: int) -> None:
    """Assign PROFILE_ID directly to GROUP_ID."""
    app.emit(GroupService(app.workspace).add_profile(group_id, profile_id))


@profile.command(
    examples="""\
  groupgraph profile remove 3 7"""
)
@click.argument("group_id", type=int)
@click.argument("profile_id", type=int)
@click.pass_obj
def remove(app: AppContext, group_id: int, profile_id: int) -> None:
    """Remove PROFILE_ID's direct membership in GROUP_ID."""
    app.emit(GroupService(app.workspace).remove_profile(group_id, profile_id))
