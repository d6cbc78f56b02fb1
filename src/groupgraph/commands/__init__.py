"""Subcommand modules for groupgraph.

Provides register_commands() which uses deferred imports to keep
``groupgraph --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group.

    5 groups (have subcommands) + 1 standalone command.
    """
    # --- Groups ---
    from groupgraph.commands.edge import edge
    from groupgraph.commands.group import group
    from groupgraph.commands.override import override
    from groupgraph.commands.profile import profile
    from groupgraph.commands.view import view

    cli.add_command(group)
    cli.add_command(profile)
    cli.add_command(edge)
    cli.add_command(override)
    cli.add_command(view)

    # --- Standalone commands ---
    from groupgraph.commands.init_cmd import init_cmd

    cli.add_command(init_cmd)
