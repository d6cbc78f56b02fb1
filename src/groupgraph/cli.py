"""Root CLI group: output and logging flags, acting owner, traversal budget."""

from __future__ import annotations

from typing import Any

import click

from groupgraph import __version__
from groupgraph.commands import register_commands
from groupgraph.commands._context import AppContext
from groupgraph.config.settings import GroupGraphSettings


def _traversal_overrides(max_nodes: int | None, max_depth: int | None) -> dict[str, Any] | None:
    """``[traversal]`` keys given on the command line, merged over the TOML section."""
    given = {"max_nodes": max_nodes, "max_depth": max_depth}
    given = {key: value for key, value in given.items() if value is not None}
    return given or None


@click.group(
    invoke_without_command=True,
    epilog="Visibility reads honor each edge's inclusion mode; see `groupgraph view --help`.",
)
@click.version_option(version=__version__, prog_name="groupgraph")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Print ids only.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and full result details.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Use this groupgraph.toml.")
@click.option("--owner", "owner_id", type=int, default=None, help="Act as this owner id.")
@click.option(
    "--max-nodes",
    type=click.IntRange(min=1),
    default=None,
    help="Node budget for one traversal (overrides [traversal] max_nodes).",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=1),
    default=None,
    help="Depth budget for one traversal (overrides [traversal] max_depth).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    owner_id: int | None,
    max_nodes: int | None,
    max_depth: int | None,
) -> None:
    """groupgraph — profiles in nested groups, shared through per-edge policies."""
    settings = GroupGraphSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        owner_id=owner_id,
        traversal=_traversal_overrides(max_nodes, max_depth),
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
