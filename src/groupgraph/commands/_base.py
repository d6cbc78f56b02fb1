"""Custom Click base classes with --examples support.

Provides GroupGraphCommand and GroupGraphGroup that accept an ``examples``
parameter. When ``--examples`` is passed, the command prints usage
examples and exits, which keeps ``--help`` concise.
"""

from __future__ import annotations

from typing import Any

import click

from groupgraph.domain.types import INCLUSION_MODES


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class GroupGraphCommand(click.Command):
    """Click Command subclass that supports an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class GroupGraphGroup(click.Group):
    """Click Group subclass that supports an ``--examples`` flag.

    Sets ``command_class = GroupGraphCommand`` so all subcommands accept
    the ``examples`` parameter without explicit ``cls=`` each time.
    """

    command_class = GroupGraphCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


# --- Shared options -------------------------------------------------------

# Mode values pass through unvalidated so the service can report
# INVALID_MODE alongside any other violation of the same request.
mode_option = click.option(
    "--mode",
    "inclusion_mode",
    default=None,
    metavar="[" + "|".join(INCLUSION_MODES) + "]",
    help="Inclusion mode for the child's own children.",
)

select_option = click.option(
    "--select",
    "included_subgroup_ids",
    multiple=True,
    type=int,
    help="Subgroup id to include under 'selected' mode (repeatable).",
)

profiles_option = click.option(
    "--profiles/--no-profiles",
    "include_direct_profiles",
    default=None,
    help="Show or hide the child's directly assigned profiles.",
)

fail_fast_option = click.option(
    "--fail-fast",
    "fail_fast",
    is_flag=True,
    help="Stop at the first violation instead of reporting them all.",
)
