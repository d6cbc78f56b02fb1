"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy Workspace initialization and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from groupgraph.config.logging import configure_logging
from groupgraph.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from groupgraph.config.settings import GroupGraphSettings
    from groupgraph.infrastructure.workspace import Workspace
    from groupgraph.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``. The workspace is lazily
    initialized on first use so ``--help`` and ``--version`` never touch
    the database.
    """

    def __init__(self, settings: GroupGraphSettings) -> None:
        self.settings = settings
        self._workspace: Workspace | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def workspace(self) -> Workspace:
        """The workspace instance (created lazily on first access)."""
        if self._workspace is None:
            from groupgraph.infrastructure.workspace import Workspace

            self._workspace = Workspace(self.settings)
            click.get_current_context().call_on_close(self._workspace.close)
        return self._workspace

    @property
    def owner_id(self) -> int:
        """Acting owner for commands that create or list groups."""
        return self.settings.acting_owner_id

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
