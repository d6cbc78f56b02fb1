"""Rich/JSON output routing.

The CLI renders a ServiceResult for humans (Rich trees and tables) or for
machines (``--json``). ``--quiet`` reduces output to ids, one per line.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from groupgraph.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from groupgraph.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output-mode flags resolved from the CLI."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display.

    JSON wins over quiet, and quiet wins over the Rich renderers.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
