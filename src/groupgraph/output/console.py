"""Rich Console factory and theme for groupgraph output.

Consoles render into a StringIO buffer so formatters keep a plain
``format_result() -> str`` contract. In non-TTY environments (tests,
pipes) Rich disables color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

GROUPGRAPH_THEME = Theme(
    {
        "gg.ok": "bold green",
        "gg.error": "bold red",
        "gg.warning": "bold yellow",
        "gg.op": "bold cyan",
        "gg.key": "dim",
        "gg.id": "bold blue",
        "gg.name": "bold",
        "gg.repeated": "dim italic",
        "gg.mode.all": "green",
        "gg.mode.selected": "yellow",
        "gg.mode.none": "red",
    }
)

_MODE_STYLES: dict[str, str] = {
    "all": "gg.mode.all",
    "selected": "gg.mode.selected",
    "none": "gg.mode.none",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=GROUPGRAPH_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_mode(inclusion_mode: str) -> str:
    """Return the Rich style name for an inclusion mode."""
    return _MODE_STYLES.get(inclusion_mode, "")
