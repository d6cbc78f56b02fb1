"""Tests for Rich Console factory and theme."""

from io import StringIO

import pytest

from groupgraph.output.console import (
    GROUPGRAPH_THEME,
    create_console,
    get_output,
    style_for_mode,
)


class TestCreateConsole:
    def test_returns_console_with_stringio(self) -> None:
        console = create_console()
        assert isinstance(console.file, StringIO)

    def test_no_color_disables_ansi(self) -> None:
        console = create_console(no_color=True)
        console.print("[gg.error]hello[/gg.error]")
        output = get_output(console)
        assert "\x1b" not in output
        assert "hello" in output

    def test_custom_width(self) -> None:
        assert create_console(width=80).width == 80

    def test_default_width(self) -> None:
        assert create_console().width == 120

    def test_theme_styles_resolve(self) -> None:
        console = create_console()
        console.print("[gg.repeated]Ann (repeated)[/gg.repeated]")
        assert "Ann (repeated)" in get_output(console)


class TestTheme:
    @pytest.mark.parametrize(
        "name",
        ["gg.ok", "gg.error", "gg.warning", "gg.id", "gg.repeated", "gg.mode.none"],
    )
    def test_style_defined(self, name: str) -> None:
        assert name in GROUPGRAPH_THEME.styles


class TestStyleForMode:
    @pytest.mark.parametrize("mode", ["all", "selected", "none"])
    def test_known_modes(self, mode: str) -> None:
        assert style_for_mode(mode) == f"gg.mode.{mode}"

    def test_unknown_mode_is_unstyled(self) -> None:
        assert style_for_mode("sometimes") == ""
