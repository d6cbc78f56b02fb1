"""Tests for the format_result dispatcher and OutputSettings."""

import json

import pytest

from groupgraph.output.formatters import OutputSettings, format_result
from groupgraph.services.result import ServiceError, ServiceResult


def _ok(op: str = "test", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str = "test", msg: str = "fail") -> ServiceResult:
    return ServiceResult(ok=False, op=op, error=ServiceError(code="ERR", message=msg))


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert s.json_output is False
        assert s.quiet is False
        assert s.verbose is False

    def test_frozen(self) -> None:
        s = OutputSettings(json_output=True)
        with pytest.raises(AttributeError):
            s.quiet = True  # type: ignore[misc]


class TestFormatResultJSON:
    def test_json_mode_returns_valid_json(self) -> None:
        result = _ok("create_group", id=3, name="Family")
        output = format_result(result, settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is True
        assert data["op"] == "create_group"
        assert data["data"] == {"id": 3, "name": "Family"}

    def test_json_error(self) -> None:
        output = format_result(_err(msg="nope"), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is False
        assert data["error"]["message"] == "nope"

    def test_json_wins_over_quiet(self) -> None:
        settings = OutputSettings(json_output=True, quiet=True)
        assert json.loads(format_result(_ok(id=1), settings=settings))["data"]["id"] == 1


class TestFormatResultQuiet:
    def test_quiet_prints_id(self) -> None:
        output = format_result(_ok("create_group", id=7), settings=OutputSettings(quiet=True))
        assert output == "7"

    def test_quiet_error(self) -> None:
        output = format_result(_err("get_group", "gone"), settings=OutputSettings(quiet=True))
        assert output.startswith("ERROR: get_group")
        assert "gone" in output


class TestFormatResultRich:
    def test_default_is_rich(self) -> None:
        output = format_result(_ok("create_group", id=7, name="Family"))
        assert output.startswith("OK")
        assert "Family" in output

    def test_verbose_passes_through(self) -> None:
        result = ServiceResult(ok=True, op="create_group", data={"id": 1}, meta={"ms": 3})
        output = format_result(result, settings=OutputSettings(verbose=True))
        assert "meta" in output
