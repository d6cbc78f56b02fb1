"""Tests for BaseService and service inheritance."""

import io
import json
import logging
from collections.abc import Generator
from pathlib import Path

import pytest

from groupgraph.config.logging import configure_logging
from groupgraph.config.settings import GroupGraphSettings
from groupgraph.domain.validation import Violation
from groupgraph.infrastructure.workspace import Workspace
from groupgraph.services.base import BaseService, operation
from groupgraph.services.edges import EdgeService
from groupgraph.services.groups import GroupService
from groupgraph.services.result import ServiceResult
from groupgraph.services.visibility import VisibilityService


class TestBaseService:
    def test_workspace_stored(self, tmp_path: Path) -> None:
        ws = Workspace(GroupGraphSettings.from_cli(root=tmp_path))
        try:
            assert BaseService(ws)._workspace is ws
        finally:
            ws.close()

    def test_not_found_result(self) -> None:
        result = BaseService._not_found("get_group", "group", 42)
        assert not result.ok
        assert result.error.code == "NOT_FOUND"
        assert result.error.message == "Group 42 not found"
        assert result.error.detail == {"kind": "group", "id": 42}

    def test_rejected_carries_every_violation(self) -> None:
        violations = [
            Violation("SELF_LOOP", "child_group", "cannot be the same as the parent group"),
            Violation("INVALID_MODE", "inclusion_mode", "'x' is not included in the list"),
        ]
        result = BaseService._rejected("create_edge", violations, attempted={"parent_id": 1})
        assert result.error.code == "VALIDATION_FAILED"
        detail = result.error.detail
        assert [v["code"] for v in detail["violations"]] == ["SELF_LOOP", "INVALID_MODE"]
        assert detail["attempted"] == {"parent_id": 1}
        assert "child_group cannot be the same as the parent group" in result.error.message


class TestOperation:
    @pytest.fixture
    def log_stream(self) -> Generator[io.StringIO]:
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        app_level = logging.getLogger("groupgraph").level
        stream = io.StringIO()
        configure_logging(verbose=True, log_json=True, stream=stream)
        yield stream
        root.handlers = handlers
        root.setLevel(level)
        logging.getLogger("groupgraph").setLevel(app_level)

    def test_outcome_logged_with_op(self, workspace: Workspace, log_stream: io.StringIO) -> None:
        result = GroupService(workspace).get_group(404)
        assert result.error.code == "NOT_FOUND"

        records = [json.loads(line) for line in log_stream.getvalue().splitlines()]
        outcome = records[-1]
        assert outcome["op"] == "get_group"
        assert "ok=False code=NOT_FOUND" in outcome["event"]

    def test_wraps_preserve_metadata(self) -> None:
        class NoopService(BaseService):
            @operation("noop")
            def noop(self) -> ServiceResult:
                """Do nothing."""
                return ServiceResult(ok=True, op="noop")

        assert NoopService.noop.__name__ == "noop"
        assert NoopService.noop.__doc__ == "Do nothing."


ALL_SERVICES = [GroupService, EdgeService, VisibilityService]


class TestServiceInheritance:
    @pytest.mark.parametrize("service_cls", ALL_SERVICES, ids=lambda c: c.__name__)
    def test_inherits_base_service(self, service_cls: type) -> None:
        assert issubclass(service_cls, BaseService)

    @pytest.mark.parametrize("service_cls", ALL_SERVICES, ids=lambda c: c.__name__)
    def test_workspace_injection(self, service_cls: type, workspace: Workspace) -> None:
        assert service_cls(workspace)._workspace is workspace
