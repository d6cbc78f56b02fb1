"""Shared pytest fixtures and test helpers for groupgraph tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from groupgraph.config.settings import GroupGraphSettings
from groupgraph.domain.models import Edge, EdgeSettings, Group, Override, Profile
from groupgraph.domain.snapshot import GraphSnapshot
from groupgraph.domain.types import InclusionMode
from groupgraph.infrastructure.database.engine import init_database
from groupgraph.infrastructure.workspace import Workspace


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Engine:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """Temporary workspace directory.

    Single source of truth for the workspace location; ``workspace`` and
    ``_isolated_workspace`` both build on it.
    """
    return tmp_path


@pytest.fixture
def workspace(workspace_root: Path) -> Workspace:
    """Fully initialized workspace on a temp directory."""
    settings = GroupGraphSettings.from_cli(root=workspace_root)
    ws = Workspace(settings)
    try:
        yield ws
    finally:
        ws.close()


@pytest.fixture
def _isolated_workspace(workspace_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp workspace root so the CLI creates an isolated database.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command test
    classes. Also clears ``GROUPGRAPH_*`` variables that would leak in from
    the developer's environment.
    """
    monkeypatch.chdir(workspace_root)
    monkeypatch.delenv("GROUPGRAPH_CONFIG", raising=False)
    monkeypatch.delenv("GROUPGRAPH_OWNER_ID", raising=False)


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------


def make_group(workspace: Workspace, name: str, **kwargs: Any) -> dict[str, Any]:
    """Create a group via GroupService, asserting success."""
    from groupgraph.services.groups import GroupService

    result = GroupService(workspace).create_group(name, **kwargs)
    assert result.ok, result.error
    return result.data


def make_profile(workspace: Workspace, name: str, **kwargs: Any) -> dict[str, Any]:
    """Create a profile via GroupService, asserting success."""
    from groupgraph.services.groups import GroupService

    result = GroupService(workspace).create_profile(name, **kwargs)
    assert result.ok, result.error
    return result.data


def assign(workspace: Workspace, group: dict[str, Any], *profiles: dict[str, Any]) -> None:
    """Attach *profiles* directly to *group*, asserting success."""
    from groupgraph.services.groups import GroupService

    svc = GroupService(workspace)
    for profile in profiles:
        result = svc.add_profile(group["id"], profile["id"])
        assert result.ok, result.error


def make_edge(
    workspace: Workspace,
    parent: dict[str, Any],
    child: dict[str, Any],
    **kwargs: Any,
) -> dict[str, Any]:
    """Create an edge via EdgeService, asserting success."""
    from groupgraph.services.edges import EdgeService

    result = EdgeService(workspace).create_edge(parent["id"], child["id"], **kwargs)
    assert result.ok, result.error
    return result.data


# ---------------------------------------------------------------------------
# In-memory snapshots (used by domain tests; no database involved)
# ---------------------------------------------------------------------------


class SnapshotBuilder:
    """Fluent builder for :class:`GraphSnapshot` fixtures.

    Groups and profiles are addressed by name; ids are assigned in
    insertion order starting at 1.
    """

    def __init__(self, owner_id: int = 1) -> None:
        self.owner_id = owner_id
        self.groups: dict[str, Group] = {}
        self.profiles: dict[str, Profile] = {}
        self.edges: dict[tuple[str, str], Edge] = {}
        self.overrides: list[Override] = []
        self.memberships: list[tuple[int, int]] = []

    def group(self, name: str, *, owner_id: int | None = None) -> Group:
        if name not in self.groups:
            owner = self.owner_id if owner_id is None else owner_id
            self.groups[name] = Group(id=len(self.groups) + 1, owner_id=owner, name=name)
        return self.groups[name]

    def id(self, name: str) -> int:
        return self.groups[name].id

    def edge(
        self,
        parent: str,
        child: str,
        mode: InclusionMode = InclusionMode.ALL,
        *,
        selected: tuple[str, ...] = (),
        profiles: bool = True,
    ) -> SnapshotBuilder:
        p, c = self.group(parent), self.group(child)
        for name in selected:
            self.group(name)
        settings = EdgeSettings(
            inclusion_mode=mode,
            included_subgroup_ids=frozenset(self.id(n) for n in selected),
            include_direct_profiles=profiles,
        )
        self.edges[parent, child] = Edge(
            id=len(self.edges) + 1, parent_id=p.id, child_id=c.id, settings=settings
        )
        return self

    def override(
        self,
        parent: str,
        child: str,
        target: str,
        mode: InclusionMode,
        *,
        selected: tuple[str, ...] = (),
        profiles: bool = True,
    ) -> SnapshotBuilder:
        edge = self.edges[parent, child]
        settings = EdgeSettings(
            inclusion_mode=mode,
            included_subgroup_ids=frozenset(self.id(n) for n in selected),
            include_direct_profiles=profiles,
        )
        self.overrides.append(
            Override(
                id=len(self.overrides) + 1,
                edge_id=edge.id,
                target_group_id=self.group(target).id,
                settings=settings,
            )
        )
        return self

    def members(self, group: str, *names: str) -> SnapshotBuilder:
        gid = self.group(group).id
        for name in names:
            if name not in self.profiles:
                self.profiles[name] = Profile(
                    id=len(self.profiles) + 1, owner_id=self.owner_id, name=name
                )
            self.memberships.append((gid, self.profiles[name].id))
        return self

    def build(self) -> GraphSnapshot:
        return GraphSnapshot.build(
            groups=self.groups.values(),
            edges=self.edges.values(),
            overrides=self.overrides,
            profiles=self.profiles.values(),
            memberships=self.memberships,
        )


def names(groups: list[Group]) -> list[str]:
    """Group names in order, for readable assertions."""
    return [g.name for g in groups]


# ---------------------------------------------------------------------------
# CLI helpers (used by command test modules)
# ---------------------------------------------------------------------------


def invoke_json(runner: CliRunner, *args: str) -> dict[str, Any]:
    """Invoke ``groupgraph --json ARGS`` and parse the payload.

    Successful results are printed to stdout and failures to stderr; the
    payload is read from whichever stream the exit code points at.
    """
    from groupgraph.cli import cli

    result = runner.invoke(cli, ["--json", *args])
    stream = result.stdout if result.exit_code == 0 else result.stderr
    assert stream.strip(), f"no output for {args!r}: {result.output!r}"
    return json.loads(stream)
