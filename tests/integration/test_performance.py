"""End-to-end performance regression tests.

Visibility queries load their subgraph with a fixed number of batched
statements and then walk it in memory. These tests count the SQL
statements a query issues and time whole workflows on graphs large enough
to expose per-node queries or quadratic walks.

Thresholds are generous (10-50x typical) to avoid CI flakes while still
catching serious regressions.
"""

from __future__ import annotations

import time
from collections.abc import Generator
from typing import Any

import pytest
from sqlalchemy import event

from groupgraph.domain.models import EdgeSettings
from groupgraph.infrastructure.workspace import Workspace
from groupgraph.services._helpers import now_iso
from groupgraph.services.visibility import VisibilityService

# ── Thresholds ───────────────────────────────────────────────────────

# Full visibility query over a few thousand groups
QUERY_MS = 3000

# Statements issued by one snapshot load
SNAPSHOT_STATEMENTS = 4


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def statements(workspace: Workspace) -> Generator[list[str]]:
    """Record every SQL statement executed on the workspace engine."""
    seen: list[str] = []

    def _record(_conn: Any, _cursor: Any, statement: str, *_args: Any) -> None:
        seen.append(statement)

    event.listen(workspace.engine, "before_cursor_execute", _record)
    yield seen
    event.remove(workspace.engine, "before_cursor_execute", _record)


def _bulk_tree(workspace: Workspace, *, fanout: int, depth: int) -> int:
    """Build a complete tree directly through the store; returns the root id."""
    created = now_iso()
    with workspace.transaction(owner_id=1) as txn:
        root = txn.store.insert_group(1, "root", "", created)
        profile = txn.store.insert_profile(1, "shared", {}, created)
        level = [root.id]
        for d in range(depth):
            nxt: list[int] = []
            for parent_id in level:
                for i in range(fanout):
                    child = txn.store.insert_group(1, f"g{d}-{parent_id}-{i}", "", created)
                    txn.store.insert_edge(parent_id, child.id, EdgeSettings(), created)
                    txn.store.add_membership(child.id, profile.id, created)
                    nxt.append(child.id)
            level = nxt
    return root.id


# ── Query shape ──────────────────────────────────────────────────────


class TestSnapshotQueries:
    def test_statement_count_independent_of_size(
        self, workspace: Workspace, statements: list[str]
    ) -> None:
        small = _bulk_tree(workspace, fanout=2, depth=2)
        large = _bulk_tree(workspace, fanout=3, depth=5)
        svc = VisibilityService(workspace)

        statements.clear()
        assert svc.descendant_tree(small).ok
        small_count = len(statements)

        statements.clear()
        assert svc.descendant_tree(large).ok
        large_count = len(statements)

        assert small_count == large_count
        # One root lookup plus the batched snapshot reads.
        assert large_count <= SNAPSHOT_STATEMENTS + 1


# ── Wall-clock workflows ─────────────────────────────────────────────


class TestVisibilityPerformance:
    def test_wide_tree(self, workspace: Workspace) -> None:
        root = _bulk_tree(workspace, fanout=6, depth=4)  # 1554 groups
        svc = VisibilityService(workspace)

        start = time.perf_counter()
        tree = svc.descendant_tree(root)
        listed = svc.descendant_list(root)
        profiles = svc.visible_profiles(root)
        elapsed_ms = (time.perf_counter() - start) * 1000

        assert tree.ok and listed.ok and profiles.ok
        assert listed.data["count"] == 6 + 36 + 216 + 1296
        assert profiles.data["count"] == 1
        assert elapsed_ms < QUERY_MS, f"visibility queries took {elapsed_ms:.1f}ms"

    def test_long_chain(self, workspace: Workspace) -> None:
        """A chain deeper than the interpreter's recursion limit still resolves."""
        created = now_iso()
        with workspace.transaction(owner_id=1) as txn:
            ids = [txn.store.insert_group(1, f"n{i:04d}", "", created).id for i in range(2000)]
            for parent_id, child_id in zip(ids, ids[1:], strict=False):
                txn.store.insert_edge(parent_id, child_id, EdgeSettings(), created)

        traversal = workspace.settings.traversal.model_copy(update={"max_depth": 5000})
        settings = workspace.settings.model_copy(update={"traversal": traversal})
        deep = Workspace(settings)
        try:
            start = time.perf_counter()
            result = VisibilityService(deep).descendant_tree(ids[0])
            elapsed_ms = (time.perf_counter() - start) * 1000
        finally:
            deep.close()

        assert result.ok, result.error
        assert result.data["count"] == 1999
        assert elapsed_ms < QUERY_MS, f"chain traversal took {elapsed_ms:.1f}ms"

