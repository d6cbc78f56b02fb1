"""VisibilityService — composed read queries over the group graph.

Each call loads a fresh snapshot of the root's reachable subgraph (a
constant number of batched reads) and walks it in memory. Nothing is
cached between calls, so every answer reflects current graph state.

Root existence is checked here, before the core runs; inside the walk
missing references are treated as absent children.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from groupgraph.domain import traversal
from groupgraph.domain.models import ProfileEntry
from groupgraph.domain.traversal import TraversalBudget, TraversalLimitExceeded
from groupgraph.domain.types import Direction
from groupgraph.infrastructure.graph.engine import load_group_graph
from groupgraph.infrastructure.graph.reachability import reachable_ids
from groupgraph.services.base import BaseService, operation
from groupgraph.services.result import RESOURCE_EXHAUSTED, ServiceResult

if TYPE_CHECKING:
    from groupgraph.domain.models import Group
    from groupgraph.domain.snapshot import GraphSnapshot

logger = logging.getLogger(__name__)


class VisibilityService(BaseService):
    """Answers "what is visible from group G"."""

    @property
    def _budget(self) -> TraversalBudget:
        cfg = self._workspace.settings.traversal
        return TraversalBudget(max_nodes=cfg.max_nodes, max_depth=cfg.max_depth)

    def _load(self, group_id: int) -> tuple[Group, GraphSnapshot] | None:
        with self._workspace.reader() as store:
            root = store.get_group(group_id)
            if root is None:
                return None
            return root, store.load_snapshot(group_id)

    def _exhausted(self, op: str, exc: TraversalLimitExceeded) -> ServiceResult:
        logger.warning("%s aborted: %s", op, exc)
        return ServiceResult.failure(
            op,
            RESOURCE_EXHAUSTED,
            str(exc),
            root_id=exc.root_id,
            limit=exc.limit,
            value=exc.value,
        )

    # ------------------------------------------------------------------
    # descendant_list: flat depth-first listing
    # ------------------------------------------------------------------

    @operation("descendant_list")
    def descendant_list(self, group_id: int) -> ServiceResult:
        """Visible descendants of *group_id*, depth-first, siblings by name."""
        op = "descendant_list"
        loaded = self._load(group_id)
        if loaded is None:
            return self._not_found(op, "group", group_id)
        root, snapshot = loaded

        try:
            found = traversal.descendant_list(snapshot, group_id, budget=self._budget)
        except TraversalLimitExceeded as exc:
            return self._exhausted(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "root": root.to_dict(),
                "count": len(found),
                "items": [g.to_dict() for g in found],
            },
        )

    # ------------------------------------------------------------------
    # descendant_tree: nested view with repeat tags
    # ------------------------------------------------------------------

    @operation("descendant_tree")
    def descendant_tree(
        self,
        group_id: int,
        *,
        seen_profile_ids: set[int] | None = None,
    ) -> ServiceResult:
        """Visible descendants of *group_id* as a nested tree.

        The root's own profiles are tagged after the whole tree, with the
        same seen-profiles set: the root comes last in the same post-order.
        Pass *seen_profile_ids* to share repeat tracking with the caller.
        """
        op = "descendant_tree"
        loaded = self._load(group_id)
        if loaded is None:
            return self._not_found(op, "group", group_id)
        root, snapshot = loaded

        seen = seen_profile_ids if seen_profile_ids is not None else set()
        try:
            tree = traversal.descendant_tree(
                snapshot, group_id, seen_profile_ids=seen, budget=self._budget
            )
        except TraversalLimitExceeded as exc:
            return self._exhausted(op, exc)

        root_entries: list[ProfileEntry] = []
        for profile in snapshot.profiles_of(group_id):
            root_entries.append(ProfileEntry(profile, repeated=profile.id in seen))
            seen.add(profile.id)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "root": root.to_dict(),
                "root_profiles": [e.to_dict() for e in root_entries],
                "count": _count_nodes(tree),
                "tree": [node.to_dict() for node in tree],
            },
        )

    # ------------------------------------------------------------------
    # visible_profiles: de-duplicated profile set
    # ------------------------------------------------------------------

    @operation("visible_profiles")
    def visible_profiles(self, group_id: int) -> ServiceResult:
        """Every profile visible from *group_id*, including its own."""
        op = "visible_profiles"
        loaded = self._load(group_id)
        if loaded is None:
            return self._not_found(op, "group", group_id)
        root, snapshot = loaded

        try:
            walked = traversal.walk(snapshot, group_id, budget=self._budget)
        except TraversalLimitExceeded as exc:
            return self._exhausted(op, exc)

        found = traversal.profiles_in(snapshot, walked.visible_group_ids)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "root": root.to_dict(),
                "group_ids": sorted(walked.visible_group_ids),
                "count": len(found),
                "items": [p.to_dict() for p in found],
            },
        )

    # ------------------------------------------------------------------
    # ancestor_ids / full_reachable_ids: structural closures
    # ------------------------------------------------------------------

    @operation("ancestor_ids")
    def ancestor_ids(self, group_id: int) -> ServiceResult:
        """Groups that can reach *group_id* (ignoring inclusion modes)."""
        return self._closure("ancestor_ids", group_id, Direction.ANCESTORS)

    @operation("full_reachable_ids")
    def full_reachable_ids(self, group_id: int) -> ServiceResult:
        """Groups reachable from *group_id* (ignoring inclusion modes)."""
        return self._closure("full_reachable_ids", group_id, Direction.DESCENDANTS)

    def _closure(self, op: str, group_id: int, direction: Direction) -> ServiceResult:
        with self._workspace.reader() as store:
            root = store.get_group(group_id)
            if root is None:
                return self._not_found(op, "group", group_id)
            graph = load_group_graph(store.connection, owner_id=root.owner_id)

        ids = sorted(reachable_ids(graph, group_id, direction))
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": group_id, "direction": direction.value, "count": len(ids), "ids": ids},
        )


def _count_nodes(nodes: list[Any]) -> int:
    count = 0
    stack = list(nodes)
    while stack:
        node = stack.pop()
        count += 1
        stack.extend(node.children)
    return count
