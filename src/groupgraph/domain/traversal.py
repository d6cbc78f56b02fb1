"""Traversal Engine — what is visible from a group.

A single depth-first walk over a :class:`GraphSnapshot` materializes
three views of the same policy-governed expansion:

- the flat descendant list (pre-order, each level sorted by child name);
- the nested tree of :class:`TreeNode`;
- the set of group ids whose direct profiles are visible.

Expansion rules for an edge with effective settings ``s``:

- ``all``: every sub-edge of the child is followed;
- ``selected``: only sub-edges whose child id is in
  ``s.included_subgroup_ids`` are followed, each with its own effective
  settings;
- ``none``: the child is listed once and not expanded (leaf boundary).

The walk uses an explicit stack, so depth is bounded by
:class:`TraversalBudget` rather than by the interpreter's recursion limit.
A group reachable along several paths appears once per path.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from groupgraph.domain.models import Edge, EdgeSettings, Group, Profile, ProfileEntry, TreeNode
from groupgraph.domain.policy import EMPTY_OVERRIDES, OverrideMap, PolicyResolver
from groupgraph.domain.snapshot import GraphSnapshot
from groupgraph.domain.types import InclusionMode

logger = logging.getLogger(__name__)


class TraversalLimitExceeded(Exception):
    """The reachable subgraph is larger or deeper than the configured budget.

    Resource exhaustion is deterministic for a given graph state, so
    callers must not retry.
    """

    def __init__(self, root_id: int, limit: str, value: int) -> None:
        self.root_id = root_id
        self.limit = limit
        self.value = value
        super().__init__(f"Traversal from group {root_id} exceeded {limit}={value}")


@dataclass(frozen=True)
class TraversalBudget:
    """Upper bounds on materialized nodes and nesting depth."""

    max_nodes: int = 10_000
    max_depth: int = 256


@dataclass
class Traversal:
    """Materialized result of one walk from ``root_id``."""

    root_id: int
    tree: list[TreeNode] = field(default_factory=list)
    order: list[Group] = field(default_factory=list)
    visible_group_ids: set[int] = field(default_factory=set)


def _expandable(edges: Iterable[Edge], settings: EdgeSettings) -> list[Edge]:
    """Sub-edges followed under *settings*."""
    if settings.inclusion_mode is InclusionMode.NONE:
        return []
    if settings.inclusion_mode is InclusionMode.SELECTED:
        wanted = settings.included_subgroup_ids
        return [e for e in edges if e.child_id in wanted]
    return list(edges)


def _ordered(snapshot: GraphSnapshot, edges: Iterable[Edge]) -> list[tuple[Edge, Group]]:
    """Pair edges with their child groups, sorted by child name then id.

    Edges whose child is missing from the snapshot are dropped.
    """
    pairs: list[tuple[Edge, Group]] = []
    for edge in edges:
        child = snapshot.group(edge.child_id)
        if child is None:
            logger.warning(
                "Edge %s references missing group %s; treating as no child",
                edge.id,
                edge.child_id,
            )
            continue
        pairs.append((edge, child))
    pairs.sort(key=lambda pair: (pair[1].name, pair[1].id))
    return pairs


def walk(
    snapshot: GraphSnapshot,
    root_id: int,
    *,
    budget: TraversalBudget | None = None,
) -> Traversal:
    """Walk the policy-governed descendants of *root_id*.

    Raises:
        TraversalLimitExceeded: more than ``budget.max_nodes`` nodes would be
            materialized or nesting would exceed ``budget.max_depth``.
    """
    budget = budget or TraversalBudget()
    resolver = PolicyResolver(snapshot.overrides_of)
    result = Traversal(root_id=root_id, visible_group_ids={root_id})

    # (edge, child, inherited overrides, sibling list to append to, depth)
    stack: list[tuple[Edge, Group, OverrideMap, list[TreeNode], int]] = []

    def push(
        edges: Iterable[Edge], inherited: OverrideMap, sink: list[TreeNode], depth: int
    ) -> None:
        for edge, child in reversed(_ordered(snapshot, edges)):
            stack.append((edge, child, inherited, sink, depth))

    push(snapshot.children_of(root_id), EMPTY_OVERRIDES, result.tree, 1)

    while stack:
        edge, child, inherited, sink, depth = stack.pop()
        if depth > budget.max_depth:
            raise TraversalLimitExceeded(root_id, "max_depth", budget.max_depth)
        if len(result.order) >= budget.max_nodes:
            raise TraversalLimitExceeded(root_id, "max_nodes", budget.max_nodes)

        settings, merged = resolver.resolve(edge, inherited)
        node = TreeNode(
            group=child,
            inclusion_mode=settings.inclusion_mode,
            include_direct_profiles=settings.include_direct_profiles,
        )
        if settings.include_direct_profiles:
            node.direct_profiles = [ProfileEntry(p) for p in snapshot.profiles_of(child.id)]
            result.visible_group_ids.add(child.id)

        sink.append(node)
        result.order.append(child)
        sub_edges = _expandable(snapshot.children_of(child.id), settings)
        push(sub_edges, merged, node.children, depth + 1)

    logger.debug("Walked %d nodes from group %s", len(result.order), root_id)
    return result


def tag_repeats(nodes: list[TreeNode], seen_profile_ids: set[int]) -> None:
    """Mark every non-first occurrence of a profile as ``repeated``.

    Depth-first in sibling (alphabetical) order; a node's subtree is tagged
    before the node's own profiles. *seen_profile_ids* is updated in place
    so callers can share it across several trees or pre-seed it.
    """
    stack: list[tuple[TreeNode, bool]] = [(n, False) for n in reversed(nodes)]
    while stack:
        node, children_done = stack.pop()
        if not children_done:
            stack.append((node, True))
            stack.extend((c, False) for c in reversed(node.children))
            continue
        for entry in node.direct_profiles:
            entry.repeated = entry.profile.id in seen_profile_ids
            seen_profile_ids.add(entry.profile.id)


def descendant_list(
    snapshot: GraphSnapshot,
    root_id: int,
    *,
    budget: TraversalBudget | None = None,
) -> list[Group]:
    """Visible descendants of *root_id*, depth-first."""
    return walk(snapshot, root_id, budget=budget).order


def descendant_tree(
    snapshot: GraphSnapshot,
    root_id: int,
    *,
    seen_profile_ids: set[int] | None = None,
    budget: TraversalBudget | None = None,
) -> list[TreeNode]:
    """Visible descendants of *root_id* as a nested tree with repeat tags.

    A fresh seen-profiles set is created per call unless one is supplied.
    """
    tree = walk(snapshot, root_id, budget=budget).tree
    tag_repeats(tree, seen_profile_ids if seen_profile_ids is not None else set())
    return tree


def visible_profile_group_ids(
    snapshot: GraphSnapshot,
    root_id: int,
    *,
    budget: TraversalBudget | None = None,
) -> set[int]:
    """Ids of groups whose direct profiles are visible from *root_id*.

    The root is always included.
    """
    return walk(snapshot, root_id, budget=budget).visible_group_ids


def visible_profiles(
    snapshot: GraphSnapshot,
    root_id: int,
    *,
    budget: TraversalBudget | None = None,
) -> list[Profile]:
    """De-duplicated direct profiles of every visible group, sorted by name."""
    return profiles_in(snapshot, visible_profile_group_ids(snapshot, root_id, budget=budget))


def profiles_in(snapshot: GraphSnapshot, group_ids: Iterable[int]) -> list[Profile]:
    """Union of the direct profiles of *group_ids*, sorted by name then id."""
    ids: set[int] = set()
    for group_id in group_ids:
        ids |= snapshot.direct_profiles_of(group_id)
    found = [snapshot.profiles[pid] for pid in ids if pid in snapshot.profiles]
    return sorted(found, key=lambda p: (p.name, p.id))
