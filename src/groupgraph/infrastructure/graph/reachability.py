"""Reachability Engine — full transitive closure, ignoring inclusion mode.

Used for structural safety (cycle and override-target checks) and for
building UI exclusion lists. Never used to decide what is *displayed*:
display goes through the policy-aware traversal in
:mod:`groupgraph.domain.traversal`.

Each call is O(V+E) over the given DiGraph. Results exclude the root.
"""

from __future__ import annotations

import networkx as nx

from groupgraph.domain.types import Direction


def reachable_ids(graph: nx.DiGraph, root: int, direction: Direction) -> set[int]:
    """All group ids reachable from *root* following edges in *direction*.

    Unknown roots reach nothing.
    """
    if root not in graph:
        return set()
    if direction is Direction.ANCESTORS:
        return set(nx.ancestors(graph, root))
    return set(nx.descendants(graph, root))


def descendant_ids(graph: nx.DiGraph, root: int) -> set[int]:
    """Ids reachable from *root* by following parent -> child edges."""
    return reachable_ids(graph, root, Direction.DESCENDANTS)

