"""NetworkX-backed structural graph: loader and reachability closures."""

from groupgraph.infrastructure.graph.engine import load_group_graph
from groupgraph.infrastructure.graph.reachability import descendant_ids, reachable_ids

__all__ = ["descendant_ids", "load_group_graph", "reachable_ids"]
