"""SQL repositories returning domain value types."""

from groupgraph.infrastructure.repositories.graph_store import GraphStore

__all__ = ["GraphStore"]
