"""Structural graph loader — NetworkX DiGraph of groups and edges.

Built fresh for every call that needs it; nothing is cached across calls.
Mutations pass the transaction's own connection so reachability reflects
uncommitted writes made earlier in the same transaction.
At owner scale (thousands of groups) a full rebuild takes a few ms.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

import networkx as nx
from sqlalchemy import select

from groupgraph.infrastructure.database.schema import group_edges, groups

if TYPE_CHECKING:
    from sqlalchemy import Connection

_Graph: TypeAlias = nx.DiGraph


def load_group_graph(conn: Connection, *, owner_id: int | None = None) -> _Graph:
    """Build a DiGraph of groups (nodes) and parent -> child edges.

    Loads all nodes first (so isolated groups appear in the graph), then
    adds edges. When *owner_id* is given only that owner's groups and the
    edges between them are loaded. Edges never cross owners, so the owner's
    subgraph is closed under reachability.
    """
    g: _Graph = nx.DiGraph()

    group_stmt = select(groups.c.id, groups.c.owner_id, groups.c.name)
    if owner_id is not None:
        group_stmt = group_stmt.where(groups.c.owner_id == owner_id)
    for row in conn.execute(group_stmt):
        g.add_node(row.id, owner_id=row.owner_id, name=row.name)

    edge_stmt = select(group_edges.c.id, group_edges.c.parent_id, group_edges.c.child_id)
    if owner_id is not None:
        edge_stmt = edge_stmt.join(groups, groups.c.id == group_edges.c.parent_id).where(
            groups.c.owner_id == owner_id
        )
    for row in conn.execute(edge_stmt):
        g.add_edge(row.parent_id, row.child_id, edge_id=row.id)
    return g
