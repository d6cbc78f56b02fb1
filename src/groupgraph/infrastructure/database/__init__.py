"""SQLite database engine and schema via SQLAlchemy Core."""

from groupgraph.infrastructure.database.engine import create_db_engine, init_database
from groupgraph.infrastructure.database.schema import (
    group_edges,
    groups,
    inclusion_overrides,
    memberships,
    metadata,
    profiles,
)

__all__ = [
    "create_db_engine",
    "group_edges",
    "groups",
    "inclusion_overrides",
    "init_database",
    "memberships",
    "metadata",
    "profiles",
]
