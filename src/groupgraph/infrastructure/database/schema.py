"""SQLAlchemy Core table definitions for the groupgraph database.

JSON payloads (``included_subgroup_ids``, profile ``attributes``) are
stored as TEXT and decoded by the repository. Foreign keys cascade on
delete, so removing a group removes its incident edges, the overrides on
those edges or targeting it, and its memberships.
"""

from __future__ import annotations

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

groups = Table(
    "groups",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", Integer, nullable=False),
    Column("name", Text, nullable=False),
    Column("description", Text, nullable=False, default="", server_default=""),
    Column("created", Text, nullable=False),
)

profiles = Table(
    "profiles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", Integer, nullable=False),
    Column("name", Text, nullable=False),
    Column("attributes", Text, nullable=False, default="{}", server_default="{}"),  # JSON
    Column("created", Text, nullable=False),
)

group_edges = Table(
    "group_edges",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("parent_id", Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
    Column("child_id", Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
    Column("inclusion_mode", Text, nullable=False, default="all", server_default="all"),
    Column("included_subgroup_ids", Text, nullable=False, default="[]", server_default="[]"),
    Column("include_direct_profiles", Integer, nullable=False, default=1, server_default="1"),
    Column("created", Text, nullable=False),
    UniqueConstraint("parent_id", "child_id"),
)

inclusion_overrides = Table(
    "inclusion_overrides",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "edge_id",
        Integer,
        ForeignKey("group_edges.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "target_group_id",
        Integer,
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("inclusion_mode", Text, nullable=False, default="all", server_default="all"),
    Column("included_subgroup_ids", Text, nullable=False, default="[]", server_default="[]"),
    Column("include_direct_profiles", Integer, nullable=False, default=1, server_default="1"),
    Column("created", Text, nullable=False),
    UniqueConstraint("edge_id", "target_group_id"),
)

memberships = Table(
    "memberships",
    metadata,
    Column("group_id", Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
    Column("profile_id", Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
    Column("created", Text, nullable=False),
    UniqueConstraint("group_id", "profile_id"),
)

# ---------------------------------------------------------------------------
# Indexes for adjacency lookups
# ---------------------------------------------------------------------------

Index("ix_groups_owner", groups.c.owner_id)
Index("ix_profiles_owner", profiles.c.owner_id)
Index("ix_group_edges_parent", group_edges.c.parent_id)
Index("ix_group_edges_child", group_edges.c.child_id)
Index("ix_inclusion_overrides_edge", inclusion_overrides.c.edge_id)
Index("ix_memberships_profile", memberships.c.profile_id)
