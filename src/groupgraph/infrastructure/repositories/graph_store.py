"""GraphStore — SQL access to groups, edges, overrides, and memberships.

Bound to one SQLAlchemy connection: a plain read connection for queries,
or ``txn.conn`` inside a workspace transaction so that reads observe the
transaction's own pending writes.

:meth:`GraphStore.load_snapshot` is the read path for traversals. It
issues one recursive CTE for the root's full reachability and four
batched reads keyed off it, independent of graph depth.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from sqlalchemy import Integer, delete, insert, literal, select, update

from groupgraph.domain.models import (
    Edge,
    EdgeSettings,
    Group,
    Override,
    Profile,
    coerce_subgroup_ids,
)
from groupgraph.domain.snapshot import GraphSnapshot
from groupgraph.domain.types import InclusionMode
from groupgraph.infrastructure.database.schema import (
    group_edges,
    groups,
    inclusion_overrides,
    memberships,
    profiles,
)

if TYPE_CHECKING:
    from sqlalchemy import Connection
    from sqlalchemy.engine import Row


# ---------------------------------------------------------------------------
# Row converters
# ---------------------------------------------------------------------------


def _decode_ids(raw: str | None) -> frozenset[int]:
    if not raw:
        return frozenset()
    try:
        return coerce_subgroup_ids(json.loads(raw))
    except (TypeError, ValueError):
        return frozenset()


def encode_ids(ids: Any) -> str:
    """Serialize subgroup ids as a sorted JSON array."""
    return json.dumps(sorted(coerce_subgroup_ids(ids)))


def _settings_from_row(row: Row[Any]) -> EdgeSettings:
    # Unknown stored modes read as NONE: expose the child, expand nothing.
    mode = InclusionMode.parse(row.inclusion_mode) or InclusionMode.NONE
    return EdgeSettings(
        inclusion_mode=mode,
        included_subgroup_ids=_decode_ids(row.included_subgroup_ids),
        include_direct_profiles=bool(row.include_direct_profiles),
    )


def _group_from_row(row: Row[Any]) -> Group:
    return Group(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        description=row.description or "",
        created=row.created,
    )


def _profile_from_row(row: Row[Any]) -> Profile:
    try:
        attributes = json.loads(row.attributes or "{}")
    except ValueError:
        attributes = {}
    return Profile(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        attributes=attributes if isinstance(attributes, dict) else {},
    )


def _edge_from_row(row: Row[Any]) -> Edge:
    return Edge(
        id=row.id,
        parent_id=row.parent_id,
        child_id=row.child_id,
        settings=_settings_from_row(row),
    )


def _override_from_row(row: Row[Any]) -> Override:
    return Override(
        id=row.id,
        edge_id=row.edge_id,
        target_group_id=row.target_group_id,
        settings=_settings_from_row(row),
    )


def _settings_values(settings: EdgeSettings) -> dict[str, Any]:
    return {
        "inclusion_mode": settings.inclusion_mode.value,
        "included_subgroup_ids": encode_ids(settings.included_subgroup_ids),
        "include_direct_profiles": int(settings.include_direct_profiles),
    }


# ---------------------------------------------------------------------------
# GraphStore
# ---------------------------------------------------------------------------


class GraphStore:
    """Encapsulates SQL for the group graph."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    @property
    def connection(self) -> Connection:
        """The connection this store is bound to."""
        return self._conn

    # -- Groups ---------------------------------------------------------

    def get_group(self, group_id: int) -> Group | None:
        row = self._conn.execute(select(groups).where(groups.c.id == group_id)).first()
        return _group_from_row(row) if row is not None else None

    def list_groups(self, owner_id: int) -> list[Group]:
        """All groups of *owner_id*, sorted by name."""
        stmt = (
            select(groups).where(groups.c.owner_id == owner_id).order_by(groups.c.name, groups.c.id)
        )
        return [_group_from_row(row) for row in self._conn.execute(stmt)]

    def insert_group(self, owner_id: int, name: str, description: str, created: str) -> Group:
        result = self._conn.execute(
            insert(groups).values(
                owner_id=owner_id, name=name, description=description, created=created
            )
        )
        group_id = int(result.inserted_primary_key[0])
        return Group(
            id=group_id, owner_id=owner_id, name=name, description=description, created=created
        )

    def delete_group(self, group_id: int) -> bool:
        result = self._conn.execute(delete(groups).where(groups.c.id == group_id))
        return bool(result.rowcount)

    # -- Profiles -------------------------------------------------------

    def get_profile(self, profile_id: int) -> Profile | None:
        row = self._conn.execute(select(profiles).where(profiles.c.id == profile_id)).first()
        return _profile_from_row(row) if row is not None else None

    def insert_profile(
        self, owner_id: int, name: str, attributes: dict[str, Any], created: str
    ) -> Profile:
        result = self._conn.execute(
            insert(profiles).values(
                owner_id=owner_id,
                name=name,
                attributes=json.dumps(attributes, sort_keys=True),
                created=created,
            )
        )
        profile_id = int(result.inserted_primary_key[0])
        return Profile(id=profile_id, owner_id=owner_id, name=name, attributes=dict(attributes))

    def delete_profile(self, profile_id: int) -> bool:
        result = self._conn.execute(delete(profiles).where(profiles.c.id == profile_id))
        return bool(result.rowcount)

    # -- Memberships ----------------------------------------------------

    def direct_profiles_of(self, group_id: int) -> set[int]:
        """Ids of profiles directly assigned to *group_id*."""
        stmt = select(memberships.c.profile_id).where(memberships.c.group_id == group_id)
        return {int(row.profile_id) for row in self._conn.execute(stmt)}

    def add_membership(self, group_id: int, profile_id: int, created: str) -> bool:
        """Attach a profile to a group. Returns False if already attached."""
        if profile_id in self.direct_profiles_of(group_id):
            return False
        self._conn.execute(
            insert(memberships).values(group_id=group_id, profile_id=profile_id, created=created)
        )
        return True

    def remove_membership(self, group_id: int, profile_id: int) -> bool:
        result = self._conn.execute(
            delete(memberships).where(
                memberships.c.group_id == group_id,
                memberships.c.profile_id == profile_id,
            )
        )
        return bool(result.rowcount)

    # -- Edges ----------------------------------------------------------

    def get_edge(self, edge_id: int) -> Edge | None:
        row = self._conn.execute(select(group_edges).where(group_edges.c.id == edge_id)).first()
        return _edge_from_row(row) if row is not None else None

    def find_edge(self, parent_id: int, child_id: int) -> Edge | None:
        row = self._conn.execute(
            select(group_edges).where(
                group_edges.c.parent_id == parent_id,
                group_edges.c.child_id == child_id,
            )
        ).first()
        return _edge_from_row(row) if row is not None else None

    def children_of(self, group_id: int) -> list[Edge]:
        """Outgoing edges of *group_id*."""
        stmt = select(group_edges).where(group_edges.c.parent_id == group_id)
        return [_edge_from_row(row) for row in self._conn.execute(stmt)]

    def insert_edge(
        self, parent_id: int, child_id: int, settings: EdgeSettings, created: str
    ) -> Edge:
        result = self._conn.execute(
            insert(group_edges).values(
                parent_id=parent_id,
                child_id=child_id,
                created=created,
                **_settings_values(settings),
            )
        )
        edge_id = int(result.inserted_primary_key[0])
        return Edge(id=edge_id, parent_id=parent_id, child_id=child_id, settings=settings)

    def update_edge(self, edge_id: int, settings: EdgeSettings) -> None:
        self._conn.execute(
            update(group_edges)
            .where(group_edges.c.id == edge_id)
            .values(**_settings_values(settings))
        )

    def delete_edge(self, edge_id: int) -> bool:
        result = self._conn.execute(delete(group_edges).where(group_edges.c.id == edge_id))
        return bool(result.rowcount)

    # -- Overrides ------------------------------------------------------

    def list_overrides(self, edge_id: int) -> list[Override]:
        stmt = (
            select(inclusion_overrides)
            .where(inclusion_overrides.c.edge_id == edge_id)
            .order_by(inclusion_overrides.c.target_group_id)
        )
        return [_override_from_row(row) for row in self._conn.execute(stmt)]

    def overrides_of(self, edge_id: int) -> dict[int, EdgeSettings]:
        """Overrides declared on *edge_id*, keyed by target group id."""
        return {ov.target_group_id: ov.settings for ov in self.list_overrides(edge_id)}

    def get_override(self, edge_id: int, target_group_id: int) -> Override | None:
        row = self._conn.execute(
            select(inclusion_overrides).where(
                inclusion_overrides.c.edge_id == edge_id,
                inclusion_overrides.c.target_group_id == target_group_id,
            )
        ).first()
        return _override_from_row(row) if row is not None else None

    def upsert_override(
        self, edge_id: int, target_group_id: int, settings: EdgeSettings, created: str
    ) -> tuple[Override, bool]:
        """Insert or replace the override for (edge, target).

        Returns ``(override, created_new)``.
        """
        existing = self.get_override(edge_id, target_group_id)
        if existing is not None:
            self._conn.execute(
                update(inclusion_overrides)
                .where(inclusion_overrides.c.id == existing.id)
                .values(**_settings_values(settings))
            )
            return Override(existing.id, edge_id, target_group_id, settings), False

        result = self._conn.execute(
            insert(inclusion_overrides).values(
                edge_id=edge_id,
                target_group_id=target_group_id,
                created=created,
                **_settings_values(settings),
            )
        )
        override_id = int(result.inserted_primary_key[0])
        return Override(override_id, edge_id, target_group_id, settings), True

    def delete_override(self, edge_id: int, target_group_id: int) -> bool:
        result = self._conn.execute(
            delete(inclusion_overrides).where(
                inclusion_overrides.c.edge_id == edge_id,
                inclusion_overrides.c.target_group_id == target_group_id,
            )
        )
        return bool(result.rowcount)

    def overrides_by_owner(self, owner_id: int) -> list[Override]:
        """Every override on an edge whose parent belongs to *owner_id*."""
        stmt = (
            select(inclusion_overrides)
            .join(group_edges, group_edges.c.id == inclusion_overrides.c.edge_id)
            .join(groups, groups.c.id == group_edges.c.parent_id)
            .where(groups.c.owner_id == owner_id)
        )
        return [_override_from_row(row) for row in self._conn.execute(stmt)]

    def delete_override_by_id(self, override_id: int) -> None:
        self._conn.execute(
            delete(inclusion_overrides).where(inclusion_overrides.c.id == override_id)
        )

    # -- Snapshot -------------------------------------------------------

    def load_snapshot(self, root_id: int) -> GraphSnapshot:
        """Load everything a traversal from *root_id* can touch.

        The id set is the root's full reachability (a superset of what any
        policy can expose). UNION (not UNION ALL) keeps the CTE finite even
        if stored data were ever cyclic.
        """
        seed = select(literal(root_id, Integer).label("id")).cte("reach", recursive=True)
        reach_alias = seed.alias()
        reach = seed.union(
            select(group_edges.c.child_id.label("id")).where(
                group_edges.c.parent_id == reach_alias.c.id
            )
        )
        reach_ids = select(reach.c.id)

        group_rows = self._conn.execute(select(groups).where(groups.c.id.in_(reach_ids))).all()
        edge_rows = self._conn.execute(
            select(group_edges).where(group_edges.c.parent_id.in_(reach_ids))
        ).all()
        reach_edge_ids = select(group_edges.c.id).where(group_edges.c.parent_id.in_(reach_ids))
        override_rows = self._conn.execute(
            select(inclusion_overrides).where(inclusion_overrides.c.edge_id.in_(reach_edge_ids))
        ).all()

        member_rows = self._conn.execute(
            select(
                memberships.c.group_id,
                profiles.c.id,
                profiles.c.owner_id,
                profiles.c.name,
                profiles.c.attributes,
            )
            .join(profiles, profiles.c.id == memberships.c.profile_id)
            .where(memberships.c.group_id.in_(reach_ids))
        ).all()

        return GraphSnapshot.build(
            groups=[_group_from_row(row) for row in group_rows],
            edges=[_edge_from_row(row) for row in edge_rows],
            overrides=[_override_from_row(row) for row in override_rows],
            profiles={_profile_from_row(row) for row in member_rows},
            memberships=[(row.group_id, row.id) for row in member_rows],
        )
