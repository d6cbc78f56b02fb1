"""GroupService — groups, profiles, and memberships.

Plumbing around the visibility core: enough lifecycle to build and tear
down graphs. Deleting a group cascades (via foreign keys) to its incident
edges, to overrides on those edges or targeting the group, and to its
memberships.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, or_, select

from groupgraph.domain.validation import CROSS_OWNER, Violation
from groupgraph.infrastructure.database.schema import group_edges, memberships
from groupgraph.services._helpers import now_iso
from groupgraph.services.base import BaseService, operation
from groupgraph.services.edges import prune_stale_overrides
from groupgraph.services.result import ServiceResult

logger = logging.getLogger(__name__)

BLANK_NAME = "BLANK_NAME"


def _blank_name() -> Violation:
    return Violation(code=BLANK_NAME, field="name", message="can't be blank")


class GroupService(BaseService):
    """Handles group, profile, and membership lifecycle."""

    def _owner(self, owner_id: int | None) -> int:
        return owner_id if owner_id is not None else self._workspace.settings.acting_owner_id

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    @operation("create_group")
    def create_group(
        self,
        name: str,
        *,
        owner_id: int | None = None,
        description: str = "",
    ) -> ServiceResult:
        """Create a group owned by *owner_id* (default: the acting owner)."""
        op = "create_group"
        name = name.strip()
        owner = self._owner(owner_id)
        if not name:
            return self._rejected(op, [_blank_name()], attempted={"owner_id": owner})

        with self._workspace.transaction(owner_id=owner) as txn:
            group = txn.store.insert_group(owner, name, description, now_iso())

        logger.debug("Created group %s (%s)", group.id, group.name)
        return ServiceResult(ok=True, op=op, data=group.to_dict())

    @operation("get_group")
    def get_group(self, group_id: int) -> ServiceResult:
        """A group with its outgoing edges and direct profile ids."""
        op = "get_group"
        with self._workspace.reader() as store:
            group = store.get_group(group_id)
            if group is None:
                return self._not_found(op, "group", group_id)
            edges = store.children_of(group_id)
            profile_ids = store.direct_profiles_of(group_id)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                **group.to_dict(),
                "edges": [e.to_dict() for e in sorted(edges, key=lambda e: e.child_id)],
                "profile_ids": sorted(profile_ids),
            },
        )

    @operation("list_groups")
    def list_groups(self, *, owner_id: int | None = None) -> ServiceResult:
        """All groups of an owner, sorted by name."""
        owner = self._owner(owner_id)
        with self._workspace.reader() as store:
            found = store.list_groups(owner)
        return ServiceResult(
            ok=True,
            op="list_groups",
            data={"owner_id": owner, "count": len(found), "items": [g.to_dict() for g in found]},
        )

    @operation("delete_group")
    def delete_group(self, group_id: int) -> ServiceResult:
        """Delete a group and everything incident to it."""
        op = "delete_group"
        with self._workspace.reader() as store:
            group = store.get_group(group_id)
        if group is None:
            return self._not_found(op, "group", group_id)

        with self._workspace.transaction(owner_id=group.owner_id) as txn:
            edge_count = txn.conn.execute(
                select(func.count())
                .select_from(group_edges)
                .where(
                    or_(group_edges.c.parent_id == group_id, group_edges.c.child_id == group_id)
                )
            ).scalar_one()
            member_count = txn.conn.execute(
                select(func.count())
                .select_from(memberships)
                .where(memberships.c.group_id == group_id)
            ).scalar_one()
            txn.store.delete_group(group_id)
            pruned = prune_stale_overrides(txn)

        logger.debug("Deleted group %s with %d edges", group_id, edge_count)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": group_id,
                "name": group.name,
                "edges_removed": int(edge_count),
                "memberships_removed": int(member_count),
                "overrides_pruned": pruned,
            },
        )

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    @operation("create_profile")
    def create_profile(
        self,
        name: str,
        *,
        owner_id: int | None = None,
        attributes: dict[str, Any] | None = None,
    ) -> ServiceResult:
        """Create a profile owned by *owner_id* (default: the acting owner)."""
        op = "create_profile"
        name = name.strip()
        owner = self._owner(owner_id)
        if not name:
            return self._rejected(op, [_blank_name()], attempted={"owner_id": owner})

        with self._workspace.transaction(owner_id=owner) as txn:
            profile = txn.store.insert_profile(owner, name, attributes or {}, now_iso())
        return ServiceResult(ok=True, op=op, data=profile.to_dict())

    @operation("delete_profile")
    def delete_profile(self, profile_id: int) -> ServiceResult:
        op = "delete_profile"
        with self._workspace.reader() as store:
            profile = store.get_profile(profile_id)
        if profile is None:
            return self._not_found(op, "profile", profile_id)

        with self._workspace.transaction(owner_id=profile.owner_id) as txn:
            txn.store.delete_profile(profile_id)
        return ServiceResult(ok=True, op=op, data={"id": profile_id, "name": profile.name})

    # ------------------------------------------------------------------
    # Memberships
    # ------------------------------------------------------------------

    @operation("add_profile")
    def add_profile(self, group_id: int, profile_id: int) -> ServiceResult:
        """Attach a profile directly to a group (idempotent)."""
        op = "add_profile"
        with self._workspace.reader() as store:
            group = store.get_group(group_id)
            profile = store.get_profile(profile_id)
        if group is None:
            return self._not_found(op, "group", group_id)
        if profile is None:
            return self._not_found(op, "profile", profile_id)
        if group.owner_id != profile.owner_id:
            violation = Violation(
                code=CROSS_OWNER, field="profile", message="must belong to the same user"
            )
            return self._rejected(
                op, [violation], attempted={"group_id": group_id, "profile_id": profile_id}
            )

        warnings: list[str] = []
        with self._workspace.transaction(owner_id=group.owner_id) as txn:
            if txn.store.get_group(group_id) is None:
                return self._not_found(op, "group", group_id)
            if txn.store.get_profile(profile_id) is None:
                return self._not_found(op, "profile", profile_id)
            added = txn.store.add_membership(group_id, profile_id, now_iso())
        if not added:
            warnings.append(f"Profile {profile_id} is already in group {group_id}")
        return ServiceResult(
            ok=True,
            op=op,
            data={"group_id": group_id, "profile_id": profile_id, "added": added},
            warnings=warnings,
        )

    @operation("remove_profile")
    def remove_profile(self, group_id: int, profile_id: int) -> ServiceResult:
        """Detach a profile from a group."""
        op = "remove_profile"
        with self._workspace.reader() as store:
            group = store.get_group(group_id)
        if group is None:
            return self._not_found(op, "group", group_id)

        with self._workspace.transaction(owner_id=group.owner_id) as txn:
            removed = txn.store.remove_membership(group_id, profile_id)
        if not removed:
            return self._not_found(op, "membership", profile_id)
        return ServiceResult(
            ok=True, op=op, data={"group_id": group_id, "profile_id": profile_id}
        )
