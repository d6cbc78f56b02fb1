"""EdgeService — validated mutation of edges and inclusion overrides.

Every structural mutation runs inside an owner-serialized workspace
transaction and re-checks reachability against the transaction's own
connection before committing (create, update, delete of edges and
overrides). Validation failures come back as ``VALIDATION_FAILED``
results listing every violated check.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from groupgraph.domain.models import Edge, EdgeSettings, coerce_subgroup_ids
from groupgraph.domain.types import InclusionMode
from groupgraph.domain.validation import check_mode, validate_edge, validate_override
from groupgraph.infrastructure.graph.reachability import descendant_ids
from groupgraph.services._helpers import format_ids, now_iso
from groupgraph.services.base import BaseService, operation
from groupgraph.services.result import ServiceResult

if TYPE_CHECKING:
    from groupgraph.infrastructure.workspace import WorkspaceTransaction

logger = logging.getLogger(__name__)


def prune_stale_overrides(txn: WorkspaceTransaction) -> int:
    """Delete overrides whose target left their edge child's reachability.

    Removing an edge (or a group) can disconnect a target from the child
    of an edge that carries an override for it. Such overrides can never
    match again. Returns the number removed.
    """
    if txn.owner_id is None:
        return 0
    graph = txn.group_graph()
    edges: dict[int, Edge | None] = {}
    reach: dict[int, set[int]] = {}
    removed = 0
    for ov in txn.store.overrides_by_owner(txn.owner_id):
        if ov.edge_id not in edges:
            edges[ov.edge_id] = txn.store.get_edge(ov.edge_id)
        edge = edges[ov.edge_id]
        if edge is None:
            continue
        if ov.target_group_id == edge.child_id:
            continue
        if edge.child_id not in reach:
            reach[edge.child_id] = descendant_ids(graph, edge.child_id)
        if ov.target_group_id not in reach[edge.child_id]:
            txn.store.delete_override_by_id(ov.id)
            removed += 1
    return removed


def _selection_warnings(
    settings: EdgeSettings, child_edges: Iterable[Edge], child_name: str
) -> list[str]:
    """Non-fatal notes about ``included_subgroup_ids`` that will be inert."""
    if not settings.included_subgroup_ids:
        return []
    if settings.inclusion_mode is not InclusionMode.SELECTED:
        return [
            "included_subgroup_ids only apply when inclusion_mode is 'selected'; "
            f"they are stored but ignored under '{settings.inclusion_mode.value}'"
        ]
    actual = {e.child_id for e in child_edges}
    dangling = settings.included_subgroup_ids - actual
    if not dangling:
        return []
    return [
        f"Groups {format_ids(dangling)} are not children of '{child_name}'; they have no effect"
    ]


class EdgeService(BaseService):
    """Creates, updates, and deletes edges and their overrides."""

    def _default_mode(self, inclusion_mode: Any) -> Any:
        if inclusion_mode is None:
            return self._workspace.settings.defaults.inclusion_mode
        return inclusion_mode

    def _default_direct(self, include_direct_profiles: bool | None) -> bool:
        if include_direct_profiles is None:
            return self._workspace.settings.defaults.include_direct_profiles
        return include_direct_profiles

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    @operation("create_edge")
    def create_edge(
        self,
        parent_id: int,
        child_id: int,
        *,
        inclusion_mode: str | InclusionMode | None = None,
        included_subgroup_ids: Iterable[int] = (),
        include_direct_profiles: bool | None = None,
        sweep: bool = True,
    ) -> ServiceResult:
        """Validate and create a ``parent -> child`` edge.

        Args:
            parent_id: Parent group id.
            child_id: Child group id.
            inclusion_mode: ``all``, ``selected`` or ``none``.
            included_subgroup_ids: Children of *child_id* to expand under
                ``selected``. Unknown ids are kept but inert.
            include_direct_profiles: Whether the child's own profiles are
                visible through this edge.
            sweep: Report every violated check rather than the first.
        """
        op = "create_edge"
        mode_raw = self._default_mode(inclusion_mode)
        attempted = {
            "parent_id": parent_id,
            "child_id": child_id,
            "inclusion_mode": str(mode_raw),
            "included_subgroup_ids": sorted(coerce_subgroup_ids(included_subgroup_ids)),
        }

        with self._workspace.reader() as store:
            parent = store.get_group(parent_id)
        if parent is None:
            return self._not_found(op, "group", parent_id)

        with self._workspace.transaction(owner_id=parent.owner_id) as txn:
            # Re-read under the owner lock: the parent may have been deleted
            # while this call waited for it.
            parent = txn.store.get_group(parent_id)
            if parent is None:
                return self._not_found(op, "group", parent_id)
            child = txn.store.get_group(child_id)
            if child is None:
                return self._not_found(op, "group", child_id)

            violations = validate_edge(
                parent,
                child,
                mode_raw,
                duplicate=txn.store.find_edge(parent_id, child_id) is not None,
                child_reaches=lambda: descendant_ids(txn.group_graph(), child_id),
                sweep=sweep,
            )
            if violations:
                return self._rejected(op, violations, attempted=attempted)

            settings = EdgeSettings(
                inclusion_mode=InclusionMode(str(mode_raw).lower()),
                included_subgroup_ids=coerce_subgroup_ids(included_subgroup_ids),
                include_direct_profiles=self._default_direct(include_direct_profiles),
            )
            edge = txn.store.insert_edge(parent_id, child_id, settings, now_iso())
            warnings = _selection_warnings(settings, txn.store.children_of(child_id), child.name)

        logger.debug("Created edge %s: %s -> %s", edge.id, parent_id, child_id)
        return ServiceResult(ok=True, op=op, data=edge.to_dict(), warnings=warnings)

    @operation("update_edge")
    def update_edge(
        self,
        edge_id: int,
        *,
        inclusion_mode: str | InclusionMode | None = None,
        included_subgroup_ids: Iterable[int] | None = None,
        include_direct_profiles: bool | None = None,
    ) -> ServiceResult:
        """Partially update an edge's policy. Omitted fields keep their value."""
        op = "update_edge"
        with self._workspace.reader() as store:
            edge = store.get_edge(edge_id)
            parent = store.get_group(edge.parent_id) if edge is not None else None
        if edge is None or parent is None:
            return self._not_found(op, "edge", edge_id)

        if inclusion_mode is not None:
            violation = check_mode(inclusion_mode)
            if violation is not None:
                attempted = {"id": edge_id, "inclusion_mode": str(inclusion_mode)}
                return self._rejected(op, [violation], attempted=attempted)

        with self._workspace.transaction(owner_id=parent.owner_id) as txn:
            current = txn.store.get_edge(edge_id)
            if current is None:
                return self._not_found(op, "edge", edge_id)
            old = current.settings
            settings = EdgeSettings(
                inclusion_mode=(
                    InclusionMode(str(inclusion_mode).lower())
                    if inclusion_mode is not None
                    else old.inclusion_mode
                ),
                included_subgroup_ids=(
                    coerce_subgroup_ids(included_subgroup_ids)
                    if included_subgroup_ids is not None
                    else old.included_subgroup_ids
                ),
                include_direct_profiles=(
                    include_direct_profiles
                    if include_direct_profiles is not None
                    else old.include_direct_profiles
                ),
            )
            txn.store.update_edge(edge_id, settings)
            child = txn.store.get_group(current.child_id)
            child_name = child.name if child is not None else str(current.child_id)
            warnings = _selection_warnings(
                settings, txn.store.children_of(current.child_id), child_name
            )

        before, after = old.to_dict(), settings.to_dict()
        changed = [key for key in before if before[key] != after[key]]
        updated = Edge(edge_id, current.parent_id, current.child_id, settings)
        return ServiceResult(
            ok=True,
            op=op,
            data={**updated.to_dict(), "fields_changed": changed},
            warnings=warnings,
        )

    @operation("delete_edge")
    def delete_edge(self, edge_id: int) -> ServiceResult:
        """Delete an edge, its overrides, and overrides it made unreachable."""
        op = "delete_edge"
        with self._workspace.reader() as store:
            edge = store.get_edge(edge_id)
            parent = store.get_group(edge.parent_id) if edge is not None else None
        if edge is None or parent is None:
            return self._not_found(op, "edge", edge_id)

        with self._workspace.transaction(owner_id=parent.owner_id) as txn:
            if not txn.store.delete_edge(edge_id):
                return self._not_found(op, "edge", edge_id)
            pruned = prune_stale_overrides(txn)

        warnings: list[str] = []
        if pruned:
            warnings.append(f"Removed {pruned} override(s) whose target is no longer reachable")
        return ServiceResult(
            ok=True,
            op=op,
            data={**edge.to_dict(), "overrides_pruned": pruned},
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Overrides
    # ------------------------------------------------------------------

    @operation("upsert_override")
    def upsert_override(
        self,
        edge_id: int,
        target_group_id: int,
        *,
        inclusion_mode: str | InclusionMode | None = None,
        included_subgroup_ids: Iterable[int] = (),
        include_direct_profiles: bool | None = None,
        sweep: bool = True,
    ) -> ServiceResult:
        """Create or replace the override of *target_group_id* on *edge_id*.

        The target must be reachable (ignoring inclusion modes) from the
        edge's child. An override for the edge's own child is accepted but
        never applies: an edge's overrides only affect deeper descendants.
        """
        op = "upsert_override"
        mode_raw = self._default_mode(inclusion_mode)
        attempted = {
            "edge_id": edge_id,
            "target_group_id": target_group_id,
            "inclusion_mode": str(mode_raw),
        }
        with self._workspace.reader() as store:
            edge = store.get_edge(edge_id)
            parent = store.get_group(edge.parent_id) if edge is not None else None
        if edge is None or parent is None:
            return self._not_found(op, "edge", edge_id)

        with self._workspace.transaction(owner_id=parent.owner_id) as txn:
            edge = txn.store.get_edge(edge_id)
            if edge is None:
                return self._not_found(op, "edge", edge_id)
            child = txn.store.get_group(edge.child_id)
            target = txn.store.get_group(target_group_id)
            if child is None:
                return self._not_found(op, "group", edge.child_id)
            if target is None:
                return self._not_found(op, "group", target_group_id)

            violations = validate_override(
                child,
                target,
                mode_raw,
                child_reaches=lambda: descendant_ids(txn.group_graph(), child.id),
                sweep=sweep,
            )
            if violations:
                return self._rejected(op, violations, attempted=attempted)

            settings = EdgeSettings(
                inclusion_mode=InclusionMode(str(mode_raw).lower()),
                included_subgroup_ids=coerce_subgroup_ids(included_subgroup_ids),
                include_direct_profiles=self._default_direct(include_direct_profiles),
            )
            override, created = txn.store.upsert_override(
                edge_id, target_group_id, settings, now_iso()
            )
            warnings = _selection_warnings(
                settings, txn.store.children_of(target_group_id), target.name
            )

        if target_group_id == edge.child_id:
            warnings.append(
                "Override targets this edge's own child; it only applies to deeper descendants "
                "and has no effect here"
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={**override.to_dict(), "created": created},
            warnings=warnings,
        )

    @operation("delete_override")
    def delete_override(self, edge_id: int, target_group_id: int) -> ServiceResult:
        op = "delete_override"
        with self._workspace.reader() as store:
            edge = store.get_edge(edge_id)
            parent = store.get_group(edge.parent_id) if edge is not None else None
        if edge is None or parent is None:
            return self._not_found(op, "edge", edge_id)

        with self._workspace.transaction(owner_id=parent.owner_id) as txn:
            removed = txn.store.delete_override(edge_id, target_group_id)
        if not removed:
            return self._not_found(op, "override", target_group_id)
        return ServiceResult(
            ok=True, op=op, data={"edge_id": edge_id, "target_group_id": target_group_id}
        )

    @operation("list_overrides")
    def list_overrides(self, edge_id: int) -> ServiceResult:
        op = "list_overrides"
        with self._workspace.reader() as store:
            edge = store.get_edge(edge_id)
            if edge is None:
                return self._not_found(op, "edge", edge_id)
            found = store.list_overrides(edge_id)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "edge": edge.to_dict(),
                "count": len(found),
                "items": [ov.to_dict() for ov in found],
            },
        )
