"""GraphSnapshot — the in-memory Graph Store a traversal walks.

Built once per query from a small, constant number of batched reads
(see ``GraphStore.load_snapshot``) and never mutated afterwards.
Lookups for unknown ids return empty results rather than raising, so a
dangling reference reads as "no such children".
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from groupgraph.domain.models import Edge, EdgeSettings, Group, Override, Profile

_EMPTY_OVERRIDES: Mapping[int, EdgeSettings] = MappingProxyType({})


@dataclass(frozen=True)
class GraphSnapshot:
    """Id-indexed groups, adjacency, overrides, and memberships."""

    groups: Mapping[int, Group] = field(default_factory=dict)
    edges_by_parent: Mapping[int, tuple[Edge, ...]] = field(default_factory=dict)
    overrides_by_edge: Mapping[int, Mapping[int, EdgeSettings]] = field(default_factory=dict)
    profiles: Mapping[int, Profile] = field(default_factory=dict)
    members_by_group: Mapping[int, frozenset[int]] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        *,
        groups: Iterable[Group] = (),
        edges: Iterable[Edge] = (),
        overrides: Iterable[Override] = (),
        profiles: Iterable[Profile] = (),
        memberships: Iterable[tuple[int, int]] = (),
    ) -> GraphSnapshot:
        """Index flat rows into a snapshot.

        *memberships* is an iterable of ``(group_id, profile_id)`` pairs.
        """
        by_parent: dict[int, list[Edge]] = {}
        for edge in edges:
            by_parent.setdefault(edge.parent_id, []).append(edge)

        by_edge: dict[int, dict[int, EdgeSettings]] = {}
        for ov in overrides:
            by_edge.setdefault(ov.edge_id, {})[ov.target_group_id] = ov.settings

        members: dict[int, set[int]] = {}
        for group_id, profile_id in memberships:
            members.setdefault(group_id, set()).add(profile_id)

        return cls(
            groups={g.id: g for g in groups},
            edges_by_parent={k: tuple(v) for k, v in by_parent.items()},
            overrides_by_edge={k: MappingProxyType(v) for k, v in by_edge.items()},
            profiles={p.id: p for p in profiles},
            members_by_group={k: frozenset(v) for k, v in members.items()},
        )

    def group(self, group_id: int) -> Group | None:
        return self.groups.get(group_id)

    def children_of(self, group_id: int) -> list[Edge]:
        """Outgoing edges of *group_id* (empty for unknown ids)."""
        return list(self.edges_by_parent.get(group_id, ()))

    def overrides_of(self, edge_id: int) -> Mapping[int, EdgeSettings]:
        """Overrides declared on *edge_id*, keyed by target group id."""
        return self.overrides_by_edge.get(edge_id, _EMPTY_OVERRIDES)

    def direct_profiles_of(self, group_id: int) -> set[int]:
        """Ids of profiles directly assigned to *group_id*."""
        return set(self.members_by_group.get(group_id, frozenset()))

    def profiles_of(self, group_id: int) -> list[Profile]:
        """Direct profiles of *group_id* sorted by name, then id."""
        found = [
            self.profiles[pid] for pid in self.direct_profiles_of(group_id) if pid in self.profiles
        ]
        return sorted(found, key=lambda p: (p.name, p.id))
