"""Core value types: groups, profiles, edges, overrides, tree nodes.

Frozen dataclasses so snapshots can be shared freely between traversals.
Serialization to plain dicts lives here so services and the CLI render
the same shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from groupgraph.domain.types import InclusionMode


@dataclass(frozen=True)
class Group:
    """A named container owned by exactly one user."""

    id: int
    owner_id: int
    name: str
    description: str = ""
    created: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "description": self.description,
            "created": self.created,
        }


@dataclass(frozen=True)
class Profile:
    """A named entity a user organizes into groups."""

    id: int
    owner_id: int
    name: str
    attributes: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "attributes": dict(self.attributes),
        }


@dataclass(frozen=True)
class EdgeSettings:
    """The three policy fields shared by edges and overrides."""

    inclusion_mode: InclusionMode = InclusionMode.ALL
    included_subgroup_ids: frozenset[int] = frozenset()
    include_direct_profiles: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "inclusion_mode": self.inclusion_mode.value,
            "included_subgroup_ids": sorted(self.included_subgroup_ids),
            "include_direct_profiles": self.include_direct_profiles,
        }


@dataclass(frozen=True)
class Edge:
    """Governed parent -> child relationship."""

    id: int
    parent_id: int
    child_id: int
    settings: EdgeSettings = field(default_factory=EdgeSettings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "parent_id": self.parent_id,
            "child_id": self.child_id,
            **self.settings.to_dict(),
        }


@dataclass(frozen=True)
class Override:
    """Per-edge replacement of one reachable target group's own policy."""

    id: int
    edge_id: int
    target_group_id: int
    settings: EdgeSettings = field(default_factory=EdgeSettings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "edge_id": self.edge_id,
            "target_group_id": self.target_group_id,
            **self.settings.to_dict(),
        }


@dataclass
class ProfileEntry:
    """A profile as it appears at one place in a materialized tree."""

    profile: Profile
    repeated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"profile": self.profile.to_dict(), "repeated": self.repeated}


@dataclass
class TreeNode:
    """One materialized group in a descendant tree."""

    group: Group
    inclusion_mode: InclusionMode
    include_direct_profiles: bool
    direct_profiles: list[ProfileEntry] = field(default_factory=list)
    children: list[TreeNode] = field(default_factory=list)

    @property
    def is_leaf_boundary(self) -> bool:
        return self.inclusion_mode is InclusionMode.NONE

    def _own_dict(self) -> dict[str, Any]:
        return {
            "group": self.group.to_dict(),
            "inclusion_mode": self.inclusion_mode.value,
            "include_direct_profiles": self.include_direct_profiles,
            "is_leaf_boundary": self.is_leaf_boundary,
            "direct_profiles": [entry.to_dict() for entry in self.direct_profiles],
            "children": [],
        }

    def to_dict(self) -> dict[str, Any]:
        """Serialize the subtree. Iterative, so nesting depth is not bounded by recursion."""
        out = self._own_dict()
        stack: list[tuple[TreeNode, dict[str, Any]]] = [(self, out)]
        while stack:
            node, node_out = stack.pop()
            for child in node.children:
                child_out = child._own_dict()
                node_out["children"].append(child_out)
                stack.append((child, child_out))
        return out


def coerce_subgroup_ids(raw: Any) -> frozenset[int]:
    """Normalize stored or user-supplied subgroup ids to a frozenset of ints.

    Entries that are not integers are dropped; whether they match a real
    child edge is only decided at traversal time.
    """
    if not raw:
        return frozenset()
    result: set[int] = set()
    for value in raw:
        try:
            result.add(int(value))
        except (TypeError, ValueError):
            continue
    return frozenset(result)
