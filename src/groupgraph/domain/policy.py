"""Policy Resolver — effective per-branch settings under accumulated overrides.

Overrides travel down a traversal as an immutable mapping of
``target_group_id -> EdgeSettings``. Each edge contributes its own
overrides for the branch below it; on conflict the entry inherited from
closer to the traversal root wins.

An edge's own overrides never apply to that edge's immediate child: the
child's effective settings are looked up in the *inherited* map only.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import TypeAlias

from groupgraph.domain.models import Edge, EdgeSettings

OverrideMap: TypeAlias = Mapping[int, EdgeSettings]

EMPTY_OVERRIDES: OverrideMap = MappingProxyType({})


def merge_overrides(inherited: OverrideMap, own: OverrideMap) -> OverrideMap:
    """Overlay *own* with *inherited* (inherited wins) into a fresh mapping."""
    if not own:
        return inherited
    if not inherited:
        return MappingProxyType(dict(own))
    return MappingProxyType({**own, **inherited})


def resolve(
    edge: Edge,
    inherited: OverrideMap,
    own: OverrideMap,
) -> tuple[EdgeSettings, OverrideMap]:
    """Return ``(effective_settings, merged_overrides)`` for *edge*."""
    effective = inherited.get(edge.child_id, edge.settings)
    return effective, merge_overrides(inherited, own)


class PolicyResolver:
    """Binds :func:`resolve` to an overrides lookup (usually a snapshot)."""

    def __init__(self, overrides_of: Callable[[int], OverrideMap]) -> None:
        self._overrides_of = overrides_of

    def resolve(self, edge: Edge, inherited: OverrideMap) -> tuple[EdgeSettings, OverrideMap]:
        return resolve(edge, inherited, self._overrides_of(edge.id))
