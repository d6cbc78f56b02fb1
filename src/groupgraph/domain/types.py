"""Inclusion modes and reachability directions."""

from __future__ import annotations

from enum import StrEnum


class InclusionMode(StrEnum):
    """How far a parent's view expands into a child group's own sub-edges."""

    ALL = "all"
    SELECTED = "selected"
    NONE = "none"

    @classmethod
    def parse(cls, value: str | InclusionMode) -> InclusionMode | None:
        """Return the matching mode, or None for an unknown value."""
        try:
            return cls(str(value).lower())
        except ValueError:
            return None


class Direction(StrEnum):
    """Which way a reachability closure follows edges."""

    DESCENDANTS = "descendants"
    ANCESTORS = "ancestors"


INCLUSION_MODES: tuple[str, ...] = tuple(m.value for m in InclusionMode)
