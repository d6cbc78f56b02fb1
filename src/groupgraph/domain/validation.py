"""Edge Validator — structural invariants on edge and override mutation.

Each check is independent. With ``sweep=True`` every violated check is
collected; with ``sweep=False`` validation stops at the first violation.
The reachability check is passed in as a zero-argument callable so it is
only computed when the cheaper checks have not already stopped a
fail-fast validation.

Violations are values, not exceptions: the calling surface re-displays
the attempted change together with the explanation.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from groupgraph.domain.models import Group
from groupgraph.domain.types import INCLUSION_MODES, InclusionMode

SELF_LOOP = "SELF_LOOP"
CROSS_OWNER = "CROSS_OWNER"
DUPLICATE_EDGE = "DUPLICATE_EDGE"
INVALID_MODE = "INVALID_MODE"
CYCLE = "CYCLE"
UNREACHABLE_TARGET = "UNREACHABLE_TARGET"


@dataclass(frozen=True)
class Violation:
    """One failed structural check."""

    code: str
    field: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "field": self.field, "message": self.message}


class _Collector:
    def __init__(self, sweep: bool) -> None:
        self.sweep = sweep
        self.violations: list[Violation] = []

    @property
    def done(self) -> bool:
        return not self.sweep and bool(self.violations)

    def add(self, code: str, field: str, message: str) -> None:
        self.violations.append(Violation(code=code, field=field, message=message))


def check_mode(value: Any) -> Violation | None:
    """Return an INVALID_MODE violation unless *value* names an inclusion mode."""
    if isinstance(value, str) and InclusionMode.parse(value) is not None:
        return None
    allowed = ", ".join(INCLUSION_MODES)
    return Violation(
        code=INVALID_MODE,
        field="inclusion_mode",
        message=f"'{value}' is not included in the list ({allowed})",
    )


def validate_edge(
    parent: Group,
    child: Group,
    inclusion_mode: Any,
    *,
    duplicate: bool,
    child_reaches: Callable[[], set[int]],
    sweep: bool = True,
) -> list[Violation]:
    """Validate a prospective ``parent -> child`` edge.

    Args:
        parent: The prospective parent group.
        child: The prospective child group.
        inclusion_mode: Raw mode value as supplied by the caller.
        duplicate: Whether an edge for the ordered pair already exists.
        child_reaches: Returns the child's full reachability (descendant ids).
        sweep: Report every violation instead of stopping at the first.
    """
    out = _Collector(sweep)

    if parent.id == child.id:
        out.add(SELF_LOOP, "child_group", "cannot be the same as the parent group")
    if out.done:
        return out.violations

    if parent.owner_id != child.owner_id:
        out.add(CROSS_OWNER, "child_group", "must belong to the same user")
    if out.done:
        return out.violations

    if duplicate:
        out.add(DUPLICATE_EDGE, "child_group_id", "has already been taken")
    if out.done:
        return out.violations

    mode_violation = check_mode(inclusion_mode)
    if mode_violation is not None:
        out.violations.append(mode_violation)
    if out.done:
        return out.violations

    # Self-loops are already reported; the closure excludes its root.
    if parent.id != child.id and parent.id in child_reaches():
        out.add(CYCLE, "child_group", "would create a circular reference")
    return out.violations


def validate_override(
    child: Group,
    target: Group,
    inclusion_mode: Any,
    *,
    child_reaches: Callable[[], set[int]],
    sweep: bool = True,
) -> list[Violation]:
    """Validate an override on an edge whose child is *child*.

    The target must be the child itself or lie in its full reachability.
    """
    out = _Collector(sweep)

    mode_violation = check_mode(inclusion_mode)
    if mode_violation is not None:
        out.violations.append(mode_violation)
    if out.done:
        return out.violations

    if target.id != child.id and target.id not in child_reaches():
        out.add(
            UNREACHABLE_TARGET,
            "target_group",
            "is not reachable from the child group of this edge",
        )
    return out.violations
