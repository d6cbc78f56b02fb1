"""ServiceResult and ServiceError — what every service operation returns.

Refusals are results with ``ok=False``, never exceptions: a rejected
edge or override comes back with every violated check listed under
``error.detail["violations"]`` next to the attempted change.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# Unknown group, profile, edge, or override id.
NOT_FOUND = "NOT_FOUND"
# One or more structural or policy checks refused a mutation.
VALIDATION_FAILED = "VALIDATION_FAILED"
# A traversal hit the configured node or depth budget.
RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"


class ServiceError(BaseModel):
    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @property
    def violation_codes(self) -> list[str]:
        """Codes of the violated checks, in the order they were found."""
        return [v["code"] for v in self.detail.get("violations", [])]


class ServiceResult(BaseModel):
    """Outcome of one operation (``op``) on the group graph.

    ``data`` holds the created, updated, or queried entities as plain
    dicts; ``warnings`` carries non-fatal notes such as inert
    ``included_subgroup_ids``.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(cls, op: str, code: str, message: str, **detail: Any) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))
