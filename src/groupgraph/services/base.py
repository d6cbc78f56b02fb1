"""BaseService — foundation for all groupgraph services.

Every service receives a :class:`Workspace` at construction time. The
workspace provides read stores and owner-serialized write transactions;
services own their transaction boundaries via
``self._workspace.transaction(owner_id=...)``.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Concatenate, ParamSpec, TypeVar

from groupgraph.config.logging import bind_operation
from groupgraph.services.result import NOT_FOUND, VALIDATION_FAILED, ServiceResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from groupgraph.domain.validation import Violation
    from groupgraph.infrastructure.workspace import Workspace

logger = logging.getLogger(__name__)

_P = ParamSpec("_P")
_S = TypeVar("_S", bound="BaseService")


def operation(
    op: str,
) -> Callable[
    [Callable[Concatenate[_S, _P], ServiceResult]], Callable[Concatenate[_S, _P], ServiceResult]
]:
    """Decorator: bind *op* to every record logged by a service method.

    Logs the outcome and duration at debug level once the method returns.
    """

    def decorate(
        func: Callable[Concatenate[_S, _P], ServiceResult],
    ) -> Callable[Concatenate[_S, _P], ServiceResult]:
        @functools.wraps(func)
        def wrapper(self: _S, *args: _P.args, **kwargs: _P.kwargs) -> ServiceResult:
            with bind_operation(op):
                start = time.perf_counter()
                result = func(self, *args, **kwargs)
                elapsed_ms = (time.perf_counter() - start) * 1000
                code = result.error.code if result.error is not None else None
                logger.debug("%s ok=%s code=%s in %.2fms", op, result.ok, code, elapsed_ms)
            return result

        return wrapper

    return decorate


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class EdgeService(BaseService):
            @operation("create_edge")
            def create_edge(self, parent_id: int, child_id: int) -> ServiceResult:
                with self._workspace.transaction(owner_id=owner_id) as txn:
                    ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    @staticmethod
    def _not_found(op: str, kind: str, item_id: int) -> ServiceResult:
        return ServiceResult.failure(
            op, NOT_FOUND, f"{kind.capitalize()} {item_id} not found", kind=kind, id=item_id
        )

    @staticmethod
    def _rejected(
        op: str,
        violations: Sequence[Violation],
        *,
        attempted: dict[str, Any] | None = None,
    ) -> ServiceResult:
        """Result for a refused mutation, carrying every violation found."""
        logger.info("%s rejected: %s", op, ", ".join(v.code for v in violations))
        summary = "; ".join(f"{v.field} {v.message}" for v in violations)
        return ServiceResult.failure(
            op,
            VALIDATION_FAILED,
            summary,
            violations=[v.to_dict() for v in violations],
            attempted=attempted or {},
        )
