"""Logging setup: stdlib loggers rendered through structlog.

Service and domain code log with ``logging.getLogger(__name__)``. Every
record, stdlib or structlog, picks up the context bound with
:func:`bind_operation` (the running ``op``) and by workspace transactions
(``owner_id``), then renders as console lines or, with ``--log-json``,
JSON lines on stderr.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TextIO

import structlog

APP_LOGGER = "groupgraph"

# Third-party loggers kept at WARNING even under --verbose.
_QUIET_LOGGERS = ("sqlalchemy", "networkx")


def _drop_unset(
    _logger: Any, _method: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Remove context keys bound as None (a read outside any owner)."""
    return {key: value for key, value in event_dict.items() if value is not None}


def _processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        _drop_unset,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route all logging through one structlog formatter.

    Args:
        verbose: ``groupgraph.*`` loggers at DEBUG instead of WARNING.
        log_json: JSON lines instead of console lines.
        stream: Destination, stderr by default.
    """
    out = stream if stream is not None else sys.stderr
    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=out.isatty())

    chain = _processors()
    structlog.configure(
        processors=[*chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(out)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(APP_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def bind_operation(op: str, **context: Any) -> Iterator[None]:
    """Tag every record logged inside the block with *op* and *context*."""
    with structlog.contextvars.bound_contextvars(op=op, **context):
        yield
