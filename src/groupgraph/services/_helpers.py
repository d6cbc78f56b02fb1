"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime


def now_iso() -> str:
    """Current UTC time as standard ISO 8601."""
    return datetime.now(UTC).isoformat()


def format_ids(ids: set[int] | list[int]) -> str:
    """Render ids as a compact, sorted, comma-separated list.

    Examples:
        >>> format_ids({3, 1, 2})
        '1, 2, 3'
        >>> format_ids([])
        ''
    """
    return ", ".join(str(i) for i in sorted(ids))
