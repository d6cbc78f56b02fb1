"""Workspace — repository pattern with owner-serialized transactions.

The Workspace is the single dependency injected into every service. It
owns the database engine and hands out :class:`GraphStore` instances
bound either to a read connection or to an open transaction.

Mutations that can affect acyclicity (edge and override create, update,
delete) must not validate against a stale snapshot. :meth:`transaction`
therefore takes a per-owner lock before opening the DB transaction and
holds it until commit or rollback, so two concurrent edge insertions for
the same owner cannot each pass the cycle check and jointly close a cycle.
Reads take no lock.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from groupgraph.infrastructure.database.engine import init_database
from groupgraph.infrastructure.graph.engine import load_group_graph
from groupgraph.infrastructure.repositories.graph_store import GraphStore

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    import networkx as nx
    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from groupgraph.config.settings import GroupGraphSettings

logger = logging.getLogger(__name__)


@dataclass
class WorkspaceTransaction:
    """Active transaction context: connection plus a store bound to it."""

    conn: Connection
    store: GraphStore
    owner_id: int | None = None

    def group_graph(self) -> nx.DiGraph:
        """Structural graph as seen inside this transaction.

        Scoped to the locked owner when there is one.
        """
        return load_group_graph(self.conn, owner_id=self.owner_id)


class Workspace:
    """Repository encapsulating database access and write serialization.

    Constructed once at CLI startup from :class:`GroupGraphSettings` and
    stored on the Click context. Services receive it via their
    :class:`BaseService` constructor.
    """

    def __init__(self, settings: GroupGraphSettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(self.root, db_name=settings.database.filename)
        self._locks: dict[int | None, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def root(self) -> Path:
        """The workspace root directory."""
        return self._settings.root

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def settings(self) -> GroupGraphSettings:
        """The resolved settings for this workspace."""
        return self._settings

    def close(self) -> None:
        """Dispose of pooled connections."""
        self._engine.dispose()

    def owner_lock(self, owner_id: int | None) -> threading.Lock:
        """The lock serializing structural writes for *owner_id*."""
        with self._locks_guard:
            lock = self._locks.get(owner_id)
            if lock is None:
                lock = self._locks[owner_id] = threading.Lock()
            return lock

    @contextmanager
    def reader(self) -> Iterator[GraphStore]:
        """A store bound to a short-lived read connection."""
        with self._engine.connect() as conn:
            yield GraphStore(conn)

    @contextmanager
    def transaction(self, *, owner_id: int | None = None) -> Iterator[WorkspaceTransaction]:
        """Serialized write transaction for *owner_id*.

        Commits on normal exit and rolls back on any exception (native
        SQLAlchemy ``engine.begin()`` semantics). The owner lock is held
        for the whole block, including the final commit.

        Usage::

            with workspace.transaction(owner_id=group.owner_id) as txn:
                if parent_id not in descendant_ids(txn.group_graph(), child_id):
                    txn.store.insert_edge(...)
        """
        lock = self.owner_lock(owner_id)
        with structlog.contextvars.bound_contextvars(owner_id=owner_id), lock:
            with self._engine.begin() as conn:
                yield WorkspaceTransaction(conn=conn, store=GraphStore(conn), owner_id=owner_id)
            logger.debug("Committed transaction")
