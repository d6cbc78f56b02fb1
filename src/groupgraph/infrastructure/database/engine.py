"""Database engine setup for SQLite with WAL mode.

SQLite is the persistence layer: WAL mode for concurrent reads,
foreign keys for cascading deletes, ACID transactions for edge
mutations. The DB is stored at {root}/.groupgraph/groupgraph.db.

SQLAlchemy Core (not ORM) is used: traversals need a handful of
batched reads per call, not identity maps or lazy relationships.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from groupgraph.infrastructure.database.schema import metadata

logger = logging.getLogger(__name__)

DATA_DIRNAME = ".groupgraph"
DEFAULT_DB_NAME = "groupgraph.db"


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode and foreign keys enabled."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def init_database(root: Path, *, db_name: str = DEFAULT_DB_NAME) -> Engine:
    """Initialize the database at ``{root}/.groupgraph/{db_name}``.

    Creates the ``.groupgraph/`` directory and all tables from
    :data:`schema.metadata`.

    Idempotent — safe to call on an existing workspace.

    Returns the engine ready for use.
    """
    data_dir = root / DATA_DIRNAME
    data_dir.mkdir(parents=True, exist_ok=True)

    db_path = data_dir / db_name
    engine = create_db_engine(db_path)
    metadata.create_all(engine)
    logger.debug("Database ready at %s", db_path)
    return engine
