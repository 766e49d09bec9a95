"""Database engine setup for SQLite with WAL mode.

SQLite is the persistence layer: WAL journal, enforced foreign keys
(cascades and restrictions live in the DDL), ACID transactions.

SQLAlchemy Core (not ORM) is used because every read rebuilds its view
from SQL joins; there is no object graph worth caching between requests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, insert, select
from sqlalchemy.engine import Engine

from crmctl.domain.types import DEFAULT_INTERACTION_TYPES, DEFAULT_ORG_TYPES
from crmctl.infrastructure.database.schema import interaction_type, metadata, org_type


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


def set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
    """Per-connection setup: WAL journal, foreign keys, and ``casefold()``.

    SQLite's built-in ``lower()`` only folds ASCII, so name matching goes
    through a Python ``casefold`` registered on every connection.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    dbapi_conn.create_function("casefold", 1, _casefold, deterministic=True)


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode and foreign keys enabled."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    event.listen(engine, "connect", set_sqlite_pragma)
    return engine


def init_database(db_path: Path) -> Engine:
    """Initialize the crmctl database at *db_path*.

    Creates the parent directory (and a ``backups/`` sibling used by
    upgrades), all tables from :data:`schema.metadata`, and seeds the
    lookup tables with their fixed defaults.

    Idempotent; safe to call on an existing database.

    Returns the engine ready for use.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    (db_path.parent / "backups").mkdir(exist_ok=True)

    engine = create_db_engine(db_path)
    metadata.create_all(engine)
    seed_lookups(engine)
    return engine


def seed_lookups(engine: Engine) -> int:
    """Seed the default org types and interaction types into empty tables.

    A table that already holds rows is left alone so deleted defaults stay
    deleted. Returns the number of rows inserted.
    """
    inserted = 0
    with engine.begin() as conn:
        for table, names in (
            (org_type, DEFAULT_ORG_TYPES),
            (interaction_type, DEFAULT_INTERACTION_TYPES),
        ):
            if conn.execute(select(table.c.id).limit(1)).first() is not None:
                continue
            conn.execute(insert(table), [{"name": name} for name in names])
            inserted += len(names)
    return inserted
