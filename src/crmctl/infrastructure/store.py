"""Store: repository owning the database engine, mutex, and graph cache.

The Store is the single dependency injected into every service. There is
one embedded database file and one user, so a single re-entrant mutex
around connection use is all the coordination needed:

- **Reads**: :meth:`connect` holds the mutex for the lifetime of the
  connection.
- **Writes**: :meth:`transaction` holds the mutex around
  ``engine.begin()`` (auto-commit on success, auto-rollback on exception).
- **Graph**: the cache is invalidated when a write transaction ends
  (success or failure) and lazily rebuilt from committed rows.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

from crmctl.infrastructure.database.engine import init_database
from crmctl.infrastructure.graph.engine import GraphEngine

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    import networkx as nx
    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from crmctl.config.settings import CrmSettings

logger = logging.getLogger(__name__)


class Store:
    """Repository encapsulating database and graph access.

    Constructed lazily by the CLI's AppContext (or directly by an embedding
    shell) from :class:`CrmSettings`. Services receive the Store via their
    :class:`BaseService` constructor.
    """

    def __init__(self, settings: CrmSettings) -> None:
        self._settings = settings
        self._lock = threading.RLock()
        self._engine: Engine = init_database(settings.db_path)
        self._graph = GraphEngine(self._engine)
        logger.debug("Opened database at %s", settings.db_path)

    @property
    def db_path(self) -> Path:
        """Location of the SQLite file."""
        return self._settings.db_path

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def settings(self) -> CrmSettings:
        """The resolved settings for this store."""
        return self._settings

    def graph(self) -> nx.Graph:
        """The relationship graph (lazy-built from committed rows)."""
        with self._lock:
            return self._graph.graph

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Read-only connection held under the store mutex."""
        with self._lock, self._engine.connect() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Write transaction held under the store mutex.

        Commits when the block exits normally and rolls back on any
        exception. The graph cache is invalidated either way.

        Usage::

            with store.transaction() as conn:
                conn.execute(insert(person).values(...))
        """
        with self._lock:
            try:
                with self._engine.begin() as conn:
                    yield conn
            finally:
                self._graph.invalidate()

    def close(self) -> None:
        """Dispose of pooled connections."""
        with self._lock:
            self._engine.dispose()
