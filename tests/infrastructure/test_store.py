"""Tests for the Store: paths, transactions, and graph invalidation."""

from __future__ import annotations

import pytest
from sqlalchemy import func, insert, select

from crmctl.config.settings import CrmSettings
from crmctl.infrastructure.database.schema import person
from crmctl.infrastructure.store import Store

STAMP = "2026-01-01T00:00:00+00:00"


class TestStore:
    def test_db_created_under_data_root(self, store: Store, settings: CrmSettings) -> None:
        assert store.db_path == settings.data_root / ".crmctl" / "crmctl.db"
        assert store.db_path.is_file()

    def test_transaction_commits(self, store: Store) -> None:
        with store.transaction() as conn:
            conn.execute(
                insert(person).values(
                    first_name="Jane", last_name="Doe", created_at=STAMP, updated_at=STAMP
                )
            )
        with store.connect() as conn:
            assert conn.execute(select(func.count()).select_from(person)).scalar_one() == 1

    def test_transaction_rolls_back(self, store: Store) -> None:
        with pytest.raises(RuntimeError), store.transaction() as conn:
            conn.execute(
                insert(person).values(
                    first_name="Jane", last_name="Doe", created_at=STAMP, updated_at=STAMP
                )
            )
            raise RuntimeError("boom")
        with store.connect() as conn:
            assert conn.execute(select(func.count()).select_from(person)).scalar_one() == 0

    def test_graph_invalidated_by_write(self, store: Store) -> None:
        assert store.graph().number_of_nodes() == 0
        with store.transaction() as conn:
            conn.execute(
                insert(person).values(
                    first_name="Jane", last_name="Doe", created_at=STAMP, updated_at=STAMP
                )
            )
        assert store.graph().number_of_nodes() == 1

    def test_graph_cached_between_reads(self, store: Store) -> None:
        assert store.graph() is store.graph()
