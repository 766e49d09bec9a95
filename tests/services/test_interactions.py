"""Tests for InteractionService."""

from __future__ import annotations

from crmctl.infrastructure.store import Store
from crmctl.services.interactions import InteractionService
from crmctl.services.result import ErrorCode
from tests.conftest import log_interaction, lookup_id, make_person


class TestCreateInteraction:
    def test_create(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe")
        result = InteractionService(store).create(
            {
                "person_id": jane["id"],
                "interaction_type_id": lookup_id(store, "interaction_type", "Email"),
                "interaction_date": "2026-02-03",
                "notes": "intro",
            }
        )
        assert result.ok
        assert result.data["person_name"] == "Jane Doe"
        assert result.data["interaction_type"] == "Email"
        assert result.data["interaction_date"] == "2026-02-03"

    def test_unknown_person(self, store: Store) -> None:
        result = InteractionService(store).create(
            {
                "person_id": 77,
                "interaction_type_id": lookup_id(store, "interaction_type", "Email"),
                "interaction_date": "2026-02-03",
            }
        )
        assert result.error is not None
        assert result.error.code == ErrorCode.INVALID_REFERENCE

    def test_bad_date(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe")
        result = InteractionService(store).create(
            {"person_id": jane["id"], "interaction_type_id": 1, "interaction_date": "yesterday"}
        )
        assert result.error is not None
        assert result.error.code == ErrorCode.VALIDATION_FAILED


class TestListInteractions:
    def test_newest_first_by_default(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe")
        log_interaction(store, jane["id"], "2026-01-01")
        log_interaction(store, jane["id"], "2026-03-01")
        log_interaction(store, jane["id"], "2026-02-01")
        result = InteractionService(store).list()
        assert [i["interaction_date"] for i in result.data["items"]] == [
            "2026-03-01",
            "2026-02-01",
            "2026-01-01",
        ]

    def test_filter_by_person(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe")
        john = make_person(store, "John", "Roe")
        log_interaction(store, jane["id"], "2026-01-01")
        log_interaction(store, john["id"], "2026-01-02")
        result = InteractionService(store).list(person_id=john["id"])
        assert result.data["total"] == 1
        assert result.data["items"][0]["person_name"] == "John Roe"


class TestUpdateDeleteInteraction:
    def test_update_date_changes_latest(self, store: Store) -> None:
        from crmctl.services.people import PersonService

        jane = make_person(store, "Jane", "Doe")
        logged = log_interaction(store, jane["id"], "2026-01-01")
        result = InteractionService(store).update(logged["id"], {"interaction_date": "2026-04-01"})
        assert result.ok
        assert result.data["interaction_date"] == "2026-04-01"
        assert PersonService(store).get(jane["id"]).data["latest_interaction_date"] == "2026-04-01"

    def test_date_cannot_be_cleared(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe")
        logged = log_interaction(store, jane["id"], "2026-01-01")
        result = InteractionService(store).update(logged["id"], {"interaction_date": None})
        assert result.error is not None
        assert result.error.code == ErrorCode.VALIDATION_FAILED

    def test_delete(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe")
        logged = log_interaction(store, jane["id"], "2026-01-01")
        svc = InteractionService(store)
        assert svc.delete(logged["id"]).ok
        result = svc.get(logged["id"])
        assert result.error is not None
        assert result.error.code == ErrorCode.NOT_FOUND
