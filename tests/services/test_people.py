"""Tests for PersonService."""

from __future__ import annotations

from datetime import date

from sqlalchemy import func, select

from crmctl.infrastructure.database.schema import interaction, person
from crmctl.infrastructure.store import Store
from crmctl.services.people import PersonService
from crmctl.services.relationships import RelationshipService
from crmctl.services.result import ErrorCode
from tests.conftest import log_interaction, make_organization, make_person


class TestCreatePerson:
    def test_create(self, store: Store) -> None:
        result = PersonService(store).create(
            {"first_name": "Jane", "last_name": "Doe", "follow_up_cadence_days": 30}
        )
        assert result.ok
        assert result.op == "create_person"
        assert result.data["id"] == 1
        assert result.data["name"] == "Jane Doe"
        assert result.data["follow_up_cadence_days"] == 30
        assert result.data["latest_interaction_date"] is None

    def test_duplicate_name(self, store: Store) -> None:
        make_person(store, "Jane", "Doe")
        result = PersonService(store).create({"first_name": "Jane", "last_name": "Doe"})
        assert not result.ok
        assert result.error is not None
        assert result.error.code == ErrorCode.DUPLICATE
        assert result.error.message == "A person named Jane Doe already exists"

    def test_missing_last_name(self, store: Store) -> None:
        result = PersonService(store).create({"first_name": "Jane"})
        assert not result.ok
        assert result.error is not None
        assert result.error.code == ErrorCode.VALIDATION_FAILED
        assert "last_name" in result.error.message

    def test_zero_cadence_rejected(self, store: Store) -> None:
        result = PersonService(store).create(
            {"first_name": "Jane", "last_name": "Doe", "follow_up_cadence_days": 0}
        )
        assert not result.ok
        assert result.error is not None
        assert result.error.code == ErrorCode.VALIDATION_FAILED


class TestGetPerson:
    def test_not_found(self, store: Store) -> None:
        result = PersonService(store).get(42)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == ErrorCode.NOT_FOUND
        assert result.error.message == "Person not found: 42"

    def test_follow_up_overdue(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe", follow_up_cadence_days=30)
        log_interaction(store, jane["id"], "2026-01-15")
        result = PersonService(store).get(jane["id"], today=date(2026, 3, 1))
        assert result.ok
        follow_up = result.data["follow_up"]
        assert follow_up["state"] == "overdue"
        assert follow_up["days_overdue"] == 15
        assert result.data["latest_interaction_date"] == "2026-01-15"

    def test_no_cadence_no_follow_up(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe")
        assert PersonService(store).get(jane["id"]).data["follow_up"] is None

    def test_detail_includes_relations(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe")
        john = make_person(store, "John", "Roe")
        acme = make_organization(store, "Acme")
        log_interaction(store, jane["id"], "2026-01-01", interaction_type="Call")
        log_interaction(store, jane["id"], "2026-02-01")
        rels = RelationshipService(store)
        rels.link_people(john["id"], jane["id"], notes="neighbors")
        rels.link_organization(acme["id"], jane["id"], role="Engineer")

        data = PersonService(store).get(jane["id"]).data
        assert [i["interaction_date"] for i in data["interactions"]] == [
            "2026-02-01",
            "2026-01-01",
        ]
        assert data["interactions"][1]["interaction_type"] == "Call"
        assert data["related_people"][0]["name"] == "John Roe"
        assert data["related_people"][0]["notes"] == "neighbors"
        assert data["organizations"][0]["name"] == "Acme"
        assert data["organizations"][0]["role"] == "Engineer"


class TestListPeople:
    def test_default_sort_last_name(self, store: Store) -> None:
        make_person(store, "Zoe", "Young")
        make_person(store, "Amy", "Adams")
        result = PersonService(store).list()
        assert result.ok
        assert result.op == "list_people"
        assert [p["last_name"] for p in result.data["items"]] == ["Adams", "Young"]
        assert result.data["sort_by"] == "last_name"
        assert result.data["sort_direction"] == "asc"

    def test_pagination(self, store: Store) -> None:
        for i in range(5):
            make_person(store, f"P{i}", f"L{i}")
        result = PersonService(store).list(page=2, page_size=2)
        assert result.data["total"] == 5
        assert result.data["total_pages"] == 3
        assert [p["last_name"] for p in result.data["items"]] == ["L2", "L3"]

    def test_page_past_end_is_empty(self, store: Store) -> None:
        make_person(store, "Jane", "Doe")
        result = PersonService(store).list(page=5)
        assert result.ok
        assert result.data["items"] == []
        assert result.data["total"] == 1

    def test_invalid_page(self, store: Store) -> None:
        result = PersonService(store).list(page=0)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == ErrorCode.VALIDATION_FAILED

    def test_page_size_over_max(self, store: Store) -> None:
        result = PersonService(store).list(page_size=1000)
        assert not result.ok

    def test_unknown_sort_field_warns(self, store: Store) -> None:
        make_person(store, "Jane", "Doe")
        result = PersonService(store).list(sort_by="password")
        assert result.ok
        assert result.data["sort_by"] == "last_name"
        assert len(result.warnings) == 1

    def test_query_filter(self, store: Store) -> None:
        make_person(store, "Jane", "Doe")
        make_person(store, "John", "Roe")
        result = PersonService(store).list(query="roe")
        assert [p["name"] for p in result.data["items"]] == ["John Roe"]

    def test_query_filter_folds_accents(self, store: Store) -> None:
        make_person(store, "Élodie", "Ångström")
        make_person(store, "John", "Roe")
        result = PersonService(store).list(query="ångström")
        assert result.data["total"] == 1
        assert result.data["items"][0]["first_name"] == "Élodie"


class TestUpdatePerson:
    def test_partial_update(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe", notes="old")
        result = PersonService(store).update(jane["id"], {"follow_up_cadence_days": 14})
        assert result.ok
        assert result.data["follow_up_cadence_days"] == 14
        assert result.data["notes"] == "old"

    def test_clear_optional(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe", notes="old")
        result = PersonService(store).update(jane["id"], {"notes": None})
        assert result.data["notes"] is None

    def test_empty_update_warns(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe")
        result = PersonService(store).update(jane["id"], {})
        assert result.ok
        assert result.warnings == ["No changes supplied"]

    def test_rename_into_duplicate(self, store: Store) -> None:
        make_person(store, "Jane", "Doe")
        john = make_person(store, "John", "Doe")
        result = PersonService(store).update(john["id"], {"first_name": "Jane"})
        assert not result.ok
        assert result.error is not None
        assert result.error.code == ErrorCode.DUPLICATE

    def test_missing(self, store: Store) -> None:
        result = PersonService(store).update(99, {"notes": "x"})
        assert result.error is not None
        assert result.error.code == ErrorCode.NOT_FOUND

    def test_unknown_field(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe")
        result = PersonService(store).update(jane["id"], {"id": 7})
        assert result.error is not None
        assert result.error.code == ErrorCode.VALIDATION_FAILED


class TestDeletePerson:
    def test_delete_cascades(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe")
        log_interaction(store, jane["id"], "2026-01-01")
        result = PersonService(store).delete(jane["id"])
        assert result.ok
        assert result.data == {"id": jane["id"], "deleted": True}
        with store.connect() as conn:
            assert conn.execute(select(func.count()).select_from(person)).scalar_one() == 0
            assert conn.execute(select(func.count()).select_from(interaction)).scalar_one() == 0

    def test_delete_missing(self, store: Store) -> None:
        result = PersonService(store).delete(5)
        assert result.error is not None
        assert result.error.code == ErrorCode.NOT_FOUND
