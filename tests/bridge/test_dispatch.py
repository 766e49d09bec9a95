"""Tests for the request bridge dispatcher."""

from __future__ import annotations

from crmctl.bridge import INVALID_ARGUMENTS, UNKNOWN_OPERATION, dispatch, operation_names
from crmctl.bridge.operations import OPERATIONS, to_response
from crmctl.infrastructure.store import Store
from crmctl.services.result import ServiceResult, failure
from tests.conftest import lookup_id, make_person


class TestRegistry:
    def test_names_sorted(self) -> None:
        names = operation_names()
        assert names == sorted(OPERATIONS)
        assert "person.create" in names
        assert "graph.neighborhood" in names

    def test_every_entity_has_crud(self) -> None:
        for entity in ("person", "organization", "interaction"):
            for verb in ("create", "get", "list", "update", "delete"):
                assert f"{entity}.{verb}" in OPERATIONS


class TestToResponse:
    def test_success_omits_error(self) -> None:
        response = to_response(ServiceResult(ok=True, op="x", data={"a": 1}))
        assert response == {"ok": True, "op": "x", "data": {"a": 1}}

    def test_failure_includes_error(self) -> None:
        response = to_response(failure("x", "NOT_FOUND", "gone"))
        assert response["error"] == {"code": "NOT_FOUND", "message": "gone", "detail": {}}


class TestDispatch:
    def test_create_and_get_person(self, store: Store) -> None:
        created = dispatch(store, "person.create", {"first_name": "Jane", "last_name": "Doe"})
        assert created["ok"]
        fetched = dispatch(store, "person.get", {"person_id": created["data"]["id"]})
        assert fetched["ok"]
        assert fetched["data"]["name"] == "Jane Doe"

    def test_string_id_coerced(self, store: Store) -> None:
        make_person(store, "Jane", "Doe")
        assert dispatch(store, "person.get", {"person_id": "1"})["ok"]

    def test_unknown_operation(self, store: Store) -> None:
        response = dispatch(store, "person.explode")
        assert not response["ok"]
        assert response["error"]["code"] == UNKNOWN_OPERATION
        assert "person.create" in response["error"]["detail"]["available"]

    def test_missing_argument(self, store: Store) -> None:
        response = dispatch(store, "person.get", {})
        assert response["error"]["code"] == INVALID_ARGUMENTS
        assert "person_id" in response["error"]["message"]

    def test_unexpected_argument(self, store: Store) -> None:
        response = dispatch(store, "person.delete", {"person_id": 1, "force": True})
        assert response["error"]["code"] == INVALID_ARGUMENTS

    def test_non_object_payload(self, store: Store) -> None:
        response = dispatch(store, "person.list", [1, 2])  # type: ignore[arg-type]
        assert response["error"]["code"] == INVALID_ARGUMENTS

    def test_entity_validation_is_service_error(self, store: Store) -> None:
        response = dispatch(store, "person.create", {"first_name": "Jane"})
        assert response["error"]["code"] == "VALIDATION_FAILED"

    def test_list_with_sort(self, store: Store) -> None:
        make_person(store, "Amy", "Zed")
        make_person(store, "Zoe", "Abe")
        response = dispatch(
            store, "person.list", {"sort_by": "first_name", "direction": "desc", "page_size": 1}
        )
        assert response["ok"]
        assert response["data"]["items"][0]["first_name"] == "Zoe"
        assert response["data"]["total_pages"] == 2

    def test_log_interaction_and_dashboard(self, store: Store) -> None:
        jane = make_person(store, "Jane", "Doe", follow_up_cadence_days=30)
        response = dispatch(
            store,
            "interaction.create",
            {
                "person_id": jane["id"],
                "interaction_type_id": lookup_id(store, "interaction_type", "Call"),
                "interaction_date": "2026-01-15",
            },
        )
        assert response["ok"]
        dashboard = dispatch(store, "dashboard.follow_ups", {"today": "2026-03-01"})
        assert dashboard["data"]["overdue"][0]["days_overdue"] == 15

    def test_relationships_and_graph(self, store: Store) -> None:
        a = make_person(store, "Ann", "Able")
        b = make_person(store, "Ben", "Baker")
        linked = dispatch(
            store, "relationship.link_people", {"person_a_id": b["id"], "person_b_id": a["id"]}
        )
        assert linked["ok"]
        graph = dispatch(store, "graph.network")
        assert graph["data"]["edge_count"] == 1

    def test_search(self, store: Store) -> None:
        make_person(store, "Jane", "Doe")
        response = dispatch(store, "search.global", {"query": "jan"})
        assert response["data"]["items"][0]["label"] == "Jane Doe"
