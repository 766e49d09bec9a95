"""Tests for QueryRepository read-side SQL."""

from __future__ import annotations

import pytest

from crmctl.infrastructure.repositories import QueryRepository, like_pattern
from crmctl.infrastructure.store import Store
from tests.conftest import log_interaction, make_organization, make_person


class TestLikePattern:
    def test_substring(self) -> None:
        assert like_pattern("ann") == "%ann%"

    def test_prefix(self) -> None:
        assert like_pattern("ann", prefix_only=True) == "ann%"

    def test_escapes_wildcards(self) -> None:
        assert like_pattern("50%_off") == "%50\\%\\_off%"


@pytest.fixture
def repo(store: Store) -> QueryRepository:
    return QueryRepository(store)


class TestPeopleQueries:
    def test_latest_interaction_date(self, store: Store, repo: QueryRepository) -> None:
        jane = make_person(store, "Jane", "Doe")
        log_interaction(store, jane["id"], "2026-01-01")
        log_interaction(store, jane["id"], "2026-02-10")
        row = repo.get_person(jane["id"])
        assert row is not None
        assert row["latest_interaction_date"] == "2026-02-10"

    def test_missing_person(self, repo: QueryRepository) -> None:
        assert repo.get_person(999) is None

    def test_list_sorted_with_nulls_last(self, store: Store, repo: QueryRepository) -> None:
        a = make_person(store, "Ann", "Able")
        make_person(store, "Ben", "Baker")
        c = make_person(store, "Cat", "Cole")
        log_interaction(store, a["id"], "2026-01-01")
        log_interaction(store, c["id"], "2026-03-01")
        rows = repo.list_people_rows(
            sort_field="latest_interaction_date", descending=True, limit=10, offset=0
        )
        assert [r["first_name"] for r in rows] == ["Cat", "Ann", "Ben"]

    def test_filter_matches_full_name(self, store: Store, repo: QueryRepository) -> None:
        make_person(store, "Jane", "Doe")
        make_person(store, "John", "Roe")
        assert repo.count_people(query="jane d") == 1
        assert repo.count_people(query="o") == 2

    def test_wildcards_match_literally(self, store: Store, repo: QueryRepository) -> None:
        make_person(store, "Jane", "Doe")
        make_person(store, "Pct", "100%")
        assert repo.count_people(query="%") == 1
        assert repo.count_people(query="_") == 0

    def test_follow_up_rows_only_with_cadence(self, store: Store, repo: QueryRepository) -> None:
        make_person(store, "Jane", "Doe", follow_up_cadence_days=30)
        make_person(store, "John", "Roe")
        rows = repo.follow_up_rows()
        assert [r["first_name"] for r in rows] == ["Jane"]


class TestOrganizationQueries:
    def test_member_count(self, store: Store, repo: QueryRepository) -> None:
        from crmctl.services.relationships import RelationshipService

        acme = make_organization(store, "Acme")
        make_organization(store, "Beta")
        jane = make_person(store, "Jane", "Doe")
        RelationshipService(store).link_organization(acme["id"], jane["id"])
        rows = repo.list_organization_rows(
            sort_field="name", descending=False, limit=10, offset=0
        )
        assert [(r["name"], r["member_count"]) for r in rows] == [("Acme", 1), ("Beta", 0)]


class TestSearchQueries:
    def test_prefix_ranks_first(self, store: Store, repo: QueryRepository) -> None:
        make_person(store, "Joanna", "Smith")
        make_person(store, "Ann", "Lee")
        rows = repo.typeahead_people("ann", limit=10)
        assert [(r["first_name"], r["rank"]) for r in rows] == [("Ann", 0), ("Joanna", 1)]

    def test_entity_counts(self, store: Store, repo: QueryRepository) -> None:
        make_person(store, "Jane", "Doe")
        make_organization(store, "Acme")
        counts = repo.entity_counts()
        assert counts["people"] == 1
        assert counts["organizations"] == 1
        assert counts["interactions"] == 0
