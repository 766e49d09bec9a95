"""Tests for OrganizationService."""

from __future__ import annotations

from sqlalchemy import func, select

from crmctl.infrastructure.database.schema import organization
from crmctl.infrastructure.store import Store
from crmctl.services.organizations import OrganizationService
from crmctl.services.relationships import RelationshipService
from crmctl.services.result import ErrorCode
from tests.conftest import lookup_id, make_organization, make_person


class TestCreateOrganization:
    def test_create(self, store: Store) -> None:
        type_id = lookup_id(store, "org_type", "Non-profit")
        result = OrganizationService(store).create({"name": "Acme", "org_type_id": type_id})
        assert result.ok
        assert result.data["org_type"] == "Non-profit"
        assert result.data["member_count"] == 0

    def test_name_collision_inserts_nothing(self, store: Store) -> None:
        make_organization(store, "Acme")
        type_id = lookup_id(store, "org_type", "Company")
        result = OrganizationService(store).create({"name": "Acme", "org_type_id": type_id})
        assert not result.ok
        assert result.error is not None
        assert result.error.code == ErrorCode.DUPLICATE
        assert result.error.message == "An organization named Acme already exists"
        with store.connect() as conn:
            assert conn.execute(select(func.count()).select_from(organization)).scalar_one() == 1

    def test_unknown_org_type(self, store: Store) -> None:
        result = OrganizationService(store).create({"name": "Acme", "org_type_id": 999})
        assert result.error is not None
        assert result.error.code == ErrorCode.INVALID_REFERENCE
        assert result.error.message == "Org type not found: 999"

    def test_missing_type(self, store: Store) -> None:
        result = OrganizationService(store).create({"name": "Acme"})
        assert result.error is not None
        assert result.error.code == ErrorCode.VALIDATION_FAILED


class TestReadOrganizations:
    def test_get_with_members(self, store: Store) -> None:
        acme = make_organization(store, "Acme")
        jane = make_person(store, "Jane", "Doe")
        RelationshipService(store).link_organization(acme["id"], jane["id"], role="CEO")
        result = OrganizationService(store).get(acme["id"])
        assert result.ok
        assert result.data["member_count"] == 1
        assert result.data["members"] == [
            {
                "relationship_id": 1,
                "id": jane["id"],
                "name": "Jane Doe",
                "role": "CEO",
            }
        ]

    def test_get_missing(self, store: Store) -> None:
        result = OrganizationService(store).get(3)
        assert result.error is not None
        assert result.error.message == "Organization not found: 3"

    def test_list_sorted_by_type(self, store: Store) -> None:
        make_organization(store, "Zeta", org_type="Community")
        make_organization(store, "Alpha", org_type="Government")
        result = OrganizationService(store).list(sort_by="org_type")
        assert [o["name"] for o in result.data["items"]] == ["Zeta", "Alpha"]


class TestUpdateDeleteOrganization:
    def test_update_type(self, store: Store) -> None:
        acme = make_organization(store, "Acme")
        type_id = lookup_id(store, "org_type", "Other")
        result = OrganizationService(store).update(acme["id"], {"org_type_id": type_id})
        assert result.ok
        assert result.data["org_type"] == "Other"

    def test_update_to_bad_type(self, store: Store) -> None:
        acme = make_organization(store, "Acme")
        result = OrganizationService(store).update(acme["id"], {"org_type_id": 404})
        assert result.error is not None
        assert result.error.code == ErrorCode.INVALID_REFERENCE

    def test_delete_keeps_people(self, store: Store) -> None:
        acme = make_organization(store, "Acme")
        jane = make_person(store, "Jane", "Doe")
        RelationshipService(store).link_organization(acme["id"], jane["id"])
        assert OrganizationService(store).delete(acme["id"]).ok
        from crmctl.services.people import PersonService

        detail = PersonService(store).get(jane["id"])
        assert detail.ok
        assert detail.data["organizations"] == []
