"""Named operations exposed at the request boundary.

Each operation has a ``*_impl`` function taking the :class:`Store` plus the
payload keys as keyword arguments, wrapped in :func:`pydantic.validate_call`
so malformed arguments fail before a service runs. ``OPERATIONS`` maps the
public name (``"person.create"``) to its implementation.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import validate_call

from crmctl.services.result import ServiceResult

_validated = validate_call(config={"strict": False})


def to_response(result: ServiceResult) -> dict[str, Any]:
    """Convert a ServiceResult to a plain response dict."""
    response: dict[str, Any] = {
        "ok": result.ok,
        "op": result.op,
        "data": result.data,
    }
    if result.warnings:
        response["warnings"] = result.warnings
    if result.error is not None:
        response["error"] = {
            "code": result.error.code,
            "message": result.error.message,
            "detail": result.error.detail,
        }
    return response


# ---------------------------------------------------------------------------
# People
# ---------------------------------------------------------------------------


@_validated
def person_create_impl(store: Any, **fields: Any) -> dict[str, Any]:
    from crmctl.services.people import PersonService

    return to_response(PersonService(store).create(fields))


@_validated
def person_get_impl(store: Any, person_id: int, today: date | None = None) -> dict[str, Any]:
    from crmctl.services.people import PersonService

    return to_response(PersonService(store).get(person_id, today=today))


@_validated
def person_list_impl(
    store: Any,
    page: int = 1,
    page_size: int | None = None,
    sort_by: str | None = None,
    direction: str | None = None,
    query: str | None = None,
) -> dict[str, Any]:
    from crmctl.services.people import PersonService

    result = PersonService(store).list(
        page=page, page_size=page_size, sort_by=sort_by, direction=direction, query=query
    )
    return to_response(result)


@_validated
def person_update_impl(store: Any, person_id: int, changes: dict[str, Any]) -> dict[str, Any]:
    from crmctl.services.people import PersonService

    return to_response(PersonService(store).update(person_id, changes))


@_validated
def person_delete_impl(store: Any, person_id: int) -> dict[str, Any]:
    from crmctl.services.people import PersonService

    return to_response(PersonService(store).delete(person_id))


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------


@_validated
def organization_create_impl(store: Any, **fields: Any) -> dict[str, Any]:
    from crmctl.services.organizations import OrganizationService

    return to_response(OrganizationService(store).create(fields))


@_validated
def organization_get_impl(store: Any, organization_id: int) -> dict[str, Any]:
    from crmctl.services.organizations import OrganizationService

    return to_response(OrganizationService(store).get(organization_id))


@_validated
def organization_list_impl(
    store: Any,
    page: int = 1,
    page_size: int | None = None,
    sort_by: str | None = None,
    direction: str | None = None,
    query: str | None = None,
) -> dict[str, Any]:
    from crmctl.services.organizations import OrganizationService

    result = OrganizationService(store).list(
        page=page, page_size=page_size, sort_by=sort_by, direction=direction, query=query
    )
    return to_response(result)


@_validated
def organization_update_impl(
    store: Any, organization_id: int, changes: dict[str, Any]
) -> dict[str, Any]:
    from crmctl.services.organizations import OrganizationService

    return to_response(OrganizationService(store).update(organization_id, changes))


@_validated
def organization_delete_impl(store: Any, organization_id: int) -> dict[str, Any]:
    from crmctl.services.organizations import OrganizationService

    return to_response(OrganizationService(store).delete(organization_id))


# ---------------------------------------------------------------------------
# Interactions
# ---------------------------------------------------------------------------


@_validated
def interaction_create_impl(store: Any, **fields: Any) -> dict[str, Any]:
    from crmctl.services.interactions import InteractionService

    return to_response(InteractionService(store).create(fields))


@_validated
def interaction_get_impl(store: Any, interaction_id: int) -> dict[str, Any]:
    from crmctl.services.interactions import InteractionService

    return to_response(InteractionService(store).get(interaction_id))


@_validated
def interaction_list_impl(
    store: Any,
    page: int = 1,
    page_size: int | None = None,
    sort_by: str | None = None,
    direction: str | None = None,
    person_id: int | None = None,
) -> dict[str, Any]:
    from crmctl.services.interactions import InteractionService

    result = InteractionService(store).list(
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        direction=direction,
        person_id=person_id,
    )
    return to_response(result)


@_validated
def interaction_update_impl(
    store: Any, interaction_id: int, changes: dict[str, Any]
) -> dict[str, Any]:
    from crmctl.services.interactions import InteractionService

    return to_response(InteractionService(store).update(interaction_id, changes))


@_validated
def interaction_delete_impl(store: Any, interaction_id: int) -> dict[str, Any]:
    from crmctl.services.interactions import InteractionService

    return to_response(InteractionService(store).delete(interaction_id))


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


@_validated
def lookup_org_types_impl(store: Any) -> dict[str, Any]:
    from crmctl.services.lookups import LookupService

    return to_response(LookupService(store).list_org_types())


@_validated
def lookup_interaction_types_impl(store: Any) -> dict[str, Any]:
    from crmctl.services.lookups import LookupService

    return to_response(LookupService(store).list_interaction_types())


@_validated
def lookup_create_org_type_impl(store: Any, name: str) -> dict[str, Any]:
    from crmctl.services.lookups import LookupService

    return to_response(LookupService(store).create_org_type(name))


@_validated
def lookup_create_interaction_type_impl(store: Any, name: str) -> dict[str, Any]:
    from crmctl.services.lookups import LookupService

    return to_response(LookupService(store).create_interaction_type(name))


@_validated
def lookup_delete_org_type_impl(store: Any, lookup_id: int) -> dict[str, Any]:
    from crmctl.services.lookups import LookupService

    return to_response(LookupService(store).delete_org_type(lookup_id))


@_validated
def lookup_delete_interaction_type_impl(store: Any, lookup_id: int) -> dict[str, Any]:
    from crmctl.services.lookups import LookupService

    return to_response(LookupService(store).delete_interaction_type(lookup_id))


# ---------------------------------------------------------------------------
# Relationships
# ---------------------------------------------------------------------------


@_validated
def relationship_link_people_impl(
    store: Any, person_a_id: int, person_b_id: int, notes: str | None = None
) -> dict[str, Any]:
    from crmctl.services.relationships import RelationshipService

    return to_response(RelationshipService(store).link_people(person_a_id, person_b_id, notes))


@_validated
def relationship_unlink_people_impl(
    store: Any, person_a_id: int, person_b_id: int
) -> dict[str, Any]:
    from crmctl.services.relationships import RelationshipService

    return to_response(RelationshipService(store).unlink_people(person_a_id, person_b_id))


@_validated
def relationship_link_organization_impl(
    store: Any, organization_id: int, person_id: int, role: str | None = None
) -> dict[str, Any]:
    from crmctl.services.relationships import RelationshipService

    result = RelationshipService(store).link_organization(organization_id, person_id, role)
    return to_response(result)


@_validated
def relationship_unlink_organization_impl(
    store: Any, organization_id: int, person_id: int
) -> dict[str, Any]:
    from crmctl.services.relationships import RelationshipService

    return to_response(RelationshipService(store).unlink_organization(organization_id, person_id))


@_validated
def relationship_list_for_person_impl(store: Any, person_id: int) -> dict[str, Any]:
    from crmctl.services.relationships import RelationshipService

    return to_response(RelationshipService(store).list_for_person(person_id))


# ---------------------------------------------------------------------------
# Dashboard, search, graph
# ---------------------------------------------------------------------------


@_validated
def dashboard_get_impl(store: Any, today: date | None = None) -> dict[str, Any]:
    from crmctl.services.dashboard import DashboardService

    return to_response(DashboardService(store).dashboard(today))


@_validated
def dashboard_follow_ups_impl(store: Any, today: date | None = None) -> dict[str, Any]:
    from crmctl.services.dashboard import DashboardService

    return to_response(DashboardService(store).follow_ups(today))


@_validated
def search_global_impl(
    store: Any, query: str, limit: int | None = None, kind: str | None = None
) -> dict[str, Any]:
    from crmctl.services.search import SearchService

    return to_response(SearchService(store).typeahead(query, limit=limit, kind=kind))


@_validated
def graph_network_impl(store: Any) -> dict[str, Any]:
    from crmctl.services.graph import GraphService

    return to_response(GraphService(store).network())


@_validated
def graph_neighborhood_impl(store: Any, person_id: int, depth: int = 1) -> dict[str, Any]:
    from crmctl.services.graph import GraphService

    return to_response(GraphService(store).neighborhood(person_id, depth=depth))


OPERATIONS: dict[str, Any] = {
    "person.create": person_create_impl,
    "person.get": person_get_impl,
    "person.list": person_list_impl,
    "person.update": person_update_impl,
    "person.delete": person_delete_impl,
    "organization.create": organization_create_impl,
    "organization.get": organization_get_impl,
    "organization.list": organization_list_impl,
    "organization.update": organization_update_impl,
    "organization.delete": organization_delete_impl,
    "interaction.create": interaction_create_impl,
    "interaction.get": interaction_get_impl,
    "interaction.list": interaction_list_impl,
    "interaction.update": interaction_update_impl,
    "interaction.delete": interaction_delete_impl,
    "lookup.org_types": lookup_org_types_impl,
    "lookup.interaction_types": lookup_interaction_types_impl,
    "lookup.create_org_type": lookup_create_org_type_impl,
    "lookup.create_interaction_type": lookup_create_interaction_type_impl,
    "lookup.delete_org_type": lookup_delete_org_type_impl,
    "lookup.delete_interaction_type": lookup_delete_interaction_type_impl,
    "relationship.link_people": relationship_link_people_impl,
    "relationship.unlink_people": relationship_unlink_people_impl,
    "relationship.link_organization": relationship_link_organization_impl,
    "relationship.unlink_organization": relationship_unlink_organization_impl,
    "relationship.list_for_person": relationship_list_for_person_impl,
    "dashboard.get": dashboard_get_impl,
    "dashboard.follow_ups": dashboard_follow_ups_impl,
    "search.global": search_global_impl,
    "graph.network": graph_network_impl,
    "graph.neighborhood": graph_neighborhood_impl,
}
