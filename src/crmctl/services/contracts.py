"""Typed payload contracts for service and bridge boundaries.

These models validate operation payload shapes before they leave the
service layer so key regressions (for example ``items`` vs ``results``)
fail fast in tests and during development.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


def dump_validated[T: BaseModel](model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


class PageData(BaseModel):
    """Payload contract shared by every paginated ``list`` operation."""

    items: list[dict[str, Any]]
    page: int
    page_size: int
    total: int
    total_pages: int
    sort_by: str
    sort_direction: Literal["asc", "desc"]


class PersonListItem(BaseModel):
    """One row of ``PersonService.list``."""

    model_config = ConfigDict(extra="allow")

    id: int
    first_name: str
    middle_name: str | None = None
    last_name: str
    name: str
    follow_up_cadence_days: int | None = None
    latest_interaction_date: str | None = None


class OrganizationListItem(BaseModel):
    """One row of ``OrganizationService.list``."""

    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    org_type_id: int
    org_type: str
    member_count: int


class InteractionItem(BaseModel):
    """One interaction row (list, get, and dashboard recents)."""

    model_config = ConfigDict(extra="allow")

    id: int
    person_id: int
    person_name: str
    interaction_type_id: int
    interaction_type: str
    interaction_date: str
    notes: str | None = None


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


class FollowUpItem(BaseModel):
    """One overdue or upcoming follow-up."""

    person_id: int
    name: str
    follow_up_cadence_days: int
    latest_interaction_date: str | None
    due_date: str | None
    days_since: int | None
    days_overdue: int | None
    days_until_due: int | None
    never_contacted: bool
    state: Literal["overdue", "upcoming", "ok"]


class FollowUpsData(BaseModel):
    """Payload contract for ``DashboardService.follow_ups``."""

    today: str
    upcoming_window_days: int
    overdue: list[FollowUpItem]
    upcoming: list[FollowUpItem]


class DashboardData(FollowUpsData):
    """Payload contract for ``DashboardService.dashboard``."""

    counts: dict[str, int]
    recent_interactions: list[InteractionItem]


# ---------------------------------------------------------------------------
# Search and graph
# ---------------------------------------------------------------------------


class SearchItem(BaseModel):
    """One typeahead hit: just enough to render and navigate."""

    id: int
    label: str
    type: Literal["person", "organization"]


class SearchResultData(BaseModel):
    """Payload contract for ``SearchService.typeahead``."""

    query: str
    count: int
    items: list[SearchItem]


class GraphNode(BaseModel):
    """Graph node as consumed by the network view."""

    model_config = ConfigDict(extra="allow")

    id: str
    entity_id: int
    type: Literal["person", "organization"]
    label: str
    degree: int


class GraphEdge(BaseModel):
    """Graph edge; carries ``notes`` (person_person) or ``role`` (organization_person)."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: Literal["person_person", "organization_person"]
    source: str
    target: str


class GraphData(BaseModel):
    """Payload contract for ``GraphService.network`` and ``neighborhood``."""

    model_config = ConfigDict(extra="allow")

    nodes: list[GraphNode]
    edges: list[GraphEdge]
    node_count: int
    edge_count: int
