"""Entity kinds, sort directions, and the fixed lookup defaults."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    """Top-level entities that appear in search results and the graph."""

    PERSON = "person"
    ORGANIZATION = "organization"


class EdgeKind(StrEnum):
    """Relationship rows rendered as graph edges."""

    PERSON_PERSON = "person_person"
    ORGANIZATION_PERSON = "organization_person"


class SortDirection(StrEnum):
    """Sort order for paginated listings."""

    ASC = "asc"
    DESC = "desc"


DEFAULT_ORG_TYPES: tuple[str, ...] = (
    "Company",
    "Non-profit",
    "Government",
    "Educational",
    "Community",
    "Other",
)

DEFAULT_INTERACTION_TYPES: tuple[str, ...] = (
    "Meeting",
    "Call",
    "Email",
    "Message",
    "Social Event",
    "Other",
)

# Upper bound for follow_up_cadence_days (ten years).
MAX_CADENCE_DAYS = 3650
