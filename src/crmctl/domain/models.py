"""Input models: the small request structs every write operation accepts.

Drafts validate a full create payload; patches validate a partial update
where only the keys the caller actually sent are applied
(``model_dump(exclude_unset=True)``). Unknown keys are rejected.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Any, ClassVar, Self

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationError,
    model_validator,
)

from crmctl.domain.types import MAX_CADENCE_DAYS


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
OptionalText = Annotated[str | None, BeforeValidator(_blank_to_none)]
Cadence = Annotated[int, Field(ge=1, le=MAX_CADENCE_DAYS)]
EntityId = Annotated[int, Field(ge=1)]


class _Input(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    # Keys that may be omitted from a patch but never explicitly cleared.
    _non_nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_cleared_required(self) -> Self:
        for key in self._non_nullable:
            if key in self.model_fields_set and getattr(self, key) is None:
                msg = f"{key} cannot be cleared"
                raise ValueError(msg)
        return self

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller supplied."""
        return self.model_dump(exclude_unset=True)


# ---------------------------------------------------------------------------
# People
# ---------------------------------------------------------------------------


class PersonDraft(_Input):
    first_name: Name
    middle_name: OptionalText = None
    last_name: Name
    notes: OptionalText = None
    follow_up_cadence_days: Cadence | None = None


class PersonPatch(_Input):
    _non_nullable: ClassVar[frozenset[str]] = frozenset({"first_name", "last_name"})

    first_name: Name | None = None
    middle_name: OptionalText = None
    last_name: Name | None = None
    notes: OptionalText = None
    follow_up_cadence_days: Cadence | None = None


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------


class OrganizationDraft(_Input):
    name: Name
    org_type_id: EntityId
    notes: OptionalText = None


class OrganizationPatch(_Input):
    _non_nullable: ClassVar[frozenset[str]] = frozenset({"name", "org_type_id"})

    name: Name | None = None
    org_type_id: EntityId | None = None
    notes: OptionalText = None


# ---------------------------------------------------------------------------
# Interactions
# ---------------------------------------------------------------------------


class InteractionDraft(_Input):
    person_id: EntityId
    interaction_type_id: EntityId
    interaction_date: date
    notes: OptionalText = None


class InteractionPatch(_Input):
    _non_nullable: ClassVar[frozenset[str]] = frozenset(
        {"person_id", "interaction_type_id", "interaction_date"}
    )

    person_id: EntityId | None = None
    interaction_type_id: EntityId | None = None
    interaction_date: date | None = None
    notes: OptionalText = None


# ---------------------------------------------------------------------------
# Lookups and relationships
# ---------------------------------------------------------------------------


class LookupDraft(_Input):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class PersonLinkDraft(_Input):
    person_a_id: EntityId
    person_b_id: EntityId
    notes: OptionalText = None

    @model_validator(mode="after")
    def _no_self_link(self) -> Self:
        if self.person_a_id == self.person_b_id:
            msg = "A person cannot have a relationship with themselves"
            raise ValueError(msg)
        return self

    def normalized(self) -> tuple[int, int]:
        """The stored ``(person_1_id, person_2_id)`` pair, smaller id first."""
        return normalize_pair(self.person_a_id, self.person_b_id)


class OrganizationLinkDraft(_Input):
    organization_id: EntityId
    person_id: EntityId
    role: OptionalText = None


def normalize_pair(a: int, b: int) -> tuple[int, int]:
    """Order an unordered person pair so the smaller id comes first.

    Examples:
        >>> normalize_pair(7, 3)
        (3, 7)
    """
    return (a, b) if a < b else (b, a)


def validation_message(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one user-readable line."""
    parts: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
        msg = str(err.get("msg", "invalid value"))
        msg = msg.removeprefix("Value error, ")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)
