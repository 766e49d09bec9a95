"""PersonService: create, read, list, update, and delete people.

Person detail is assembled from several joins on every read: the latest
interaction date, the follow-up status derived from it, the interaction
history, related people, and organization memberships.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy import delete, insert, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from crmctl.domain.followup import display_name, evaluate
from crmctl.domain.models import PersonDraft, PersonPatch
from crmctl.domain.types import SortDirection
from crmctl.infrastructure.database.schema import person
from crmctl.services._helpers import follow_up_candidate, local_today, now_iso
from crmctl.services.base import BaseService
from crmctl.services.contracts import PersonListItem
from crmctl.services.result import ErrorCode, ServiceResult
from crmctl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import date

logger = logging.getLogger(__name__)

PERSON_SORT_FIELDS = frozenset(
    {
        "first_name",
        "middle_name",
        "last_name",
        "follow_up_cadence_days",
        "latest_interaction_date",
    }
)


def person_record(row: Mapping[str, Any]) -> dict[str, Any]:
    """Public shape of a person row (adds the display ``name``)."""
    return {
        "id": row["id"],
        "first_name": row["first_name"],
        "middle_name": row.get("middle_name"),
        "last_name": row["last_name"],
        "name": display_name(row["first_name"], row["last_name"], row.get("middle_name")),
        "notes": row.get("notes"),
        "follow_up_cadence_days": row.get("follow_up_cadence_days"),
        "latest_interaction_date": row.get("latest_interaction_date"),
        "created_at": row.get("created_at"),
        "updated_at": row.get("updated_at"),
    }


def _duplicate_message(first_name: str, last_name: str) -> str:
    return f"A person named {first_name} {last_name} already exists"


class PersonService(BaseService):
    """Handles person records."""

    # ------------------------------------------------------------------
    # create
    # ------------------------------------------------------------------

    @traced
    def create(self, data: Mapping[str, Any]) -> ServiceResult:
        """Insert a person.

        Required: ``first_name``, ``last_name``. Optional: ``middle_name``,
        ``notes``, ``follow_up_cadence_days`` (1..3650).
        """
        op = "create_person"
        try:
            draft = PersonDraft.model_validate(dict(data))
        except ValidationError as exc:
            return self._invalid(op, exc)

        stamp = now_iso()
        try:
            with self._store.transaction() as conn:
                result = conn.execute(
                    insert(person).values(**draft.model_dump(), created_at=stamp, updated_at=stamp)
                )
                person_id = int(result.inserted_primary_key[0])
        except IntegrityError as exc:
            return self._integrity(
                op,
                exc,
                messages={
                    ErrorCode.DUPLICATE: _duplicate_message(draft.first_name, draft.last_name)
                },
            )
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        logger.info("Created person %d", person_id)
        row = self._queries.get_person(person_id)
        return ServiceResult(ok=True, op=op, data=person_record(row or {}))

    # ------------------------------------------------------------------
    # get
    # ------------------------------------------------------------------

    @traced
    def get(self, person_id: int, *, today: date | None = None) -> ServiceResult:
        """Person detail with follow-up status, history, and relationships."""
        op = "get_person"
        try:
            row = self._queries.get_person(person_id)
            if row is None:
                return self._not_found(op, "person", person_id)

            with trace_span("person_relations"):
                interactions = self._queries.person_interactions(person_id)
                related = self._queries.related_people(person_id)
                organizations = self._queries.person_organizations(person_id)
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        data = person_record(row)
        data["follow_up"] = None
        if row["follow_up_cadence_days"] is not None:
            window = self._store.settings.dashboard.upcoming_window_days
            status = evaluate(
                follow_up_candidate(row), today or local_today(), window_days=window
            )
            data["follow_up"] = status.to_dict()

        data["interactions"] = interactions
        data["related_people"] = [
            {
                "relationship_id": r["relationship_id"],
                "id": r["id"],
                "name": display_name(r["first_name"], r["last_name"], r["middle_name"]),
                "notes": r["notes"],
            }
            for r in related
        ]
        data["organizations"] = organizations
        return ServiceResult(ok=True, op=op, data=data)

    # ------------------------------------------------------------------
    # list
    # ------------------------------------------------------------------

    @traced
    def list(
        self,
        *,
        page: int = 1,
        page_size: int | None = None,
        sort_by: str | None = None,
        direction: str | None = None,
        query: str | None = None,
    ) -> ServiceResult:
        """Paginated people listing with ``latest_interaction_date``.

        Sort fields outside :data:`PERSON_SORT_FIELDS` fall back to
        ``last_name asc`` with a warning.
        """
        text = query.strip() if query else None
        return self._paginate(
            "list_people",
            page=page,
            page_size=page_size,
            sort_by=sort_by,
            direction=direction,
            allowed=PERSON_SORT_FIELDS,
            default_field="last_name",
            default_direction=SortDirection.ASC,
            count=lambda: self._queries.count_people(query=text),
            fetch=lambda field, desc, limit, offset: self._queries.list_people_rows(
                sort_field=field, descending=desc, limit=limit, offset=offset, query=text
            ),
            shape=person_record,
            item_model=PersonListItem,
        )

    # ------------------------------------------------------------------
    # update
    # ------------------------------------------------------------------

    @traced
    def update(self, person_id: int, changes: Mapping[str, Any]) -> ServiceResult:
        """Apply a partial update; only supplied keys are written."""
        op = "update_person"
        try:
            patch = PersonPatch.model_validate(dict(changes))
        except ValidationError as exc:
            return self._invalid(op, exc)

        values = patch.changes()
        try:
            current = self._queries.get_person(person_id)
        except SQLAlchemyError as exc:
            return self._storage(op, exc)
        if current is None:
            return self._not_found(op, "person", person_id)
        if not values:
            return ServiceResult(
                ok=True,
                op=op,
                data=person_record(current),
                warnings=["No changes supplied"],
            )

        try:
            with self._store.transaction() as conn:
                conn.execute(
                    update(person)
                    .where(person.c.id == person_id)
                    .values(**values, updated_at=now_iso())
                )
        except IntegrityError as exc:
            first = values.get("first_name", current["first_name"])
            last = values.get("last_name", current["last_name"])
            return self._integrity(
                op, exc, messages={ErrorCode.DUPLICATE: _duplicate_message(first, last)}
            )
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        logger.info("Updated person %d: %s", person_id, sorted(values))
        row = self._queries.get_person(person_id)
        return ServiceResult(ok=True, op=op, data=person_record(row or current))

    # ------------------------------------------------------------------
    # delete
    # ------------------------------------------------------------------

    @traced
    def delete(self, person_id: int) -> ServiceResult:
        """Delete a person; interactions and relationships cascade."""
        op = "delete_person"
        try:
            with self._store.transaction() as conn:
                result = conn.execute(delete(person).where(person.c.id == person_id))
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        if result.rowcount == 0:
            return self._not_found(op, "person", person_id)
        logger.info("Deleted person %d", person_id)
        return ServiceResult(ok=True, op=op, data={"id": person_id, "deleted": True})
