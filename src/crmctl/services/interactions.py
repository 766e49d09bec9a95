"""InteractionService: dated touchpoints between the user and a person.

Interactions drive follow-ups: a person's latest ``interaction_date`` is
what the dashboard measures their cadence against.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy import delete, insert, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from crmctl.domain.followup import display_name
from crmctl.domain.models import InteractionDraft, InteractionPatch
from crmctl.domain.types import SortDirection
from crmctl.infrastructure.database.schema import interaction
from crmctl.services._helpers import now_iso
from crmctl.services.base import BaseService
from crmctl.services.contracts import InteractionItem
from crmctl.services.result import ErrorCode, ServiceResult
from crmctl.services.telemetry import traced

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

INTERACTION_SORT_FIELDS = frozenset({"interaction_date", "created_at"})

_REFERENCE_MESSAGE = "Person or interaction type does not exist"


def interaction_record(row: Mapping[str, Any]) -> dict[str, Any]:
    """Public shape of an interaction row joined with person and type."""
    return {
        "id": row["id"],
        "person_id": row["person_id"],
        "person_name": display_name(row["first_name"], row["last_name"], row.get("middle_name")),
        "interaction_type_id": row["interaction_type_id"],
        "interaction_type": row["interaction_type"],
        "interaction_date": row["interaction_date"],
        "notes": row.get("notes"),
        "created_at": row.get("created_at"),
        "updated_at": row.get("updated_at"),
    }


def _column_values(values: dict[str, Any]) -> dict[str, Any]:
    """Dates are stored as ``YYYY-MM-DD`` text."""
    if values.get("interaction_date") is not None:
        values = {**values, "interaction_date": values["interaction_date"].isoformat()}
    return values


class InteractionService(BaseService):
    """Handles interaction records."""

    @traced
    def create(self, data: Mapping[str, Any]) -> ServiceResult:
        """Log an interaction.

        Required: ``person_id``, ``interaction_type_id``, ``interaction_date``
        (``YYYY-MM-DD``). Optional: ``notes``.
        """
        op = "create_interaction"
        try:
            draft = InteractionDraft.model_validate(dict(data))
        except ValidationError as exc:
            return self._invalid(op, exc)

        stamp = now_iso()
        try:
            with self._store.transaction() as conn:
                result = conn.execute(
                    insert(interaction).values(
                        **_column_values(draft.model_dump()),
                        created_at=stamp,
                        updated_at=stamp,
                    )
                )
                interaction_id = int(result.inserted_primary_key[0])
        except IntegrityError as exc:
            return self._integrity(
                op, exc, messages={ErrorCode.INVALID_REFERENCE: _REFERENCE_MESSAGE}
            )
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        logger.info("Logged interaction %d for person %d", interaction_id, draft.person_id)
        row = self._queries.get_interaction(interaction_id) or {}
        return ServiceResult(ok=True, op=op, data=interaction_record(row))

    @traced
    def get(self, interaction_id: int) -> ServiceResult:
        op = "get_interaction"
        try:
            row = self._queries.get_interaction(interaction_id)
        except SQLAlchemyError as exc:
            return self._storage(op, exc)
        if row is None:
            return self._not_found(op, "interaction", interaction_id)
        return ServiceResult(ok=True, op=op, data=interaction_record(row))

    @traced
    def list(
        self,
        *,
        page: int = 1,
        page_size: int | None = None,
        sort_by: str | None = None,
        direction: str | None = None,
        person_id: int | None = None,
    ) -> ServiceResult:
        """Paginated interactions, newest first by default."""
        return self._paginate(
            "list_interactions",
            page=page,
            page_size=page_size,
            sort_by=sort_by,
            direction=direction,
            allowed=INTERACTION_SORT_FIELDS,
            default_field="interaction_date",
            default_direction=SortDirection.DESC,
            count=lambda: self._queries.count_interactions(person_id=person_id),
            fetch=lambda field, desc, limit, offset: self._queries.list_interaction_rows(
                sort_field=field,
                descending=desc,
                limit=limit,
                offset=offset,
                person_id=person_id,
            ),
            shape=interaction_record,
            item_model=InteractionItem,
        )

    @traced
    def update(self, interaction_id: int, changes: Mapping[str, Any]) -> ServiceResult:
        """Apply a partial update; only supplied keys are written."""
        op = "update_interaction"
        try:
            patch = InteractionPatch.model_validate(dict(changes))
        except ValidationError as exc:
            return self._invalid(op, exc)

        values = _column_values(patch.changes())
        try:
            current = self._queries.get_interaction(interaction_id)
        except SQLAlchemyError as exc:
            return self._storage(op, exc)
        if current is None:
            return self._not_found(op, "interaction", interaction_id)
        if not values:
            return ServiceResult(
                ok=True,
                op=op,
                data=interaction_record(current),
                warnings=["No changes supplied"],
            )

        try:
            with self._store.transaction() as conn:
                conn.execute(
                    update(interaction)
                    .where(interaction.c.id == interaction_id)
                    .values(**values, updated_at=now_iso())
                )
        except IntegrityError as exc:
            return self._integrity(
                op, exc, messages={ErrorCode.INVALID_REFERENCE: _REFERENCE_MESSAGE}
            )
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        logger.info("Updated interaction %d: %s", interaction_id, sorted(values))
        row = self._queries.get_interaction(interaction_id) or current
        return ServiceResult(ok=True, op=op, data=interaction_record(row))

    @traced
    def delete(self, interaction_id: int) -> ServiceResult:
        op = "delete_interaction"
        try:
            with self._store.transaction() as conn:
                result = conn.execute(
                    delete(interaction).where(interaction.c.id == interaction_id)
                )
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        if result.rowcount == 0:
            return self._not_found(op, "interaction", interaction_id)
        logger.info("Deleted interaction %d", interaction_id)
        return ServiceResult(ok=True, op=op, data={"id": interaction_id, "deleted": True})
