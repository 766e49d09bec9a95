"""LookupService: the org type and interaction type vocabularies.

Both lookups are plain ``(id, name)`` tables seeded with defaults. Deleting
a value that is still referenced is refused (``RESTRICT`` foreign keys).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import ValidationError
from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from crmctl.domain.models import LookupDraft
from crmctl.infrastructure.database.schema import (
    interaction,
    interaction_type,
    org_type,
    organization,
)
from crmctl.services.base import BaseService
from crmctl.services.result import ErrorCode, ServiceResult
from crmctl.services.telemetry import traced

if TYPE_CHECKING:
    from sqlalchemy import Column, Table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Lookup:
    key: str
    label: str
    table: Table
    referenced_by: Column[int]


_ORG_TYPE = _Lookup("org_type", "org type", org_type, organization.c.org_type_id)
_INTERACTION_TYPE = _Lookup(
    "interaction_type", "interaction type", interaction_type, interaction.c.interaction_type_id
)


class LookupService(BaseService):
    """Lists, adds, and removes lookup values."""

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    @traced
    def list_org_types(self) -> ServiceResult:
        return self._list(_ORG_TYPE, "list_org_types")

    @traced
    def list_interaction_types(self) -> ServiceResult:
        return self._list(_INTERACTION_TYPE, "list_interaction_types")

    @traced
    def create_org_type(self, name: str) -> ServiceResult:
        return self._create(_ORG_TYPE, "create_org_type", name)

    @traced
    def create_interaction_type(self, name: str) -> ServiceResult:
        return self._create(_INTERACTION_TYPE, "create_interaction_type", name)

    @traced
    def delete_org_type(self, lookup_id: int) -> ServiceResult:
        return self._delete(_ORG_TYPE, "delete_org_type", lookup_id)

    @traced
    def delete_interaction_type(self, lookup_id: int) -> ServiceResult:
        return self._delete(_INTERACTION_TYPE, "delete_interaction_type", lookup_id)

    # ------------------------------------------------------------------
    # Shared implementation
    # ------------------------------------------------------------------

    def _list(self, lookup: _Lookup, op: str) -> ServiceResult:
        usage = (
            select(func.count())
            .where(lookup.referenced_by == lookup.table.c.id)
            .correlate(lookup.table)
            .scalar_subquery()
        )
        stmt = select(lookup.table.c.id, lookup.table.c.name, usage.label("usage_count")).order_by(
            lookup.table.c.name.collate("NOCASE")
        )
        try:
            with self._store.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        items = [dict(r) for r in rows]
        return ServiceResult(ok=True, op=op, data={"count": len(items), "items": items})

    def _create(self, lookup: _Lookup, op: str, name: str) -> ServiceResult:
        try:
            draft = LookupDraft.model_validate({"name": name})
        except ValidationError as exc:
            return self._invalid(op, exc)

        try:
            with self._store.transaction() as conn:
                result = conn.execute(insert(lookup.table).values(name=draft.name))
                lookup_id = int(result.inserted_primary_key[0])
        except IntegrityError as exc:
            return self._integrity(
                op,
                exc,
                messages={ErrorCode.DUPLICATE: f"The {lookup.label} {draft.name!r} already exists"},
            )
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        logger.info("Created %s %d (%s)", lookup.key, lookup_id, draft.name)
        return ServiceResult(ok=True, op=op, data={"id": lookup_id, "name": draft.name})

    def _delete(self, lookup: _Lookup, op: str, lookup_id: int) -> ServiceResult:
        try:
            with self._store.transaction() as conn:
                result = conn.execute(delete(lookup.table).where(lookup.table.c.id == lookup_id))
        except IntegrityError as exc:
            return self._integrity(
                op,
                exc,
                code=ErrorCode.IN_USE,
                messages={
                    ErrorCode.IN_USE: f"The {lookup.label} {lookup_id} is still in use",
                },
            )
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        if result.rowcount == 0:
            return self._not_found(op, lookup.label, lookup_id)
        logger.info("Deleted %s %d", lookup.key, lookup_id)
        return ServiceResult(ok=True, op=op, data={"id": lookup_id, "deleted": True})
