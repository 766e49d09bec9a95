"""OrganizationService: create, read, list, update, and delete organizations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy import delete, insert, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from crmctl.domain.followup import display_name
from crmctl.domain.models import OrganizationDraft, OrganizationPatch
from crmctl.domain.types import SortDirection
from crmctl.infrastructure.database.schema import organization
from crmctl.services._helpers import now_iso
from crmctl.services.base import BaseService
from crmctl.services.contracts import OrganizationListItem
from crmctl.services.result import ErrorCode, ServiceResult
from crmctl.services.telemetry import traced

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

ORGANIZATION_SORT_FIELDS = frozenset({"name", "org_type", "created_at"})


def organization_record(row: Mapping[str, Any]) -> dict[str, Any]:
    """Public shape of an organization row."""
    return {
        "id": row["id"],
        "name": row["name"],
        "org_type_id": row["org_type_id"],
        "org_type": row["org_type"],
        "notes": row.get("notes"),
        "member_count": row.get("member_count", 0),
        "created_at": row.get("created_at"),
        "updated_at": row.get("updated_at"),
    }


def _messages(name: str | None, org_type_id: int | None) -> dict[str, str]:
    return {
        ErrorCode.DUPLICATE: f"An organization named {name} already exists",
        ErrorCode.INVALID_REFERENCE: f"Org type not found: {org_type_id}",
    }


class OrganizationService(BaseService):
    """Handles organization records."""

    @traced
    def create(self, data: Mapping[str, Any]) -> ServiceResult:
        """Insert an organization. Required: ``name``, ``org_type_id``."""
        op = "create_organization"
        try:
            draft = OrganizationDraft.model_validate(dict(data))
        except ValidationError as exc:
            return self._invalid(op, exc)

        stamp = now_iso()
        try:
            with self._store.transaction() as conn:
                result = conn.execute(
                    insert(organization).values(
                        **draft.model_dump(), created_at=stamp, updated_at=stamp
                    )
                )
                organization_id = int(result.inserted_primary_key[0])
        except IntegrityError as exc:
            return self._integrity(op, exc, messages=_messages(draft.name, draft.org_type_id))
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        logger.info("Created organization %d", organization_id)
        row = self._queries.get_organization(organization_id) or {}
        return ServiceResult(ok=True, op=op, data=organization_record(row))

    @traced
    def get(self, organization_id: int) -> ServiceResult:
        """Organization detail with its member people and their roles."""
        op = "get_organization"
        try:
            row = self._queries.get_organization(organization_id)
            if row is None:
                return self._not_found(op, "organization", organization_id)
            members = self._queries.organization_members(organization_id)
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        data = organization_record({**row, "member_count": len(members)})
        data["members"] = [
            {
                "relationship_id": m["relationship_id"],
                "id": m["id"],
                "name": display_name(m["first_name"], m["last_name"], m["middle_name"]),
                "role": m["role"],
            }
            for m in members
        ]
        return ServiceResult(ok=True, op=op, data=data)

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
        """Paginated organization listing (default ``name asc``)."""
        text = query.strip() if query else None
        return self._paginate(
            "list_organizations",
            page=page,
            page_size=page_size,
            sort_by=sort_by,
            direction=direction,
            allowed=ORGANIZATION_SORT_FIELDS,
            default_field="name",
            default_direction=SortDirection.ASC,
            count=lambda: self._queries.count_organizations(query=text),
            fetch=lambda field, desc, limit, offset: self._queries.list_organization_rows(
                sort_field=field, descending=desc, limit=limit, offset=offset, query=text
            ),
            shape=organization_record,
            item_model=OrganizationListItem,
        )

    @traced
    def update(self, organization_id: int, changes: Mapping[str, Any]) -> ServiceResult:
        """Apply a partial update; only supplied keys are written."""
        op = "update_organization"
        try:
            patch = OrganizationPatch.model_validate(dict(changes))
        except ValidationError as exc:
            return self._invalid(op, exc)

        values = patch.changes()
        try:
            current = self._queries.get_organization(organization_id)
        except SQLAlchemyError as exc:
            return self._storage(op, exc)
        if current is None:
            return self._not_found(op, "organization", organization_id)
        if not values:
            return ServiceResult(
                ok=True,
                op=op,
                data=organization_record(current),
                warnings=["No changes supplied"],
            )

        try:
            with self._store.transaction() as conn:
                conn.execute(
                    update(organization)
                    .where(organization.c.id == organization_id)
                    .values(**values, updated_at=now_iso())
                )
        except IntegrityError as exc:
            return self._integrity(
                op,
                exc,
                messages=_messages(
                    values.get("name", current["name"]),
                    values.get("org_type_id", current["org_type_id"]),
                ),
            )
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        logger.info("Updated organization %d: %s", organization_id, sorted(values))
        row = self._queries.get_organization(organization_id) or current
        return ServiceResult(ok=True, op=op, data=organization_record(row))

    @traced
    def delete(self, organization_id: int) -> ServiceResult:
        """Delete an organization; memberships cascade."""
        op = "delete_organization"
        try:
            with self._store.transaction() as conn:
                result = conn.execute(
                    delete(organization).where(organization.c.id == organization_id)
                )
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        if result.rowcount == 0:
            return self._not_found(op, "organization", organization_id)
        logger.info("Deleted organization %d", organization_id)
        return ServiceResult(ok=True, op=op, data={"id": organization_id, "deleted": True})
