"""RelationshipService: person-person links and organization memberships.

Person-person relationships are undirected. The pair is stored with the
smaller id first, so linking (B, A) after (A, B) hits the same unique key
and is rejected as a duplicate.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError
from sqlalchemy import and_, delete, insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from crmctl.domain.followup import display_name
from crmctl.domain.models import OrganizationLinkDraft, PersonLinkDraft, normalize_pair
from crmctl.infrastructure.database.schema import (
    relationship_organization_person,
    relationship_person_person,
)
from crmctl.services._helpers import now_iso
from crmctl.services.base import BaseService
from crmctl.services.result import ErrorCode, ServiceResult, failure
from crmctl.services.telemetry import traced

logger = logging.getLogger(__name__)

_PEOPLE_MESSAGES = {
    ErrorCode.DUPLICATE: "These people are already related",
    ErrorCode.INVALID_REFERENCE: "Both people must exist",
}
_MEMBERSHIP_MESSAGES = {
    ErrorCode.DUPLICATE: "This person is already linked to the organization",
    ErrorCode.INVALID_REFERENCE: "Both the organization and the person must exist",
}


class RelationshipService(BaseService):
    """Creates, removes, and lists relationship rows."""

    # ------------------------------------------------------------------
    # person <-> person
    # ------------------------------------------------------------------

    @traced
    def link_people(
        self,
        person_a_id: int,
        person_b_id: int,
        notes: str | None = None,
    ) -> ServiceResult:
        """Relate two people. Order does not matter."""
        op = "link_people"
        try:
            draft = PersonLinkDraft.model_validate(
                {"person_a_id": person_a_id, "person_b_id": person_b_id, "notes": notes}
            )
        except ValidationError as exc:
            return self._invalid(op, exc)

        first, second = draft.normalized()
        try:
            if self._queries.person_pair_exists(first, second):
                return failure(
                    op,
                    ErrorCode.DUPLICATE,
                    _PEOPLE_MESSAGES[ErrorCode.DUPLICATE],
                    detail={"person_1_id": first, "person_2_id": second},
                )
            with self._store.transaction() as conn:
                result = conn.execute(
                    insert(relationship_person_person).values(
                        person_1_id=first,
                        person_2_id=second,
                        notes=draft.notes,
                        created_at=now_iso(),
                    )
                )
                relationship_id = int(result.inserted_primary_key[0])
        except IntegrityError as exc:
            return self._integrity(op, exc, messages=_PEOPLE_MESSAGES)
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        logger.info("Linked people %d and %d", first, second)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": relationship_id,
                "person_1_id": first,
                "person_2_id": second,
                "notes": draft.notes,
            },
        )

    @traced
    def unlink_people(self, person_a_id: int, person_b_id: int) -> ServiceResult:
        op = "unlink_people"
        first, second = normalize_pair(person_a_id, person_b_id)
        rpp = relationship_person_person
        try:
            with self._store.transaction() as conn:
                result = conn.execute(
                    delete(rpp).where(and_(rpp.c.person_1_id == first, rpp.c.person_2_id == second))
                )
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        if result.rowcount == 0:
            return self._not_found(op, "relationship", f"{first}-{second}")
        logger.info("Unlinked people %d and %d", first, second)
        return ServiceResult(
            ok=True,
            op=op,
            data={"person_1_id": first, "person_2_id": second, "deleted": True},
        )

    # ------------------------------------------------------------------
    # organization <-> person
    # ------------------------------------------------------------------

    @traced
    def link_organization(
        self,
        organization_id: int,
        person_id: int,
        role: str | None = None,
    ) -> ServiceResult:
        """Record that *person_id* belongs to *organization_id* (optionally with a role)."""
        op = "link_organization"
        try:
            draft = OrganizationLinkDraft.model_validate(
                {"organization_id": organization_id, "person_id": person_id, "role": role}
            )
        except ValidationError as exc:
            return self._invalid(op, exc)

        try:
            with self._store.transaction() as conn:
                result = conn.execute(
                    insert(relationship_organization_person).values(
                        **draft.model_dump(), created_at=now_iso()
                    )
                )
                relationship_id = int(result.inserted_primary_key[0])
        except IntegrityError as exc:
            return self._integrity(op, exc, messages=_MEMBERSHIP_MESSAGES)
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        logger.info("Linked person %d to organization %d", person_id, organization_id)
        return ServiceResult(ok=True, op=op, data={"id": relationship_id, **draft.model_dump()})

    @traced
    def unlink_organization(self, organization_id: int, person_id: int) -> ServiceResult:
        op = "unlink_organization"
        rop = relationship_organization_person
        try:
            with self._store.transaction() as conn:
                result = conn.execute(
                    delete(rop).where(
                        and_(rop.c.organization_id == organization_id, rop.c.person_id == person_id)
                    )
                )
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        if result.rowcount == 0:
            return self._not_found(op, "membership", f"{organization_id}-{person_id}")
        logger.info("Unlinked person %d from organization %d", person_id, organization_id)
        return ServiceResult(
            ok=True,
            op=op,
            data={"organization_id": organization_id, "person_id": person_id, "deleted": True},
        )

    # ------------------------------------------------------------------
    # listing
    # ------------------------------------------------------------------

    @traced
    def list_for_person(self, person_id: int) -> ServiceResult:
        """Everyone and every organization linked to *person_id*."""
        op = "list_relationships"
        try:
            if self._queries.get_person(person_id) is None:
                return self._not_found(op, "person", person_id)
            people = self._queries.related_people(person_id)
            organizations = self._queries.person_organizations(person_id)
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "person_id": person_id,
                "people": [
                    {
                        "relationship_id": r["relationship_id"],
                        "id": r["id"],
                        "name": display_name(r["first_name"], r["last_name"], r["middle_name"]),
                        "notes": r["notes"],
                    }
                    for r in people
                ],
                "organizations": organizations,
            },
        )
