"""Read-oriented repository for listing, detail, dashboard, and search views.

Every method opens its own connection through :meth:`Store.connect` (so it
runs under the store mutex) and returns plain row dicts. Sort columns are
only ever looked up in each listing's fixed column map.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import String, and_, case, func, literal, or_, select

from crmctl.infrastructure.database.schema import (
    interaction,
    interaction_type,
    org_type,
    organization,
    person,
    relationship_organization_person,
    relationship_person_person,
)

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Select, Subquery

    from crmctl.infrastructure.store import Store

LIKE_ESCAPE = "\\"


def like_pattern(text: str, *, prefix_only: bool = False) -> str:
    """Build a casefolded LIKE pattern for a substring (or prefix) match.

    ``%`` and ``_`` in the user's text are escaped so they match literally.
    Compare it against casefolded columns.

    Examples:
        >>> like_pattern("50%_off")
        '%50\\\\%\\\\_off%'
    """
    escaped = (
        text.casefold()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    return f"{escaped}%" if prefix_only else f"%{escaped}%"


def _latest_interaction() -> Subquery:
    """Per-person ``MAX(interaction_date)``."""
    return (
        select(
            interaction.c.person_id,
            func.max(interaction.c.interaction_date).label("latest_interaction_date"),
        )
        .group_by(interaction.c.person_id)
        .subquery("latest")
    )


def _matches(column: Any, pattern: str) -> ColumnElement[bool]:
    """Unicode case-insensitive LIKE via the per-connection ``casefold()``."""
    return func.casefold(column, type_=String).like(pattern, escape=LIKE_ESCAPE)


def _full_names() -> tuple[ColumnElement[str], ColumnElement[str]]:
    """Full-name forms: first-last and first-middle-last (NULL with no middle)."""
    space = literal(" ")
    return (
        person.c.first_name + space + person.c.last_name,
        person.c.first_name + space + person.c.middle_name + space + person.c.last_name,
    )


def _person_name_match(pattern: str) -> ColumnElement[bool]:
    short, long = _full_names()
    return or_(
        _matches(person.c.first_name, pattern),
        _matches(person.c.middle_name, pattern),
        _matches(person.c.last_name, pattern),
        _matches(short, pattern),
        _matches(long, pattern),
    )


def _order(stmt: Select[Any], column: Any, *, descending: bool, tiebreak: Any) -> Select[Any]:
    ordered = column.desc() if descending else column.asc()
    return stmt.order_by(ordered.nulls_last(), tiebreak)


class QueryRepository:
    """Encapsulates SQL for read-side operations."""

    def __init__(self, store: Store) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # People
    # ------------------------------------------------------------------

    def get_person(self, person_id: int) -> dict[str, Any] | None:
        """Fetch one person row plus their latest interaction date."""
        latest = _latest_interaction()
        stmt = (
            select(person, latest.c.latest_interaction_date)
            .select_from(person.outerjoin(latest, latest.c.person_id == person.c.id))
            .where(person.c.id == person_id)
        )
        with self._store.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return dict(row) if row is not None else None

    def count_people(self, *, query: str | None = None) -> int:
        stmt = select(func.count()).select_from(person)
        if query:
            stmt = stmt.where(_person_name_match(like_pattern(query)))
        with self._store.connect() as conn:
            return int(conn.execute(stmt).scalar_one() or 0)

    def list_people_rows(
        self,
        *,
        sort_field: str,
        descending: bool,
        limit: int,
        offset: int,
        query: str | None = None,
    ) -> list[dict[str, Any]]:
        """Page of person rows with ``latest_interaction_date``."""
        latest = _latest_interaction()
        sort_columns: dict[str, Any] = {
            "first_name": person.c.first_name.collate("NOCASE"),
            "middle_name": person.c.middle_name.collate("NOCASE"),
            "last_name": person.c.last_name.collate("NOCASE"),
            "follow_up_cadence_days": person.c.follow_up_cadence_days,
            "latest_interaction_date": latest.c.latest_interaction_date,
        }
        stmt = select(
            person.c.id,
            person.c.first_name,
            person.c.middle_name,
            person.c.last_name,
            person.c.follow_up_cadence_days,
            person.c.created_at,
            person.c.updated_at,
            latest.c.latest_interaction_date,
        ).select_from(person.outerjoin(latest, latest.c.person_id == person.c.id))
        if query:
            stmt = stmt.where(_person_name_match(like_pattern(query)))

        stmt = _order(stmt, sort_columns[sort_field], descending=descending, tiebreak=person.c.id)
        stmt = stmt.limit(limit).offset(offset)

        with self._store.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    def person_interactions(self, person_id: int) -> list[dict[str, Any]]:
        """Interactions for one person, newest first."""
        stmt = (
            select(
                interaction.c.id,
                interaction.c.interaction_date,
                interaction.c.interaction_type_id,
                interaction_type.c.name.label("interaction_type"),
                interaction.c.notes,
            )
            .join(interaction_type, interaction.c.interaction_type_id == interaction_type.c.id)
            .where(interaction.c.person_id == person_id)
            .order_by(interaction.c.interaction_date.desc(), interaction.c.id.desc())
        )
        with self._store.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    def related_people(self, person_id: int) -> list[dict[str, Any]]:
        """People linked to *person_id*, whichever side of the pair they sit on."""
        rpp = relationship_person_person
        other_id = case(
            (rpp.c.person_1_id == person_id, rpp.c.person_2_id),
            else_=rpp.c.person_1_id,
        )
        stmt = (
            select(
                rpp.c.id.label("relationship_id"),
                person.c.id,
                person.c.first_name,
                person.c.middle_name,
                person.c.last_name,
                rpp.c.notes,
            )
            .select_from(rpp.join(person, person.c.id == other_id))
            .where(or_(rpp.c.person_1_id == person_id, rpp.c.person_2_id == person_id))
            .order_by(person.c.last_name.collate("NOCASE"), person.c.first_name.collate("NOCASE"))
        )
        with self._store.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    def person_organizations(self, person_id: int) -> list[dict[str, Any]]:
        """Organizations *person_id* belongs to, with their role."""
        rop = relationship_organization_person
        stmt = (
            select(
                rop.c.id.label("relationship_id"),
                organization.c.id,
                organization.c.name,
                org_type.c.name.label("org_type"),
                rop.c.role,
            )
            .select_from(
                rop.join(organization, organization.c.id == rop.c.organization_id).join(
                    org_type, organization.c.org_type_id == org_type.c.id
                )
            )
            .where(rop.c.person_id == person_id)
            .order_by(organization.c.name.collate("NOCASE"))
        )
        with self._store.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    def follow_up_rows(self) -> list[dict[str, Any]]:
        """Every person with a cadence, plus their latest interaction date."""
        latest = _latest_interaction()
        stmt = (
            select(
                person.c.id,
                person.c.first_name,
                person.c.middle_name,
                person.c.last_name,
                person.c.follow_up_cadence_days,
                latest.c.latest_interaction_date,
            )
            .select_from(person.outerjoin(latest, latest.c.person_id == person.c.id))
            .where(person.c.follow_up_cadence_days.is_not(None))
        )
        with self._store.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    # ------------------------------------------------------------------
    # Organizations
    # ------------------------------------------------------------------

    def get_organization(self, organization_id: int) -> dict[str, Any] | None:
        stmt = (
            select(organization, org_type.c.name.label("org_type"))
            .join(org_type, organization.c.org_type_id == org_type.c.id)
            .where(organization.c.id == organization_id)
        )
        with self._store.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return dict(row) if row is not None else None

    def organization_members(self, organization_id: int) -> list[dict[str, Any]]:
        rop = relationship_organization_person
        stmt = (
            select(
                rop.c.id.label("relationship_id"),
                person.c.id,
                person.c.first_name,
                person.c.middle_name,
                person.c.last_name,
                rop.c.role,
            )
            .select_from(rop.join(person, person.c.id == rop.c.person_id))
            .where(rop.c.organization_id == organization_id)
            .order_by(person.c.last_name.collate("NOCASE"), person.c.first_name.collate("NOCASE"))
        )
        with self._store.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    def count_organizations(self, *, query: str | None = None) -> int:
        stmt = select(func.count()).select_from(organization)
        if query:
            stmt = stmt.where(_matches(organization.c.name, like_pattern(query)))
        with self._store.connect() as conn:
            return int(conn.execute(stmt).scalar_one() or 0)

    def list_organization_rows(
        self,
        *,
        sort_field: str,
        descending: bool,
        limit: int,
        offset: int,
        query: str | None = None,
    ) -> list[dict[str, Any]]:
        """Page of organizations with type name and member count."""
        rop = relationship_organization_person
        member_count = (
            select(func.count())
            .where(rop.c.organization_id == organization.c.id)
            .correlate(organization)
            .scalar_subquery()
        )
        sort_columns: dict[str, Any] = {
            "name": organization.c.name.collate("NOCASE"),
            "org_type": org_type.c.name.collate("NOCASE"),
            "created_at": organization.c.created_at,
        }
        stmt = select(
            organization.c.id,
            organization.c.name,
            organization.c.org_type_id,
            org_type.c.name.label("org_type"),
            organization.c.created_at,
            organization.c.updated_at,
            member_count.label("member_count"),
        ).join(org_type, organization.c.org_type_id == org_type.c.id)
        if query:
            stmt = stmt.where(_matches(organization.c.name, like_pattern(query)))

        stmt = _order(
            stmt, sort_columns[sort_field], descending=descending, tiebreak=organization.c.id
        )
        stmt = stmt.limit(limit).offset(offset)

        with self._store.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    # ------------------------------------------------------------------
    # Interactions
    # ------------------------------------------------------------------

    def _interaction_select(self) -> Select[Any]:
        return select(
            interaction.c.id,
            interaction.c.person_id,
            person.c.first_name,
            person.c.middle_name,
            person.c.last_name,
            interaction.c.interaction_type_id,
            interaction_type.c.name.label("interaction_type"),
            interaction.c.interaction_date,
            interaction.c.notes,
            interaction.c.created_at,
            interaction.c.updated_at,
        ).select_from(
            interaction.join(person, person.c.id == interaction.c.person_id).join(
                interaction_type, interaction_type.c.id == interaction.c.interaction_type_id
            )
        )

    def get_interaction(self, interaction_id: int) -> dict[str, Any] | None:
        stmt = self._interaction_select().where(interaction.c.id == interaction_id)
        with self._store.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return dict(row) if row is not None else None

    def count_interactions(self, *, person_id: int | None = None) -> int:
        stmt = select(func.count()).select_from(interaction)
        if person_id is not None:
            stmt = stmt.where(interaction.c.person_id == person_id)
        with self._store.connect() as conn:
            return int(conn.execute(stmt).scalar_one() or 0)

    def list_interaction_rows(
        self,
        *,
        sort_field: str,
        descending: bool,
        limit: int,
        offset: int,
        person_id: int | None = None,
    ) -> list[dict[str, Any]]:
        sort_columns: dict[str, Any] = {
            "interaction_date": interaction.c.interaction_date,
            "created_at": interaction.c.created_at,
        }
        stmt = self._interaction_select()
        if person_id is not None:
            stmt = stmt.where(interaction.c.person_id == person_id)
        tiebreak = interaction.c.id.desc() if descending else interaction.c.id
        stmt = _order(stmt, sort_columns[sort_field], descending=descending, tiebreak=tiebreak)
        stmt = stmt.limit(limit).offset(offset)

        with self._store.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    def recent_interactions(self, limit: int) -> list[dict[str, Any]]:
        return self.list_interaction_rows(
            sort_field="interaction_date", descending=True, limit=limit, offset=0
        )

    # ------------------------------------------------------------------
    # Dashboard and search
    # ------------------------------------------------------------------

    def entity_counts(self) -> dict[str, int]:
        """Row counts for the dashboard header."""
        tables = {
            "people": person,
            "organizations": organization,
            "interactions": interaction,
            "person_relationships": relationship_person_person,
            "organization_memberships": relationship_organization_person,
        }
        counts: dict[str, int] = {}
        with self._store.connect() as conn:
            for key, table in tables.items():
                counts[key] = int(
                    conn.execute(select(func.count()).select_from(table)).scalar_one() or 0
                )
        return counts

    def typeahead_people(self, text: str, *, limit: int) -> list[dict[str, Any]]:
        """People whose name fields contain *text*; prefix matches rank first."""
        prefix = like_pattern(text, prefix_only=True)
        rank = case(
            (
                or_(
                    _matches(person.c.first_name, prefix),
                    _matches(person.c.last_name, prefix),
                ),
                0,
            ),
            else_=1,
        )
        stmt = (
            select(
                person.c.id,
                person.c.first_name,
                person.c.middle_name,
                person.c.last_name,
                rank.label("rank"),
            )
            .where(_person_name_match(like_pattern(text)))
            .order_by(
                rank,
                person.c.first_name.collate("NOCASE"),
                person.c.last_name.collate("NOCASE"),
                person.c.id,
            )
            .limit(limit)
        )
        with self._store.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    def typeahead_organizations(self, text: str, *, limit: int) -> list[dict[str, Any]]:
        """Organizations whose name contains *text*; prefix matches rank first."""
        prefix = like_pattern(text, prefix_only=True)
        rank = case((_matches(organization.c.name, prefix), 0), else_=1)
        stmt = (
            select(organization.c.id, organization.c.name, rank.label("rank"))
            .where(_matches(organization.c.name, like_pattern(text)))
            .order_by(rank, organization.c.name.collate("NOCASE"), organization.c.id)
            .limit(limit)
        )
        with self._store.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    # ------------------------------------------------------------------
    # Existence checks (used by write services for friendly errors)
    # ------------------------------------------------------------------

    def person_pair_exists(self, person_1_id: int, person_2_id: int) -> bool:
        rpp = relationship_person_person
        stmt = select(rpp.c.id).where(
            and_(rpp.c.person_1_id == person_1_id, rpp.c.person_2_id == person_2_id)
        )
        with self._store.connect() as conn:
            return conn.execute(stmt).first() is not None
