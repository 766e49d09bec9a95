"""GraphEngine: lazy-built NetworkX graph of people and organizations.

Rebuilt from the two relationship join tables on first access after each
write transaction; never persisted. Node keys are ``"<type>:<id>"`` so a
person and an organization sharing a numeric id never collide.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import networkx as nx

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

type _Graph = nx.Graph

PERSON_PREFIX = "person"
ORGANIZATION_PREFIX = "organization"


def node_key(kind: str, entity_id: int) -> str:
    """Graph node key for an entity, e.g. ``person:12``."""
    return f"{kind}:{entity_id}"


class GraphEngine:
    """Lazy-loading relationship graph backed by SQLite join tables."""

    def __init__(self, db: Engine) -> None:
        self._db = db
        self._graph: _Graph | None = None

    @property
    def graph(self) -> _Graph:
        """Return the graph, building from DB on first access."""
        if self._graph is None:
            self._graph = self._build_from_db()
        return self._graph

    def invalidate(self) -> None:
        """Clear the cached graph, forcing rebuild on next access."""
        self._graph = None

    def _build_from_db(self) -> _Graph:
        """Build an undirected graph from people, organizations, and links.

        All entities are added first so isolated people and empty
        organizations still appear as nodes.
        """
        from sqlalchemy import select

        from crmctl.domain.followup import display_name
        from crmctl.domain.types import EdgeKind
        from crmctl.infrastructure.database.schema import (
            org_type,
            organization,
            person,
            relationship_organization_person,
            relationship_person_person,
        )

        g: _Graph = nx.Graph()
        with self._db.connect() as conn:
            people = conn.execute(
                select(person.c.id, person.c.first_name, person.c.middle_name, person.c.last_name)
            )
            for row in people:
                g.add_node(
                    node_key(PERSON_PREFIX, row.id),
                    type=PERSON_PREFIX,
                    entity_id=row.id,
                    label=display_name(row.first_name, row.last_name, row.middle_name),
                )

            orgs = conn.execute(
                select(
                    organization.c.id,
                    organization.c.name,
                    org_type.c.name.label("org_type"),
                ).join(org_type, organization.c.org_type_id == org_type.c.id)
            )
            for row in orgs:
                g.add_node(
                    node_key(ORGANIZATION_PREFIX, row.id),
                    type=ORGANIZATION_PREFIX,
                    entity_id=row.id,
                    label=row.name,
                    org_type=row.org_type,
                )

            for row in conn.execute(select(relationship_person_person)):
                g.add_edge(
                    node_key(PERSON_PREFIX, row.person_1_id),
                    node_key(PERSON_PREFIX, row.person_2_id),
                    id=f"{EdgeKind.PERSON_PERSON}:{row.id}",
                    source=node_key(PERSON_PREFIX, row.person_1_id),
                    target=node_key(PERSON_PREFIX, row.person_2_id),
                    type=EdgeKind.PERSON_PERSON.value,
                    relationship_id=row.id,
                    notes=row.notes,
                )

            for row in conn.execute(select(relationship_organization_person)):
                g.add_edge(
                    node_key(ORGANIZATION_PREFIX, row.organization_id),
                    node_key(PERSON_PREFIX, row.person_id),
                    id=f"{EdgeKind.ORGANIZATION_PERSON}:{row.id}",
                    source=node_key(ORGANIZATION_PREFIX, row.organization_id),
                    target=node_key(PERSON_PREFIX, row.person_id),
                    type=EdgeKind.ORGANIZATION_PERSON.value,
                    relationship_id=row.id,
                    role=row.role,
                )
        return g
