"""SQLite database engine and schema via SQLAlchemy Core."""

from crmctl.infrastructure.database.engine import create_db_engine, init_database, seed_lookups
from crmctl.infrastructure.database.schema import (
    interaction,
    interaction_type,
    metadata,
    org_type,
    organization,
    person,
    relationship_organization_person,
    relationship_person_person,
)

__all__ = [
    "create_db_engine",
    "init_database",
    "interaction",
    "interaction_type",
    "metadata",
    "org_type",
    "organization",
    "person",
    "relationship_organization_person",
    "relationship_person_person",
    "seed_lookups",
]
