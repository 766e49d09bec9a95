"""SQLAlchemy Core table definitions for the crmctl database.

Seven tables: two lookups, three entities, and two relationship join
tables. Foreign keys carry their ON DELETE behaviour in the DDL, so the
``foreign_keys`` pragma must be on for every connection (see engine.py).
"""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

org_type = Table(
    "org_type",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False, unique=True),
)

interaction_type = Table(
    "interaction_type",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False, unique=True),
)

# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

person = Table(
    "person",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("first_name", Text, nullable=False),
    Column("middle_name", Text),
    Column("last_name", Text, nullable=False),
    Column("notes", Text),
    Column("follow_up_cadence_days", Integer),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
    UniqueConstraint("first_name", "last_name", name="uq_person_name"),
    CheckConstraint(
        "follow_up_cadence_days IS NULL OR follow_up_cadence_days > 0",
        name="ck_person_cadence_positive",
    ),
)

organization = Table(
    "organization",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False, unique=True),
    Column(
        "org_type_id",
        Integer,
        ForeignKey("org_type.id", ondelete="RESTRICT"),
        nullable=False,
    ),
    Column("notes", Text),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

interaction = Table(
    "interaction",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "person_id",
        Integer,
        ForeignKey("person.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "interaction_type_id",
        Integer,
        ForeignKey("interaction_type.id", ondelete="RESTRICT"),
        nullable=False,
    ),
    Column("interaction_date", Text, nullable=False),  # YYYY-MM-DD
    Column("notes", Text),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

# ---------------------------------------------------------------------------
# Relationship join tables
# ---------------------------------------------------------------------------

relationship_person_person = Table(
    "relationship_person_person",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "person_1_id",
        Integer,
        ForeignKey("person.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "person_2_id",
        Integer,
        ForeignKey("person.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("notes", Text),
    Column("created_at", Text, nullable=False),
    UniqueConstraint("person_1_id", "person_2_id", name="uq_relationship_person_pair"),
    # Unordered pair stored smaller id first; also forbids self-relationships.
    CheckConstraint("person_1_id < person_2_id", name="ck_relationship_person_order"),
)

relationship_organization_person = Table(
    "relationship_organization_person",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "organization_id",
        Integer,
        ForeignKey("organization.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "person_id",
        Integer,
        ForeignKey("person.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("role", Text),
    Column("created_at", Text, nullable=False),
    UniqueConstraint("organization_id", "person_id", name="uq_relationship_org_person"),
)

# ---------------------------------------------------------------------------
# Indexes for join and filter columns
# ---------------------------------------------------------------------------

Index("ix_interaction_person_date", interaction.c.person_id, interaction.c.interaction_date)
Index("ix_interaction_type", interaction.c.interaction_type_id)
Index("ix_organization_org_type", organization.c.org_type_id)
Index("ix_rel_pp_person_2", relationship_person_person.c.person_2_id)
Index("ix_rel_op_person", relationship_organization_person.c.person_id)
