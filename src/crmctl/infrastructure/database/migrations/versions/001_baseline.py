"""Baseline schema: lookups, entities, and relationship join tables.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-17

Databases created by ``crmctl init`` are stamped at this revision without
running it; empty databases get it applied by ``crmctl upgrade``.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None

_ORG_TYPES = ("Company", "Non-profit", "Government", "Educational", "Community", "Other")
_INTERACTION_TYPES = ("Meeting", "Call", "Email", "Message", "Social Event", "Other")


def upgrade() -> None:
    # lookups
    org_type = op.create_table(
        "org_type",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False, unique=True),
    )
    interaction_type = op.create_table(
        "interaction_type",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False, unique=True),
    )

    # person
    op.create_table(
        "person",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.Text, nullable=False),
        sa.Column("middle_name", sa.Text),
        sa.Column("last_name", sa.Text, nullable=False),
        sa.Column("notes", sa.Text),
        sa.Column("follow_up_cadence_days", sa.Integer),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("updated_at", sa.Text, nullable=False),
        sa.UniqueConstraint("first_name", "last_name", name="uq_person_name"),
        sa.CheckConstraint(
            "follow_up_cadence_days IS NULL OR follow_up_cadence_days > 0",
            name="ck_person_cadence_positive",
        ),
    )

    # organization
    op.create_table(
        "organization",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False, unique=True),
        sa.Column(
            "org_type_id",
            sa.Integer,
            sa.ForeignKey("org_type.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("updated_at", sa.Text, nullable=False),
    )
    op.create_index("ix_organization_org_type", "organization", ["org_type_id"])

    # interaction
    op.create_table(
        "interaction",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "person_id",
            sa.Integer,
            sa.ForeignKey("person.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "interaction_type_id",
            sa.Integer,
            sa.ForeignKey("interaction_type.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("interaction_date", sa.Text, nullable=False),
        sa.Column("notes", sa.Text),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("updated_at", sa.Text, nullable=False),
    )
    op.create_index(
        "ix_interaction_person_date", "interaction", ["person_id", "interaction_date"]
    )
    op.create_index("ix_interaction_type", "interaction", ["interaction_type_id"])

    # relationship_person_person
    op.create_table(
        "relationship_person_person",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "person_1_id",
            sa.Integer,
            sa.ForeignKey("person.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "person_2_id",
            sa.Integer,
            sa.ForeignKey("person.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.UniqueConstraint("person_1_id", "person_2_id", name="uq_relationship_person_pair"),
        sa.CheckConstraint("person_1_id < person_2_id", name="ck_relationship_person_order"),
    )
    op.create_index("ix_rel_pp_person_2", "relationship_person_person", ["person_2_id"])

    # relationship_organization_person
    op.create_table(
        "relationship_organization_person",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "organization_id",
            sa.Integer,
            sa.ForeignKey("organization.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "person_id",
            sa.Integer,
            sa.ForeignKey("person.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", sa.Text),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.UniqueConstraint("organization_id", "person_id", name="uq_relationship_org_person"),
    )
    op.create_index("ix_rel_op_person", "relationship_organization_person", ["person_id"])

    # Seed lookup defaults
    op.bulk_insert(org_type, [{"name": n} for n in _ORG_TYPES])
    op.bulk_insert(interaction_type, [{"name": n} for n in _INTERACTION_TYPES])


def downgrade() -> None:
    op.drop_table("relationship_organization_person")
    op.drop_table("relationship_person_person")
    op.drop_table("interaction")
    op.drop_table("organization")
    op.drop_table("person")
    op.drop_table("interaction_type")
    op.drop_table("org_type")
