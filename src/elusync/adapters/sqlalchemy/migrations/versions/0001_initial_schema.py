"""Initial schema

Revision ID: 0001
Revises:
Create Date: 2025-01-06 00:00:00

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | tuple[str, ...] | None = None
depends_on: str | tuple[str, ...] | None = None

ENUM = sa.String(length=40)


def _tenure_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("person_id", sa.Uuid(), nullable=False),
        sa.Column("source", ENUM, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "organization",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("short_name", sa.String(), nullable=False),
        sa.Column("color", sa.String(length=16), nullable=True),
        sa.Column("field_sources", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_organization"),
    )
    op.create_index("ix_organization_short_name", "organization", ["short_name"])

    op.create_table(
        "person",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("birth_place", sa.String(), nullable=True),
        sa.Column("gender", sa.String(length=1), nullable=True),
        sa.Column("photo_url", sa.String(), nullable=True),
        sa.Column("current_organization_id", sa.Uuid(), nullable=True),
        sa.Column("field_sources", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["current_organization_id"],
            ["organization.id"],
            name="fk_person_current_organization_id_organization",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_person"),
        sa.UniqueConstraint("slug", name="uq_person_slug"),
    )
    op.create_index("ix_person_last_name_first_name", "person", ["last_name", "first_name"])

    op.create_table(
        "external_identifier",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("source", ENUM, nullable=False),
        sa.Column("value", sa.String(), nullable=False),
        sa.Column("owner_type", ENUM, nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("url", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_external_identifier"),
        sa.UniqueConstraint("source", "value", name="uq_external_identifier_source_value"),
    )
    op.create_index("ix_external_identifier_owner_id", "external_identifier", ["owner_id"])

    op.create_table(
        "mandate",
        *_tenure_columns(),
        sa.Column("mandate_type", ENUM, nullable=False),
        sa.Column("institution", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("constituency", sa.String(), nullable=True),
        sa.Column("department_code", sa.String(length=3), nullable=True),
        sa.Column("locality_code", sa.String(length=5), nullable=True),
        sa.Column("external_id", sa.String(), nullable=True),
        sa.Column("url", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["person_id"], ["person.id"], name="fk_mandate_person_id_person", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_mandate"),
    )
    op.create_index("ix_mandate_person_id", "mandate", ["person_id"])
    op.create_index("ix_mandate_external_id", "mandate", ["external_id"])
    op.create_index("ix_mandate_type_is_current", "mandate", ["mandate_type", "is_current"])

    op.create_table(
        "affiliation",
        *_tenure_columns(),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(
            ["person_id"],
            ["person.id"],
            name="fk_affiliation_person_id_person",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["organization_id"],
            ["organization.id"],
            name="fk_affiliation_organization_id_organization",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_affiliation"),
    )
    op.create_index("ix_affiliation_person_id", "affiliation", ["person_id"])
    op.create_index("ix_affiliation_organization_id", "affiliation", ["organization_id"])

    op.create_table(
        "declaration",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("person_id", sa.Uuid(), nullable=False),
        sa.Column("declaration_type", ENUM, nullable=False),
        sa.Column("natural_key", sa.String(), nullable=False),
        sa.Column("source", ENUM, nullable=False),
        sa.Column("deposit_date", sa.Date(), nullable=True),
        sa.Column("published_on", sa.Date(), nullable=True),
        sa.Column("url", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["person_id"],
            ["person.id"],
            name="fk_declaration_person_id_person",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_declaration"),
        sa.UniqueConstraint("natural_key", name="uq_declaration_natural_key"),
    )
    op.create_index("ix_declaration_person_id", "declaration", ["person_id"])

    op.create_table(
        "judicial_record",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("person_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("category", ENUM, nullable=False),
        sa.Column("status", ENUM, nullable=False),
        sa.Column("natural_key", sa.String(), nullable=False),
        sa.Column("source", ENUM, nullable=False),
        sa.Column("verdict_date", sa.Date(), nullable=True),
        sa.Column("source_url", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["person_id"],
            ["person.id"],
            name="fk_judicial_record_person_id_person",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_judicial_record"),
        sa.UniqueConstraint("natural_key", name="uq_judicial_record_natural_key"),
    )
    op.create_index("ix_judicial_record_person_id", "judicial_record", ["person_id"])

    op.create_table(
        "locality",
        sa.Column("code", sa.String(length=5), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("department_code", sa.String(length=3), nullable=True),
        sa.PrimaryKeyConstraint("code", name="pk_locality"),
    )

    op.create_table(
        "scrutin",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("external_id", sa.String(), nullable=False),
        sa.Column("chamber", sa.String(), nullable=False),
        sa.Column("session", sa.Integer(), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("voting_date", sa.Date(), nullable=True),
        sa.Column("votes_for", sa.Integer(), nullable=False),
        sa.Column("votes_against", sa.Integer(), nullable=False),
        sa.Column("votes_abstain", sa.Integer(), nullable=False),
        sa.Column("adopted", sa.Boolean(), nullable=False),
        sa.Column("source_url", sa.String(), nullable=True),
        sa.Column("votes_hash", sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_scrutin"),
        sa.UniqueConstraint("external_id", name="uq_scrutin_external_id"),
    )

    op.create_table(
        "vote",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("scrutin_id", sa.Uuid(), nullable=False),
        sa.Column("person_id", sa.Uuid(), nullable=False),
        sa.Column("position", ENUM, nullable=False),
        sa.ForeignKeyConstraint(
            ["scrutin_id"], ["scrutin.id"], name="fk_vote_scrutin_id_scrutin", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["person_id"], ["person.id"], name="fk_vote_person_id_person", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_vote"),
        sa.UniqueConstraint("scrutin_id", "person_id", name="uq_vote_scrutin_id_person_id"),
    )
    op.create_index("ix_vote_person_id", "vote", ["person_id"])

    op.create_table(
        "sync_metadata",
        sa.Column("key", sa.String(), nullable=False),
        sa.Column("last_sync_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cursor", sa.String(), nullable=True),
        sa.Column("item_count", sa.Integer(), nullable=False),
        sa.Column("last_duration_s", sa.Float(), nullable=True),
        sa.PrimaryKeyConstraint("key", name="pk_sync_metadata"),
    )


def downgrade() -> None:
    op.drop_table("sync_metadata")
    op.drop_index("ix_vote_person_id", table_name="vote")
    op.drop_table("vote")
    op.drop_table("scrutin")
    op.drop_table("locality")
    op.drop_index("ix_judicial_record_person_id", table_name="judicial_record")
    op.drop_table("judicial_record")
    op.drop_index("ix_declaration_person_id", table_name="declaration")
    op.drop_table("declaration")
    op.drop_index("ix_affiliation_organization_id", table_name="affiliation")
    op.drop_index("ix_affiliation_person_id", table_name="affiliation")
    op.drop_table("affiliation")
    op.drop_index("ix_mandate_type_is_current", table_name="mandate")
    op.drop_index("ix_mandate_external_id", table_name="mandate")
    op.drop_index("ix_mandate_person_id", table_name="mandate")
    op.drop_table("mandate")
    op.drop_index("ix_external_identifier_owner_id", table_name="external_identifier")
    op.drop_table("external_identifier")
    op.drop_index("ix_person_last_name_first_name", table_name="person")
    op.drop_table("person")
    op.drop_index("ix_organization_short_name", table_name="organization")
    op.drop_table("organization")
