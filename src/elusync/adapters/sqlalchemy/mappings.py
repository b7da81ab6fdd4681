"""SQLAlchemy mapping metadata for the elusync domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from elusync.domain.model import (
    Affiliation,
    DataSource,
    Declaration,
    DeclarationType,
    ExternalIdentifier,
    JudicialCategory,
    JudicialRecord,
    JudicialStatus,
    Locality,
    Mandate,
    MandateType,
    Organization,
    OwnerType,
    Person,
    Scrutin,
    SyncMetadata,
    Vote,
    VotePosition,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _enum[TEnum](enum_type: type[TEnum]) -> Enum:
    return Enum(enum_type, native_enum=False, length=40)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Core tables -----------------------------------------------------------------

person_table = Table(
    "person",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("first_name", String, nullable=False),
    Column("last_name", String, nullable=False),
    Column("slug", String, nullable=False, unique=True),
    Column("birth_date", Date, nullable=True),
    Column("birth_place", String, nullable=True),
    Column("gender", String(1), nullable=True),
    Column("photo_url", String, nullable=True),
    Column(
        "current_organization_id",
        UUIDColumnType,
        ForeignKey("organization.id", ondelete="SET NULL"),
        key="_current_organization_id",
        nullable=True,
    ),
    Column("field_sources", JSON, nullable=False, default=dict),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_person_last_name_first_name", "last_name", "first_name"),
)

organization_table = Table(
    "organization",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("short_name", String, nullable=False, index=True),
    Column("color", String(16), nullable=True),
    Column("field_sources", JSON, nullable=False, default=dict),
    Column("created_at", UTCDateTime(), nullable=False),
)

external_identifier_table = Table(
    "external_identifier",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("source", _enum(DataSource), nullable=False),
    Column("value", String, nullable=False),
    Column("owner_type", _enum(OwnerType), nullable=False),
    Column("owner_id", UUIDColumnType, nullable=False, index=True),
    Column("url", String, nullable=True),
    UniqueConstraint("source", "value", name="uq_external_identifier_source_value"),
)


def _tenure_columns() -> list[Column[object]]:
    return [
        Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
        Column(
            "person_id",
            UUIDColumnType,
            ForeignKey("person.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        Column("source", _enum(DataSource), nullable=False),
        Column("start_date", Date, nullable=True),
        Column("end_date", Date, nullable=True),
        Column("is_current", Boolean, nullable=False, default=True),
        Column("closed_at", UTCDateTime(), nullable=True),
    ]


mandate_table = Table(
    "mandate",
    mapper_registry.metadata,
    *_tenure_columns(),
    Column("mandate_type", _enum(MandateType), nullable=False),
    Column("institution", String, nullable=False),
    Column("title", String, nullable=False),
    Column("constituency", String, nullable=True),
    Column("department_code", String(3), nullable=True),
    Column("locality_code", String(5), nullable=True),
    Column("external_id", String, nullable=True, index=True),
    Column("url", String, nullable=True),
    Index("ix_mandate_type_is_current", "mandate_type", "is_current"),
)

affiliation_table = Table(
    "affiliation",
    mapper_registry.metadata,
    *_tenure_columns(),
    Column(
        "organization_id",
        UUIDColumnType,
        ForeignKey("organization.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
)

declaration_table = Table(
    "declaration",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "person_id",
        UUIDColumnType,
        ForeignKey("person.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("declaration_type", _enum(DeclarationType), nullable=False),
    Column("natural_key", String, nullable=False, unique=True),
    Column("source", _enum(DataSource), nullable=False),
    Column("deposit_date", Date, nullable=True),
    Column("published_on", Date, nullable=True),
    Column("url", String, nullable=True),
)

judicial_record_table = Table(
    "judicial_record",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "person_id",
        UUIDColumnType,
        ForeignKey("person.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("title", String, nullable=False),
    Column("category", _enum(JudicialCategory), nullable=False),
    Column("status", _enum(JudicialStatus), nullable=False),
    Column("natural_key", String, nullable=False, unique=True),
    Column("source", _enum(DataSource), nullable=False),
    Column("verdict_date", Date, nullable=True),
    Column("source_url", String, nullable=True),
)

locality_table = Table(
    "locality",
    mapper_registry.metadata,
    Column("code", String(5), primary_key=True),
    Column("name", String, nullable=False),
    Column("department_code", String(3), nullable=True),
)

scrutin_table = Table(
    "scrutin",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("external_id", String, nullable=False, unique=True),
    Column("chamber", String, nullable=False),
    Column("session", Integer, nullable=False),
    Column("number", Integer, nullable=False),
    Column("title", String, nullable=False),
    Column("voting_date", Date, nullable=True),
    Column("votes_for", Integer, nullable=False, default=0),
    Column("votes_against", Integer, nullable=False, default=0),
    Column("votes_abstain", Integer, nullable=False, default=0),
    Column("adopted", Boolean, nullable=False, default=False),
    Column("source_url", String, nullable=True),
    Column("votes_hash", String(64), nullable=True),
)

vote_table = Table(
    "vote",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "scrutin_id",
        UUIDColumnType,
        ForeignKey("scrutin.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "person_id",
        UUIDColumnType,
        ForeignKey("person.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("position", _enum(VotePosition), nullable=False),
    UniqueConstraint("scrutin_id", "person_id", name="uq_vote_scrutin_id_person_id"),
)

sync_metadata_table = Table(
    "sync_metadata",
    mapper_registry.metadata,
    Column("key", String, primary_key=True),
    Column("last_sync_at", UTCDateTime(), nullable=True),
    Column("cursor", String, nullable=True),
    Column("item_count", Integer, nullable=False, default=0),
    Column("last_duration_s", Float, nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Person, person_table)
    mapper_registry.map_imperatively(Organization, organization_table)
    mapper_registry.map_imperatively(ExternalIdentifier, external_identifier_table)
    mapper_registry.map_imperatively(Mandate, mandate_table)
    mapper_registry.map_imperatively(Affiliation, affiliation_table)
    mapper_registry.map_imperatively(Declaration, declaration_table)
    mapper_registry.map_imperatively(JudicialRecord, judicial_record_table)
    mapper_registry.map_imperatively(Locality, locality_table)
    mapper_registry.map_imperatively(Scrutin, scrutin_table)
    mapper_registry.map_imperatively(Vote, vote_table)
    mapper_registry.map_imperatively(SyncMetadata, sync_metadata_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
