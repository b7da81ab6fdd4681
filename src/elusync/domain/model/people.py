"""People, organizations and the identity anchors that bind them to feeds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from elusync.domain.model._time import utcnow
from elusync.domain.model.enums import DataSource, OwnerType

if TYPE_CHECKING:
    from datetime import date, datetime


@dataclass(eq=False, kw_only=True)
class FieldSourcesMixin:
    """Per-field provenance: which source last wrote each tracked field."""

    field_sources: dict[str, str] = field(default_factory=dict, repr=False)

    def source_of(self, field_name: str) -> DataSource | None:
        raw = self.field_sources.get(field_name)
        if raw is None:
            return None
        try:
            return DataSource(raw)
        except ValueError:
            return None

    def record_source(self, field_name: str, source: DataSource) -> None:
        # reassign so the JSON column is flagged dirty
        self.field_sources = {**self.field_sources, field_name: source.value}


@dataclass(eq=False, kw_only=True)
class Person(FieldSourcesMixin):
    first_name: str
    last_name: str
    slug: str
    id: UUID = field(default_factory=uuid4)
    birth_date: date | None = None
    birth_place: str | None = None
    gender: str | None = None
    photo_url: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    _current_organization_id: UUID | None = field(default=None, init=False, repr=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def current_organization_id(self) -> UUID | None:
        """Organization of the open affiliation; maintained by ``AffiliationService``."""
        return self._current_organization_id

    def _assign_current_organization(self, organization_id: UUID | None) -> bool:
        if self._current_organization_id == organization_id:
            return False
        self._current_organization_id = organization_id
        return True


@dataclass(eq=False, kw_only=True)
class Organization(FieldSourcesMixin):
    """Party or parliamentary group."""

    name: str
    short_name: str
    id: UUID = field(default_factory=uuid4)
    color: str | None = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class ExternalIdentifier:
    """``(source, value)`` is globally unique and never reassigned automatically."""

    source: DataSource
    value: str
    owner_type: OwnerType
    owner_id: UUID
    id: UUID = field(default_factory=uuid4)
    url: str | None = None
