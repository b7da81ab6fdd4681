"""Dated records attached to a person, plus locality reference data."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from datetime import date

    from elusync.domain.model.enums import (
        DataSource,
        DeclarationType,
        JudicialCategory,
        JudicialStatus,
    )


@dataclass(eq=False, kw_only=True)
class Declaration:
    """Interest or asset declaration filed with the HATVP."""

    person_id: UUID
    declaration_type: DeclarationType
    natural_key: str
    source: DataSource
    id: UUID = field(default_factory=uuid4)
    deposit_date: date | None = None
    published_on: date | None = None
    url: str | None = None


@dataclass(eq=False, kw_only=True)
class JudicialRecord:
    person_id: UUID
    title: str
    category: JudicialCategory
    status: JudicialStatus
    natural_key: str
    source: DataSource
    id: UUID = field(default_factory=uuid4)
    verdict_date: date | None = None
    source_url: str | None = None


@dataclass(eq=False, kw_only=True)
class Locality:
    """Commune reference row keyed by INSEE code; looked up, never reconciled."""

    code: str
    name: str
    department_code: str | None = None
