"""Time-bounded attachments: mandates and party affiliations.

Both share the same open/closed state machine. ``is_current`` is true exactly
when ``end_date`` is None; :meth:`Tenure.close` and :meth:`Tenure.reopen` are
the only methods that touch either field.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from datetime import date, datetime

    from elusync.domain.model.enums import DataSource, MandateType


class TenureStateError(ValueError):
    """Raised on an invalid open/close transition."""


@dataclass(eq=False, kw_only=True)
class Tenure:
    person_id: UUID
    source: DataSource
    start_date: date | None = None
    id: UUID = field(default_factory=uuid4)
    end_date: date | None = None
    is_current: bool = True
    closed_at: datetime | None = None

    def close(self, *, end_date: date, closed_at: datetime) -> None:
        if not self.is_current:
            raise TenureStateError(f"{type(self).__name__} {self.id} is already closed")
        self.end_date = end_date
        self.is_current = False
        self.closed_at = closed_at

    def reopen(self) -> None:
        if self.is_current:
            raise TenureStateError(f"{type(self).__name__} {self.id} is already open")
        self.end_date = None
        self.is_current = True
        self.closed_at = None


@dataclass(eq=False, kw_only=True)
class Mandate(Tenure):
    mandate_type: MandateType
    institution: str
    title: str
    constituency: str | None = None
    department_code: str | None = None
    locality_code: str | None = None
    external_id: str | None = None
    url: str | None = None

    @property
    def natural_key(self) -> str:
        """Key used for stale detection; falls back to the owner when the feed has none."""
        if self.external_id:
            return self.external_id
        return f"{self.mandate_type}:{self.institution}:{self.person_id}"


@dataclass(eq=False, kw_only=True)
class Affiliation(Tenure):
    organization_id: UUID
