"""Source-agnostic candidate shapes produced by every feed adapter.

Adapters validate their own wire format and translate each row into a
:class:`SourceRecord`. Everything downstream (identity resolution, field merge,
lifecycle) only ever sees these types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date

    from elusync.domain.model import (
        DataSource,
        DeclarationType,
        JudicialCategory,
        JudicialStatus,
        MandateType,
        VotePosition,
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class Anchor:
    """An identity anchor as seen in a feed."""

    source: DataSource
    value: str
    url: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class PersonCandidate:
    first_name: str
    last_name: str
    anchors: tuple[Anchor, ...] = ()
    birth_date: date | None = None
    birth_place: str | None = None
    gender: str | None = None
    photo_url: str | None = None
    department: str | None = None

    @property
    def label(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def mergeable_fields(self) -> dict[str, object]:
        return {
            "birth_date": self.birth_date,
            "birth_place": self.birth_place,
            "gender": self.gender,
            "photo_url": self.photo_url,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class MandateClaim:
    """An office the feed says the person currently holds.

    ``start_date`` is what the feed reported; ``default_start_date`` is only used
    when creating a mandate the feed gave no date for, and never overrides an
    existing start date.
    """

    mandate_type: MandateType
    institution: str
    title: str
    natural_key: str | None = None
    constituency: str | None = None
    department_code: str | None = None
    locality_code: str | None = None
    locality_name: str | None = None
    start_date: date | None = None
    default_start_date: date | None = None
    url: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class OrganizationClaim:
    source: DataSource
    code: str
    name: str
    short_name: str
    color: str | None = None
    start_date: date | None = None

    @property
    def anchor_value(self) -> str:
        return f"group:{self.code}"


@dataclass(frozen=True, slots=True, kw_only=True)
class DeclarationClaim:
    declaration_type: DeclarationType
    natural_key: str
    deposit_date: date | None = None
    published_on: date | None = None
    url: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class JudicialClaim:
    title: str
    category: JudicialCategory
    status: JudicialStatus
    natural_key: str
    verdict_date: date | None = None
    source_url: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceRecord:
    """One reconciliation unit: a person plus what the feed attaches to them."""

    source: DataSource
    row: int
    person: PersonCandidate
    mandate: MandateClaim | None = None
    organization: OrganizationClaim | None = None
    declaration: DeclarationClaim | None = None
    judicial: JudicialClaim | None = None

    @property
    def label(self) -> str:
        return f"Row {self.row} ({self.person.label})"


@dataclass(slots=True, kw_only=True)
class StagedFeed:
    """Everything parsed from one fetch of a feed.

    ``complete`` is False when the feed was truncated or filtered, in which case
    stale closure must not run.
    """

    source: DataSource
    records: list[SourceRecord] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    complete: bool = True

    def truncated(self, limit: int | None) -> StagedFeed:
        if limit is None or limit >= len(self.records):
            return self
        return StagedFeed(
            source=self.source,
            records=self.records[:limit],
            errors=list(self.errors),
            complete=False,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class ScrutinRecord:
    """One roll call with its per-voter breakdown keyed by source voter id."""

    session: int
    number: int
    title: str
    voting_date: date | None
    votes_for: int
    votes_against: int
    votes_abstain: int
    adopted: bool
    source_url: str
    positions: tuple[tuple[str, VotePosition], ...] = ()
