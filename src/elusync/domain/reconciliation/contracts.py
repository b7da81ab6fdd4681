"""Identity-resolution contract types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from uuid import UUID


class ResolutionStatus(StrEnum):
    NEW = "new"
    RESOLVED = "resolved"


class MatchKind(StrEnum):
    """Which resolution tier produced the match."""

    EXTERNAL_ID = "external_id"
    SLUG = "slug"
    NAME = "name"
    BIRTH_DATE = "birth_date"
    DEPARTMENT = "department"
    FALLBACK = "fallback"


MATCH_CONFIDENCE: Final[dict[MatchKind, float]] = {
    MatchKind.EXTERNAL_ID: 1.0,
    MatchKind.BIRTH_DATE: 0.9,
    MatchKind.SLUG: 0.8,
    MatchKind.DEPARTMENT: 0.7,
    MatchKind.NAME: 0.6,
    MatchKind.FALLBACK: 0.3,
}


@dataclass(frozen=True, slots=True, kw_only=True)
class IdentityResolution:
    status: ResolutionStatus
    reason: str
    person_id: UUID | None = None
    match_kind: MatchKind | None = None
    candidate_count: int = 0

    @property
    def confidence(self) -> float:
        if self.match_kind is None:
            return 0.0
        return MATCH_CONFIDENCE[self.match_kind]

    @property
    def low_confidence(self) -> bool:
        return self.match_kind is MatchKind.FALLBACK

    @classmethod
    def new(cls, reason: str, *, candidate_count: int = 0) -> IdentityResolution:
        return cls(status=ResolutionStatus.NEW, reason=reason, candidate_count=candidate_count)

    @classmethod
    def resolved(
        cls,
        person_id: UUID,
        match_kind: MatchKind,
        reason: str,
        *,
        candidate_count: int = 1,
    ) -> IdentityResolution:
        return cls(
            status=ResolutionStatus.RESOLVED,
            reason=reason,
            person_id=person_id,
            match_kind=match_kind,
            candidate_count=candidate_count,
        )
