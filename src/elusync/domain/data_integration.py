"""Run summaries returned by every sync entry point."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(slots=True, kw_only=True)
class SyncResult:
    """Counts and errors of one sync run.

    ``success`` is derived: a run succeeded iff no error was recorded. A run with
    errors and non-zero counts is still a usable partial result.
    """

    source: str
    dry_run: bool = False
    created: int = 0
    updated: int = 0
    closed: int = 0
    matched: int = 0
    not_found: int = 0
    skipped: int = 0
    low_confidence: int = 0
    errors: list[str] = field(default_factory=list)
    details: Counter[str] = field(default_factory=Counter)
    started_at: datetime | None = None
    duration_s: float | None = None
    fatal: bool = False

    @property
    def success(self) -> bool:
        return not self.errors

    @classmethod
    def failed(cls, source: str, message: str, *, dry_run: bool = False) -> SyncResult:
        return cls(source=source, dry_run=dry_run, errors=[message], fatal=True)

    def as_summary(self) -> dict[str, object]:
        return {
            "success": self.success,
            "created": self.created,
            "updated": self.updated,
            "closed": self.closed,
            "matched": self.matched,
            "notFound": self.not_found,
            "errors": list(self.errors),
        }

    def counters(self) -> dict[str, int]:
        counts = {
            "created": self.created,
            "updated": self.updated,
            "closed": self.closed,
            "matched": self.matched,
            "not_found": self.not_found,
            "skipped": self.skipped,
            "low_confidence": self.low_confidence,
        }
        counts.update(self.details)
        return counts


@dataclass(slots=True, kw_only=True)
class VoteSyncResult(SyncResult):
    total_items: int = 0
    cursor_skipped: int = 0
    votes_created: int = 0
    votes_unchanged: int = 0
    senators_not_found: set[str] = field(default_factory=set)

    @classmethod
    def failed(cls, source: str, message: str, *, dry_run: bool = False) -> VoteSyncResult:
        return cls(source=source, dry_run=dry_run, errors=[message], fatal=True)

    def counters(self) -> dict[str, int]:
        counts = SyncResult.counters(self)
        counts.update(
            {
                "total_items": self.total_items,
                "cursor_skipped": self.cursor_skipped,
                "votes_created": self.votes_created,
                "votes_unchanged": self.votes_unchanged,
                "senators_not_found": len(self.senators_not_found),
            }
        )
        return counts
