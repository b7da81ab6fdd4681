"""Ports for fetching external feeds."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from elusync.domain.candidates import ScrutinRecord, StagedFeed


@runtime_checkable
class FeedFetcher(Protocol):
    """Callable port returning the complete staged snapshot of one feed."""

    def __call__(self) -> StagedFeed: ...


@runtime_checkable
class RollCallSource(Protocol):
    """Ordered, append-mostly roll-call feed partitioned by session."""

    def list_numbers(self, session: int) -> Sequence[int]: ...

    def fetch_scrutin(self, session: int, number: int) -> ScrutinRecord: ...


__all__ = ["FeedFetcher", "RollCallSource"]
