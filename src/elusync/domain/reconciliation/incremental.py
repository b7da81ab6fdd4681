"""Incremental sync state: per-partition metadata, cursors and content hashes."""

from __future__ import annotations

import hashlib
from logging import getLogger
from typing import TYPE_CHECKING

from elusync.domain.model import SyncMetadata, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime, timedelta

    from elusync.domain.model import VotePosition
    from elusync.domain.ports import ReconciliationUnitOfWork

log = getLogger(__name__)


def cursor_key(feed: str, partition: object | None = None) -> str:
    return feed if partition is None else f"{feed}:{partition}"


def vote_positions_hash(positions: Iterable[tuple[str, VotePosition]]) -> str:
    """Order-independent digest of a roll call's individual positions."""

    lines = sorted(f"{voter}:{position}" for voter, position in positions)
    return hashlib.sha256("\n".join(lines).encode("utf-8")).hexdigest()


def advance_cursor(
    current: int | None,
    processed: Iterable[int],
    failed: Iterable[int] = (),
) -> int | None:
    """Return the new high-water mark after a run.

    The cursor never moves past a failed item, so a later run retries it, and it
    never moves backwards.
    """

    failed_numbers = list(failed)
    ceiling = min(failed_numbers) if failed_numbers else None
    eligible = [number for number in processed if ceiling is None or number < ceiling]
    if not eligible:
        return current
    candidate = max(eligible)
    if current is not None and candidate <= current:
        return current
    return candidate


class SyncMetadataStore:
    """Reads and writes :class:`SyncMetadata` rows, one transaction per call."""

    def __init__(
        self,
        unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._clock = clock

    def get(self, key: str) -> SyncMetadata | None:
        with self._uow_factory() as uow:
            return uow.repositories.sync_metadata.get(key)

    def cursor(self, key: str) -> int | None:
        metadata = self.get(key)
        if metadata is None or metadata.cursor is None:
            return None
        try:
            return int(metadata.cursor)
        except ValueError:
            log.warning("Ignoring non-numeric cursor %r for %s", metadata.cursor, key)
            return None

    def mark_completed(
        self,
        key: str,
        *,
        item_count: int,
        cursor: str | None = None,
        duration_s: float | None = None,
    ) -> SyncMetadata:
        with self._uow_factory() as uow:
            repository = uow.repositories.sync_metadata
            metadata = repository.get(key)
            if metadata is None:
                metadata = SyncMetadata(key=key)
                repository.add(metadata)
            metadata.last_sync_at = self._clock()
            metadata.item_count = item_count
            metadata.last_duration_s = duration_s
            if cursor is not None:
                metadata.cursor = cursor
            uow.commit()
        log.debug("Sync metadata %s: items=%s cursor=%s", key, item_count, metadata.cursor)
        return metadata

    def should_sync(self, key: str, min_interval: timedelta) -> bool:
        metadata = self.get(key)
        if metadata is None or metadata.last_sync_at is None:
            return True
        return self._clock() - metadata.last_sync_at >= min_interval

    def all(self) -> list[SyncMetadata]:
        with self._uow_factory() as uow:
            return sorted(uow.repositories.sync_metadata.list_all(), key=lambda m: m.key)

    def reset(self, key: str) -> bool:
        with self._uow_factory() as uow:
            repository = uow.repositories.sync_metadata
            metadata = repository.get(key)
            if metadata is None:
                return False
            repository.delete(metadata)
            uow.commit()
        log.info("Reset sync metadata for %s", key)
        return True
