from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from elusync.domain.model import VotePosition
from elusync.domain.reconciliation import (
    SyncMetadataStore,
    advance_cursor,
    cursor_key,
    vote_positions_hash,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from elusync.adapters.sqlalchemy.unit_of_work import SqlAlchemyReconciliationUnitOfWork


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def test_cursor_key_appends_partition() -> None:
    assert cursor_key("votes-senat", 2024) == "votes-senat:2024"
    assert cursor_key("rne") == "rne"


@pytest.mark.parametrize(
    ("current", "processed", "failed", "expected"),
    [
        (None, [1, 2, 3], [], 3),
        (10, [11, 12], [], 12),
        (10, [11, 12, 13], [12], 11),
        (10, [11, 12], [11], 10),
        (20, [5, 6], [], 20),
        (None, [], [], None),
    ],
)
def test_advance_cursor(
    current: int | None,
    processed: list[int],
    failed: list[int],
    expected: int | None,
) -> None:
    assert advance_cursor(current, processed, failed) == expected


def test_hash_ignores_order() -> None:
    forward = [("21001", VotePosition.POUR), ("21002", VotePosition.CONTRE)]

    assert vote_positions_hash(forward) == vote_positions_hash(reversed(forward))


def test_hash_changes_with_any_position() -> None:
    before = [("21001", VotePosition.POUR), ("21002", VotePosition.CONTRE)]
    after = [("21001", VotePosition.POUR), ("21002", VotePosition.ABSTENTION)]

    assert vote_positions_hash(before) != vote_positions_hash(after)


def test_mark_completed_upserts_one_row(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    clock = _Clock(datetime(2025, 3, 1, tzinfo=UTC))
    store = SyncMetadataStore(sqlite_unit_of_work, clock=clock)

    store.mark_completed("votes-senat:2024", item_count=12, cursor="12", duration_s=3.5)
    clock.now += timedelta(hours=2)
    store.mark_completed("votes-senat:2024", item_count=3)

    metadata = store.get("votes-senat:2024")
    assert metadata is not None
    assert metadata.item_count == 3
    assert metadata.cursor == "12"
    assert metadata.last_sync_at == datetime(2025, 3, 1, 2, tzinfo=UTC)
    assert store.cursor("votes-senat:2024") == 12
    assert [entry.key for entry in store.all()] == ["votes-senat:2024"]


def test_should_sync_respects_min_interval(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    clock = _Clock(datetime(2025, 3, 1, tzinfo=UTC))
    store = SyncMetadataStore(sqlite_unit_of_work, clock=clock)

    assert store.should_sync("senat", timedelta(hours=6))
    store.mark_completed("senat", item_count=348)
    clock.now += timedelta(hours=1)
    assert not store.should_sync("senat", timedelta(hours=6))
    clock.now += timedelta(hours=5)
    assert store.should_sync("senat", timedelta(hours=6))


def test_reset_forgets_key(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    store = SyncMetadataStore(sqlite_unit_of_work)
    store.mark_completed("rne", item_count=34000)

    assert store.reset("rne")
    assert not store.reset("rne")
    assert store.get("rne") is None
    assert store.cursor("rne") is None


def test_non_numeric_cursor_is_ignored(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    store = SyncMetadataStore(sqlite_unit_of_work)
    store.mark_completed("hatvp", item_count=1, cursor="not-a-number")

    assert store.cursor("hatvp") is None
