from __future__ import annotations

from elusync.domain.data_integration import SyncResult, VoteSyncResult


def test_success_is_derived_from_errors() -> None:
    result = SyncResult(source="deputies", created=3)
    assert result.success

    result.errors.append("row 4: missing last name")
    assert not result.success
    assert not result.fatal


def test_summary_uses_published_keys() -> None:
    result = SyncResult(source="senators", created=1, updated=2, closed=3, matched=4, not_found=5)

    assert result.as_summary() == {
        "success": True,
        "created": 1,
        "updated": 2,
        "closed": 3,
        "matched": 4,
        "notFound": 5,
        "errors": [],
    }


def test_failed_result_is_fatal_with_single_error() -> None:
    result = SyncResult.failed("mayors", "FeedUnavailableError: HTTP 503", dry_run=True)

    assert result.fatal
    assert result.dry_run
    assert result.errors == ["FeedUnavailableError: HTTP 503"]
    assert result.created == 0


def test_counters_include_details() -> None:
    result = SyncResult(source="deputies", low_confidence=2)
    result.details["affiliations_closed"] += 4

    counters = result.counters()

    assert counters["low_confidence"] == 2
    assert counters["affiliations_closed"] == 4


def test_vote_counters_extend_base() -> None:
    result = VoteSyncResult(source="senate_votes", total_items=10, cursor_skipped=7)
    result.senators_not_found.update({"21001", "21002"})

    counters = result.counters()

    assert counters["cursor_skipped"] == 7
    assert counters["senators_not_found"] == 2
    assert counters["created"] == 0
    assert isinstance(VoteSyncResult.failed("senate_votes", "boom"), VoteSyncResult)
