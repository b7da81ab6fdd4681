from __future__ import annotations

import time
from dataclasses import replace
from datetime import date
from itertools import pairwise

import httpx
import pytest

from elusync.adapters.feeds import FeedFormatError
from elusync.adapters.senat import (
    SenateRollCalls,
    parse_ballots,
    parse_scrutin_numbers,
    parse_scrutin_page,
    vote_position,
)
from elusync.config import RateLimit, get_senate_votes_source
from elusync.domain.model import VotePosition
from elusync.domain.ports import FeedUnavailableError
from tests.helpers.feeds import mock_client_factory


def test_index_lists_distinct_numbers_of_session(session_index: str) -> None:
    assert parse_scrutin_numbers(session_index, 2024) == [1, 2]


def test_scrutin_page_metadata(scrutin_page: str) -> None:
    record = parse_scrutin_page(scrutin_page, session=2024, number=1)

    assert record.title == "Projet de loi de finances pour 2025 – ensemble du texte"
    assert record.voting_date == date(2024, 10, 10)
    assert (record.votes_for, record.votes_against, record.votes_abstain) == (212, 118, 10)
    assert record.adopted
    assert record.source_url == "https://www.senat.fr/scrutin-public/2024/scr2024-1.html"
    assert record.positions == ()


def test_rejected_text_and_missing_title() -> None:
    page = "<html><h1>Vote</h1><p>150 pour, 180 contre</p><p>Le Sénat n'a pas adopté.</p></html>"

    record = parse_scrutin_page(page, session=2024, number=7)

    assert record.title == "Scrutin n°7"
    assert not record.adopted
    assert (record.votes_for, record.votes_against, record.votes_abstain) == (150, 180, 0)
    assert record.voting_date is None


@pytest.mark.parametrize(
    ("code", "position"),
    [
        ("p", VotePosition.POUR),
        ("C", VotePosition.CONTRE),
        (" a ", VotePosition.ABSTENTION),
        ("n", VotePosition.NON_VOTANT),
        ("", VotePosition.ABSENT),
        ("x", VotePosition.ABSENT),
    ],
)
def test_vote_position(code: str, position: VotePosition) -> None:
    assert vote_position(code) is position


def test_parse_ballots(ballots_payload: dict[str, object]) -> None:
    assert parse_ballots(ballots_payload) == (
        ("19034F", VotePosition.POUR),
        ("21001", VotePosition.CONTRE),
        ("21003", VotePosition.ABSTENTION),
        ("21004", VotePosition.NON_VOTANT),
        ("21005", VotePosition.ABSENT),
    )


def test_malformed_ballots_fail() -> None:
    with pytest.raises(FeedFormatError):
        parse_ballots({"votes": [{"vote": "p"}]})


class _SenatSite:
    def __init__(
        self, session_index: str, scrutin_page: str, ballots_payload: dict[str, object]
    ) -> None:
        self.pages = {
            "/scrutin-public/scr2024.html": httpx.Response(200, text=session_index),
            "/scrutin-public/2024/scr2024-1.html": httpx.Response(200, text=scrutin_page),
            "/scrutin-public/2024/scr2024-1.json": httpx.Response(200, json=ballots_payload),
        }
        self.requested: list[str] = []
        self.requested_at: list[float] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requested.append(str(request.url))
        self.requested_at.append(time.monotonic())
        return self.pages.get(request.url.path, httpx.Response(404))


def test_roll_call_source_reads_index_page_and_ballots(
    session_index: str, scrutin_page: str, ballots_payload: dict[str, object]
) -> None:
    site = _SenatSite(session_index, scrutin_page, ballots_payload)
    with SenateRollCalls(
        source=get_senate_votes_source(), client_factory=mock_client_factory(site)
    ) as source:
        numbers = source.list_numbers(2024)
        record = source.fetch_scrutin(2024, 1)

    assert list(numbers) == [1, 2]
    assert record.votes_for == 212
    assert record.positions[0] == ("19034F", VotePosition.POUR)
    assert site.requested == [
        "https://www.senat.fr/scrutin-public/scr2024.html",
        "https://www.senat.fr/scrutin-public/2024/scr2024-1.html",
        "https://www.senat.fr/scrutin-public/2024/scr2024-1.json",
    ]


def test_missing_roll_call_is_unavailable(
    session_index: str, scrutin_page: str, ballots_payload: dict[str, object]
) -> None:
    site = _SenatSite(session_index, scrutin_page, ballots_payload)
    with SenateRollCalls(
        source=get_senate_votes_source(), client_factory=mock_client_factory(site)
    ) as source, pytest.raises(FeedUnavailableError, match="HTTP 404"):
        source.fetch_scrutin(2024, 2)


def test_minimum_delay_holds_across_consecutive_roll_calls(
    session_index: str, scrutin_page: str, ballots_payload: dict[str, object]
) -> None:
    site = _SenatSite(session_index, scrutin_page, ballots_payload)
    config = get_senate_votes_source()
    throttled = replace(
        config, resilience=replace(config.resilience, ratelimit=RateLimit.min_interval(0.5))
    )

    with SenateRollCalls(source=throttled, client_factory=mock_client_factory(site)) as source:
        source.list_numbers(2024)
        source.fetch_scrutin(2024, 1)
        source.fetch_scrutin(2024, 1)

    gaps = [later - earlier for earlier, later in pairwise(site.requested_at)]
    assert len(gaps) == 4
    assert min(gaps) >= 0.45


def test_close_is_idempotent(
    session_index: str, scrutin_page: str, ballots_payload: dict[str, object]
) -> None:
    site = _SenatSite(session_index, scrutin_page, ballots_payload)
    source = SenateRollCalls(
        source=get_senate_votes_source(), client_factory=mock_client_factory(site)
    )
    source.list_numbers(2024)

    source.close()
    source.close()

    assert source.list_numbers(2024) == [1, 2]
    source.close()
