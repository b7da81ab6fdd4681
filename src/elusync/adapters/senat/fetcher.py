"""Fetchers for senat.fr: the senators list and the roll-call pages."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING, NamedTuple

from elusync.adapters.feeds import (
    ClientFactory,
    FeedFormatError,
    default_client_factory,
    download,
    fetch_json,
)
from elusync.adapters.http_resilience import ResilientClient, build_limiter
from elusync.config import (
    SourceConfig,
    SyncConfig,
    get_senate_votes_source,
    get_senators_source,
    get_sync_config,
)

from .translator import (
    parse_ballots,
    parse_scrutin_numbers,
    parse_scrutin_page,
    scrutin_path,
    session_index_path,
    stage_senators,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from elusync.domain.candidates import ScrutinRecord, StagedFeed
    from elusync.domain.ports import FeedFetcher, RollCallSource

log = getLogger(__name__)


@dataclass(slots=True)
class SenatorsFetcher:
    source: SourceConfig = field(default_factory=get_senators_source)
    sync: SyncConfig = field(default_factory=get_sync_config)
    client_factory: ClientFactory = field(default=default_client_factory)

    def __call__(self) -> StagedFeed:
        payload = fetch_json(
            self.source.resilience, self.source.url, client_factory=self.client_factory
        )
        return stage_senators(
            payload,
            series_1_start=self.sync.senator_start_series_1,
            series_2_start=self.sync.senator_start_series_2,
        )


class _Clients(NamedTuple):
    index: ResilientClient
    pages: ResilientClient


@dataclass(slots=True)
class SenateRollCalls:
    """Roll calls of one senate session: an HTML index, an HTML page and a JSON file each.

    All requests of a run go through one event loop and one rate limiter, so the
    minimum delay also holds between consecutive roll calls. Use it as a context
    manager, or call :meth:`close`, to release the loop and its connections.
    """

    source: SourceConfig = field(default_factory=get_senate_votes_source)
    client_factory: ClientFactory = field(default=default_client_factory)
    _runner: asyncio.Runner | None = field(default=None, init=False, repr=False)
    _clients: _Clients | None = field(default=None, init=False, repr=False)

    def __enter__(self) -> SenateRollCalls:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        runner, clients = self._runner, self._clients
        self._runner = self._clients = None
        if runner is None:
            return
        try:
            if clients is not None:
                runner.run(_close(clients))
        finally:
            runner.close()

    def list_numbers(self, session: int) -> Sequence[int]:
        async def run(clients: _Clients) -> str:
            response = await download(clients.index, session_index_path(session))
            return response.text

        numbers = parse_scrutin_numbers(self._run(run), session)
        log.info("Senate session %s lists %s roll calls", session, len(numbers))
        return numbers

    def fetch_scrutin(self, session: int, number: int) -> ScrutinRecord:
        async def run(clients: _Clients) -> tuple[str, object]:
            page = await download(clients.pages, scrutin_path(session, number, "html"))
            ballots = await download(clients.pages, scrutin_path(session, number, "json"))
            try:
                payload = ballots.json()
            except ValueError as exc:
                raise FeedFormatError(
                    f"senate votes: scrutin {session}-{number} ballots are not JSON"
                ) from exc
            return page.text, payload

        page, payload = self._run(run)
        record = parse_scrutin_page(page, session=session, number=number)
        return replace(record, positions=parse_ballots(payload))

    def _run[T](self, work: Callable[[_Clients], Awaitable[T]]) -> T:
        if self._runner is None:
            self._runner = asyncio.Runner()
        return self._runner.run(self._with_clients(work))

    async def _with_clients[T](self, work: Callable[[_Clients], Awaitable[T]]) -> T:
        if self._clients is None:
            resilience = self.source.resilience
            limiter = build_limiter(resilience.ratelimit)
            self._clients = _Clients(
                # the session index grows during the session
                index=self.client_factory(replace(resilience, cache=None), limiter=limiter),
                pages=self.client_factory(resilience, limiter=limiter),
            )
        return await work(self._clients)


async def _close(clients: _Clients) -> None:
    await clients.index.aclose()
    await clients.pages.aclose()


if TYPE_CHECKING:
    _fetcher_check: FeedFetcher = SenatorsFetcher()
    _roll_call_check: RollCallSource = SenateRollCalls()
