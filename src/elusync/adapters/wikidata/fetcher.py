"""Fetcher for convictions recorded on Wikidata."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Final

from elusync.adapters.feeds import ClientFactory, default_client_factory, fetch_json
from elusync.config import RetryablePayloadError, SourceConfig, get_wikidata_source

from .translator import CONVICTIONS_QUERY, stage_convictions

if TYPE_CHECKING:
    import httpx

    from elusync.domain.candidates import StagedFeed
    from elusync.domain.ports import FeedFetcher

DEFAULT_LIMIT: Final = 500
_SPARQL_JSON: Final = {"Accept": "application/sparql-results+json"}
_TIMEOUT_MARKERS: Final = ("java.util.concurrent.TimeoutException", "QueryTimeoutException")


async def raise_on_query_timeout(response: httpx.Response) -> None:
    """The endpoint may answer a timed-out query with a 200 and a Java stack trace."""

    if response.status_code != 200:
        return
    await response.aread()
    if any(marker in response.text for marker in _TIMEOUT_MARKERS):
        raise RetryablePayloadError("SPARQL query timed out", response=response)


@dataclass(slots=True)
class ConvictionsFetcher:
    source: SourceConfig = field(default_factory=get_wikidata_source)
    client_factory: ClientFactory = field(default=default_client_factory)
    limit: int = DEFAULT_LIMIT

    def __call__(self) -> StagedFeed:
        resilience = replace(
            self.source.resilience,
            response_hooks=(*self.source.resilience.response_hooks, raise_on_query_timeout),
        )
        payload = fetch_json(
            resilience,
            self.source.url,
            params={"query": CONVICTIONS_QUERY.format(limit=self.limit), "format": "json"},
            headers=dict(_SPARQL_JSON),
            client_factory=self.client_factory,
        )
        return stage_convictions(payload)


if TYPE_CHECKING:
    _fetcher_check: FeedFetcher = ConvictionsFetcher()
