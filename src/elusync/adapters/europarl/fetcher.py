"""Full-snapshot fetcher for the French delegation to the European Parliament."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from elusync.adapters.feeds import ClientFactory, default_client_factory, fetch_json
from elusync.config import SourceConfig, SyncConfig, get_europarl_source, get_sync_config

from .translator import stage_meps

if TYPE_CHECKING:
    from elusync.domain.candidates import StagedFeed
    from elusync.domain.ports import FeedFetcher

_JSON_LD: Final = {"Accept": "application/ld+json"}


@dataclass(slots=True)
class MepsFetcher:
    source: SourceConfig = field(default_factory=get_europarl_source)
    sync: SyncConfig = field(default_factory=get_sync_config)
    client_factory: ClientFactory = field(default=default_client_factory)

    def __call__(self) -> StagedFeed:
        payload = fetch_json(
            self.source.resilience,
            self.source.url,
            headers=dict(_JSON_LD),
            client_factory=self.client_factory,
        )
        return stage_meps(payload, default_start=self.sync.mep_default_start)


if TYPE_CHECKING:
    _fetcher_check: FeedFetcher = MepsFetcher()
