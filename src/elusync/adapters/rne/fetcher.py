"""Full-snapshot fetcher for sitting mayors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from elusync.adapters.feeds import ClientFactory, default_client_factory, fetch_text
from elusync.config import SourceConfig, SyncConfig, get_mayors_source, get_sync_config

from .translator import stage_mayors

if TYPE_CHECKING:
    from elusync.domain.candidates import StagedFeed
    from elusync.domain.ports import FeedFetcher


@dataclass(slots=True)
class MayorsFetcher:
    source: SourceConfig = field(default_factory=get_mayors_source)
    sync: SyncConfig = field(default_factory=get_sync_config)
    client_factory: ClientFactory = field(default=default_client_factory)

    def __call__(self) -> StagedFeed:
        text = fetch_text(
            self.source.resilience, self.source.url, client_factory=self.client_factory
        )
        return stage_mayors(text, default_start=self.sync.mayor_default_start)


if TYPE_CHECKING:
    _fetcher_check: FeedFetcher = MayorsFetcher()
