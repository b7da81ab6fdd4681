"""Full-snapshot fetcher for sitting deputies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from elusync.adapters.feeds import ClientFactory, default_client_factory, fetch_text
from elusync.config import SourceConfig, get_deputies_source

from .translator import stage_deputies

if TYPE_CHECKING:
    from elusync.domain.candidates import StagedFeed
    from elusync.domain.ports import FeedFetcher


@dataclass(slots=True)
class DeputiesFetcher:
    source: SourceConfig = field(default_factory=get_deputies_source)
    client_factory: ClientFactory = field(default=default_client_factory)

    def __call__(self) -> StagedFeed:
        text = fetch_text(
            self.source.resilience, self.source.url, client_factory=self.client_factory
        )
        return stage_deputies(text)


if TYPE_CHECKING:
    _fetcher_check: FeedFetcher = DeputiesFetcher()
