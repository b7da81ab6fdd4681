"""Full-snapshot fetcher for current government members."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from elusync.adapters.feeds import ClientFactory, default_client_factory, fetch_text
from elusync.config import SourceConfig, get_government_source

from .translator import stage_government

if TYPE_CHECKING:
    from elusync.domain.candidates import StagedFeed
    from elusync.domain.ports import FeedFetcher


@dataclass(slots=True)
class GovernmentFetcher:
    source: SourceConfig = field(default_factory=get_government_source)
    client_factory: ClientFactory = field(default=default_client_factory)

    def __call__(self) -> StagedFeed:
        text = fetch_text(
            self.source.resilience, self.source.url, client_factory=self.client_factory
        )
        return stage_government(text)


if TYPE_CHECKING:
    _fetcher_check: FeedFetcher = GovernmentFetcher()
