"""Fetcher for Cour de cassation criminal decisions naming people already known."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from elusync.adapters.feeds import (
    ClientFactory,
    FeedError,
    FeedFormatError,
    default_client_factory,
    describe_validation_error,
    download,
)
from elusync.config import JudilibreConfig, get_judilibre_config
from elusync.domain.candidates import StagedFeed
from elusync.domain.model import DataSource

from .client import ClientCredentialsAuth, JudilibreAuthError
from .schema import Decision, DecisionSummary, SearchPage
from .translator import (
    SearchTarget,
    is_conviction,
    is_relevant,
    natural_key,
    refers_to,
    translate_decision,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from elusync.adapters.http_resilience import ResilientClient
    from elusync.domain.ports import FeedFetcher

log = getLogger(__name__)

SEARCH_PATH: Final = "/search"
DECISION_PATH: Final = "/decision"
CRIMINAL_CHAMBER: Final = "cr"
DEFAULT_PAGE_SIZE: Final = 25


@dataclass(slots=True)
class JudilibreFetcher:
    """Search each target by name and stage the convictions that survive the homonym checks.

    The feed is never complete: it only covers the searched people.
    """

    targets: Sequence[SearchTarget] = ()
    config: JudilibreConfig = field(default_factory=get_judilibre_config)
    client_factory: ClientFactory = field(default=default_client_factory)
    page_size: int = DEFAULT_PAGE_SIZE

    def __call__(self) -> StagedFeed:
        return asyncio.run(self._collect())

    async def _collect(self) -> StagedFeed:
        resilience = replace(
            self.config.source.resilience, auth=ClientCredentialsAuth.from_config(self.config)
        )
        feed = StagedFeed(source=DataSource.JUDILIBRE, complete=False)
        number = 0
        async with self.client_factory(resilience) as client:
            for target in self.targets:
                try:
                    results = await self._search(client, target)
                except JudilibreAuthError:
                    raise
                except FeedError as exc:
                    log.warning("%s: search failed: %s", target.full_name, exc)
                    feed.errors.append(f"{target.full_name}: {exc}")
                    continue
                for raw in results:
                    number += 1
                    try:
                        decision = DecisionSummary.model_validate(raw)
                    except ValidationError as exc:
                        feed.errors.append(f"Row {number}: {describe_validation_error(exc)}")
                        continue
                    if not await self._confirmed(client, decision, target):
                        continue
                    record = translate_decision(decision, target, number)
                    if record is not None:
                        feed.records.append(record)
        log.info(
            "judilibre: searched %s people, staged %s decisions",
            len(self.targets),
            len(feed.records),
        )
        return feed

    async def _search(
        self, client: ResilientClient, target: SearchTarget
    ) -> list[dict[str, object]]:
        params = {
            "query": target.full_name,
            "chamber": CRIMINAL_CHAMBER,
            "page_size": str(self.page_size),
        }
        try:
            response = await download(client, SEARCH_PATH, params=params)
        except FeedError as exc:
            # the API answers 404 when nothing matches
            if exc.status_code == 404 and not isinstance(exc, JudilibreAuthError):
                return []
            raise
        try:
            page = SearchPage.model_validate(response.json())
        except ValueError as exc:
            raise FeedFormatError(
                f"judilibre: unexpected search response for {target.full_name}"
            ) from exc
        log.debug("%s: %s decisions found", target.full_name, page.total)
        return page.results

    async def _confirmed(
        self, client: ResilientClient, decision: DecisionSummary, target: SearchTarget
    ) -> bool:
        """Homonym checks on the summary, then on the full text for convictions."""

        if not is_relevant(decision, target):
            log.debug("%s: %s names someone else", target.full_name, natural_key(decision))
            return False
        if not is_conviction(decision):
            return True
        try:
            response = await download(client, DECISION_PATH, params={"id": decision.id})
            full = Decision.model_validate(response.json())
        except JudilibreAuthError:
            raise
        except (FeedError, ValueError) as exc:
            log.warning(
                "%s: full text of %s unavailable, keeping the summary check: %s",
                target.full_name,
                decision.id,
                exc,
            )
            return True
        if not refers_to(full.text, target):
            log.info(
                "%s: not named in the full text of %s", target.full_name, natural_key(decision)
            )
            return False
        return True


if TYPE_CHECKING:
    _fetcher_check: FeedFetcher = JudilibreFetcher()
