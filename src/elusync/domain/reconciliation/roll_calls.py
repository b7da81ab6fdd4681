"""Incremental import of Sénat roll calls.

Roll calls are numbered upwards within a session and almost never change once
published. A per-session cursor skips what an earlier run already stored, and a
hash of the individual positions avoids rewriting unchanged ballots when a
forced run revisits old numbers.
"""

from __future__ import annotations

import time
from logging import getLogger
from typing import TYPE_CHECKING, Final

from elusync.domain.data_integration import VoteSyncResult
from elusync.domain.model import DataSource, OwnerType, Scrutin, Vote, utcnow
from elusync.domain.ports import DuplicateRecordError, FeedUnavailableError

from .incremental import SyncMetadataStore, advance_cursor, cursor_key, vote_positions_hash

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from uuid import UUID

    from elusync.domain.candidates import ScrutinRecord
    from elusync.domain.ports import ReconciliationUnitOfWork, RollCallSource

log = getLogger(__name__)

CHAMBER: Final = "senat"
CURSOR_FEED: Final = "votes-senat"
SOURCE_NAME: Final = "senate_votes"

_METADATA_FIELDS: Final = (
    "title",
    "voting_date",
    "votes_for",
    "votes_against",
    "votes_abstain",
    "adopted",
    "source_url",
)


def scrutin_external_id(session: int, number: int) -> str:
    return f"senat-{session}-{number}"


class RollCallSync:
    def __init__(
        self,
        *,
        source: RollCallSource,
        unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
        clock: Callable[[], datetime] = utcnow,
        dry_run: bool = False,
    ) -> None:
        self._source = source
        self._uow_factory = unit_of_work_factory
        self._clock = clock
        self._dry_run = dry_run
        self._metadata = SyncMetadataStore(unit_of_work_factory, clock=clock)

    def run(self, session: int, *, force: bool = False, limit: int | None = None) -> VoteSyncResult:
        started = time.monotonic()
        result = VoteSyncResult(source=SOURCE_NAME, dry_run=self._dry_run, started_at=self._clock())
        key = cursor_key(CURSOR_FEED, session)

        try:
            numbers = sorted(self._source.list_numbers(session))
        except FeedUnavailableError as exc:
            log.error("Senate session %s index unavailable: %s", session, exc)  # noqa: TRY400
            return VoteSyncResult.failed(SOURCE_NAME, str(exc), dry_run=self._dry_run)

        cursor = self._metadata.cursor(key)
        result.total_items = len(numbers)
        pending = [n for n in numbers if force or cursor is None or n > cursor]
        result.cursor_skipped = len(numbers) - len(pending)
        if limit is not None:
            pending = pending[:limit]
        log.info(
            "Session %s: %s roll calls, cursor=%s, %s to process",
            session,
            len(numbers),
            cursor,
            len(pending),
        )

        voters = self._voter_index()
        processed: list[int] = []
        failed: list[int] = []
        for number in pending:
            label = f"Scrutin {session}-{number}"
            try:
                record = self._source.fetch_scrutin(session, number)
                self._store(record, voters, result)
            except (FeedUnavailableError, DuplicateRecordError, ValueError) as exc:
                log.warning("%s failed: %s", label, exc)
                result.errors.append(f"{label}: {exc}")
                failed.append(number)
                continue
            processed.append(number)

        result.duration_s = time.monotonic() - started
        if not self._dry_run:
            advanced = advance_cursor(cursor, processed, failed)
            self._metadata.mark_completed(
                key,
                item_count=len(numbers),
                cursor=None if advanced is None else str(advanced),
                duration_s=result.duration_s,
            )
        if result.senators_not_found:
            log.warning(
                "%s senators not found: %s",
                len(result.senators_not_found),
                ", ".join(sorted(result.senators_not_found)[:20]),
            )
        log.info("Senate votes session %s finished: %s", session, result.counters())
        return result

    def _voter_index(self) -> dict[str, UUID]:
        voters: dict[str, UUID] = {}
        with self._uow_factory() as uow:
            anchors = uow.repositories.external_ids.list_for_source(
                DataSource.SENAT, OwnerType.PERSON
            )
        for anchor in anchors:
            voters.setdefault(anchor.value, anchor.owner_id)
            # ballots sometimes drop the trailing letter of a matricule
            if anchor.value.endswith("F"):
                voters.setdefault(anchor.value[:-1], anchor.owner_id)
        return voters

    def _store(
        self,
        record: ScrutinRecord,
        voters: dict[str, UUID],
        result: VoteSyncResult,
    ) -> None:
        ballots: dict[UUID, Vote] = {}
        with self._uow_factory() as uow:
            repositories = uow.repositories
            external_id = scrutin_external_id(record.session, record.number)
            scrutin = repositories.scrutins.get_by_external_id(external_id)
            if scrutin is None:
                scrutin = Scrutin(
                    external_id=external_id,
                    chamber=CHAMBER,
                    session=record.session,
                    number=record.number,
                    title=record.title,
                )
                repositories.scrutins.add(scrutin)
                self._refresh(scrutin, record)
                result.created += 1
            elif self._refresh(scrutin, record):
                result.updated += 1
            else:
                result.matched += 1

            for matricule, position in record.positions:
                person_id = voters.get(matricule)
                if person_id is None:
                    result.senators_not_found.add(matricule)
                    continue
                ballots.setdefault(
                    person_id, Vote(scrutin_id=scrutin.id, person_id=person_id, position=position)
                )

            if ballots:
                self._write_ballots(scrutin, list(ballots.values()), uow, result)

            if self._dry_run:
                uow.rollback()
            else:
                uow.commit()

    @staticmethod
    def _write_ballots(
        scrutin: Scrutin,
        ballots: list[Vote],
        uow: ReconciliationUnitOfWork,
        result: VoteSyncResult,
    ) -> None:
        # hashed on resolved ballots so a senator matched later gets written
        digest = vote_positions_hash((str(vote.person_id), vote.position) for vote in ballots)
        if scrutin.votes_hash == digest:
            result.votes_unchanged += len(ballots)
            return
        removed = uow.repositories.votes.delete_for_scrutin(scrutin.id)
        for vote in ballots:
            uow.repositories.votes.add(vote)
        scrutin.votes_hash = digest
        result.votes_created += len(ballots)
        result.details["votes_replaced"] += removed

    @staticmethod
    def _refresh(scrutin: Scrutin, record: ScrutinRecord) -> bool:
        changed = False
        for name in _METADATA_FIELDS:
            value = getattr(record, name)
            if getattr(scrutin, name) != value:
                setattr(scrutin, name, value)
                changed = True
        return changed
