"""Application orchestration entry points.

Every ``sync_*`` function returns a summary and never raises: configuration,
database and feed failures come back as a failed :class:`SyncResult`.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import ExitStack
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from elusync.adapters.assemblee import DeputiesFetcher
from elusync.adapters.europarl import MepsFetcher
from elusync.adapters.gouvernement import GovernmentFetcher
from elusync.adapters.hatvp import DeclarationsFetcher
from elusync.adapters.judilibre import JudilibreFetcher, SearchTarget
from elusync.adapters.rne import MayorsFetcher
from elusync.adapters.senat import SenateRollCalls, SenatorsFetcher
from elusync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    is_started,
    startup,
)
from elusync.adapters.wikidata import ConvictionsFetcher
from elusync.config import ConfigurationError, get_sync_config
from elusync.domain.data_integration import SyncResult, VoteSyncResult
from elusync.domain.model import GOVERNMENT_MANDATE_TYPES, DataSource, MandateType
from elusync.domain.ports import FeedUnavailableError, ReconciliationUnitOfWork
from elusync.domain.reconciliation import (
    BatchUpsertPipeline,
    RollCallSync,
    SnapshotScope,
    SyncMetadataStore,
    cursor_key,
)
from elusync.domain.reconciliation import repair_current_organizations as repair_organizations
from elusync.domain.reconciliation.roll_calls import CURSOR_FEED, SOURCE_NAME

if TYPE_CHECKING:
    from elusync.domain.model import SyncMetadata
    from elusync.domain.ports import FeedFetcher, RollCallSource

UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]

log = getLogger(__name__)

_SETUP_ERRORS = (ConfigurationError, StartupError, FeedUnavailableError, SQLAlchemyError)

DEPUTIES_SCOPE = SnapshotScope(
    source=DataSource.ASSEMBLEE_NATIONALE,
    mandate_types=frozenset({MandateType.DEPUTE}),
    close_affiliations=True,
)
SENATORS_SCOPE = SnapshotScope(
    source=DataSource.SENAT,
    mandate_types=frozenset({MandateType.SENATEUR}),
    close_affiliations=True,
)
MAYORS_SCOPE = SnapshotScope(source=DataSource.RNE, mandate_types=frozenset({MandateType.MAIRE}))
GOVERNMENT_SCOPE = SnapshotScope(
    source=DataSource.GOUVERNEMENT, mandate_types=GOVERNMENT_MANDATE_TYPES
)
MEPS_SCOPE = SnapshotScope(
    source=DataSource.PARLEMENT_EUROPEEN,
    mandate_types=frozenset({MandateType.DEPUTE_EUROPEEN}),
    close_affiliations=True,
)
HATVP_SCOPE = SnapshotScope(source=DataSource.HATVP, create_missing=False)
WIKIDATA_SCOPE = SnapshotScope(source=DataSource.WIKIDATA)
JUDILIBRE_SCOPE = SnapshotScope(source=DataSource.JUDILIBRE, create_missing=False)


def _ensure_started() -> None:
    if not is_started():
        startup()


def _recently_synced(
    key: str,
    unit_of_work_factory: UnitOfWorkFactory,
    min_interval_hours: float | None,
) -> bool:
    if not min_interval_hours or min_interval_hours <= 0:
        return False
    store = SyncMetadataStore(unit_of_work_factory)
    return not store.should_sync(key, timedelta(hours=min_interval_hours))


def _run_snapshot(
    scope: SnapshotScope,
    build_source: Callable[[], FeedFetcher],
    *,
    source: FeedFetcher | None,
    unit_of_work_factory: UnitOfWorkFactory | None,
    dry_run: bool,
    limit: int | None,
    min_interval_hours: float | None,
) -> SyncResult:
    name = scope.source.value
    try:
        _ensure_started()
        effective_uow = unit_of_work_factory or SqlAlchemyReconciliationUnitOfWork
        if _recently_synced(name, effective_uow, min_interval_hours):
            log.info("Skipping %s: synced less than %sh ago", name, min_interval_hours)
            result = SyncResult(source=name, dry_run=dry_run)
            result.details["skipped_recent"] = 1
            return result
        effective_source = source or build_source()
        pipeline = BatchUpsertPipeline(
            scope=scope,
            unit_of_work_factory=effective_uow,
            dry_run=dry_run,
            progress_every=get_sync_config().progress_every,
        )
        log.info("Starting %s sync: dry_run=%s, limit=%s", name, dry_run, limit)
        result = pipeline.run(effective_source, limit=limit)
    except _SETUP_ERRORS as exc:
        log.exception("%s sync failed", name)
        return SyncResult.failed(name, f"{type(exc).__name__}: {exc}", dry_run=dry_run)

    log.info(
        "Finished %s sync: created=%s, updated=%s, closed=%s, errors=%s",
        name,
        result.created,
        result.updated,
        result.closed,
        len(result.errors),
    )
    return result


def sync_deputies(
    *,
    source: FeedFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    dry_run: bool = False,
    limit: int | None = None,
    min_interval_hours: float | None = None,
) -> SyncResult:
    """Full snapshot of the sitting deputies."""

    return _run_snapshot(
        DEPUTIES_SCOPE,
        DeputiesFetcher,
        source=source,
        unit_of_work_factory=unit_of_work_factory,
        dry_run=dry_run,
        limit=limit,
        min_interval_hours=min_interval_hours,
    )


def sync_senators(
    *,
    source: FeedFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    dry_run: bool = False,
    limit: int | None = None,
    min_interval_hours: float | None = None,
) -> SyncResult:
    return _run_snapshot(
        SENATORS_SCOPE,
        SenatorsFetcher,
        source=source,
        unit_of_work_factory=unit_of_work_factory,
        dry_run=dry_run,
        limit=limit,
        min_interval_hours=min_interval_hours,
    )


def sync_mayors(
    *,
    source: FeedFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    dry_run: bool = False,
    limit: int | None = None,
    min_interval_hours: float | None = None,
) -> SyncResult:
    return _run_snapshot(
        MAYORS_SCOPE,
        MayorsFetcher,
        source=source,
        unit_of_work_factory=unit_of_work_factory,
        dry_run=dry_run,
        limit=limit,
        min_interval_hours=min_interval_hours,
    )


def sync_government(
    *,
    source: FeedFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    dry_run: bool = False,
    limit: int | None = None,
    min_interval_hours: float | None = None,
) -> SyncResult:
    return _run_snapshot(
        GOVERNMENT_SCOPE,
        GovernmentFetcher,
        source=source,
        unit_of_work_factory=unit_of_work_factory,
        dry_run=dry_run,
        limit=limit,
        min_interval_hours=min_interval_hours,
    )


def sync_meps(
    *,
    source: FeedFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    dry_run: bool = False,
    limit: int | None = None,
    min_interval_hours: float | None = None,
) -> SyncResult:
    return _run_snapshot(
        MEPS_SCOPE,
        MepsFetcher,
        source=source,
        unit_of_work_factory=unit_of_work_factory,
        dry_run=dry_run,
        limit=limit,
        min_interval_hours=min_interval_hours,
    )


def sync_hatvp(
    *,
    source: FeedFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    dry_run: bool = False,
    limit: int | None = None,
    min_interval_hours: float | None = None,
) -> SyncResult:
    """Attach HATVP declarations and photos to people already known."""

    return _run_snapshot(
        HATVP_SCOPE,
        DeclarationsFetcher,
        source=source,
        unit_of_work_factory=unit_of_work_factory,
        dry_run=dry_run,
        limit=limit,
        min_interval_hours=min_interval_hours,
    )


def sync_wikidata_convictions(
    *,
    source: FeedFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    dry_run: bool = False,
    limit: int | None = None,
    min_interval_hours: float | None = None,
) -> SyncResult:
    return _run_snapshot(
        WIKIDATA_SCOPE,
        ConvictionsFetcher,
        source=source,
        unit_of_work_factory=unit_of_work_factory,
        dry_run=dry_run,
        limit=limit,
        min_interval_hours=min_interval_hours,
    )


def judilibre_targets(
    unit_of_work_factory: UnitOfWorkFactory,
    *,
    limit: int | None = None,
    person_slug: str | None = None,
) -> list[SearchTarget]:
    """People to search, those with judicial records first, then by name."""

    with unit_of_work_factory() as uow:
        persons = uow.repositories.persons.list_all()
        with_records = uow.repositories.judicial_records.person_ids()
        if person_slug is not None:
            persons = [person for person in persons if person.slug == person_slug]
        ordered = sorted(
            persons,
            key=lambda person: (person.id not in with_records, person.last_name, person.first_name),
        )
        return [
            SearchTarget(
                first_name=person.first_name,
                last_name=person.last_name,
                birth_date=person.birth_date,
            )
            for person in ordered[:limit]
        ]


def sync_judilibre(
    *,
    source: FeedFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    dry_run: bool = False,
    limit: int | None = None,
    person_slug: str | None = None,
    min_interval_hours: float | None = None,
) -> SyncResult:
    """Attach Cour de cassation convictions to known people.

    ``limit`` caps how many people are searched, not how many decisions are kept.
    Searching a single ``person_slug`` ignores ``min_interval_hours``.
    """

    effective_uow = unit_of_work_factory or SqlAlchemyReconciliationUnitOfWork

    def build_source() -> FeedFetcher:
        targets = judilibre_targets(effective_uow, limit=limit, person_slug=person_slug)
        log.info("Searching Judilibre for %s people", len(targets))
        return JudilibreFetcher(targets=targets)

    return _run_snapshot(
        JUDILIBRE_SCOPE,
        build_source,
        source=source,
        unit_of_work_factory=effective_uow,
        dry_run=dry_run,
        limit=None,
        min_interval_hours=None if person_slug is not None else min_interval_hours,
    )


def sync_senate_votes(
    *,
    session: int | None = None,
    source: RollCallSource | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    dry_run: bool = False,
    force: bool = False,
    limit: int | None = None,
    min_interval_hours: float | None = None,
) -> VoteSyncResult:
    """Import new roll calls of one senate session, defaulting to the configured one."""

    try:
        _ensure_started()
        effective_session = session if session is not None else get_sync_config().senate_session
        effective_uow = unit_of_work_factory or SqlAlchemyReconciliationUnitOfWork
        key = cursor_key(CURSOR_FEED, effective_session)
        if not force and _recently_synced(key, effective_uow, min_interval_hours):
            log.info("Skipping %s: synced less than %sh ago", key, min_interval_hours)
            result = VoteSyncResult(source=SOURCE_NAME, dry_run=dry_run)
            result.details["skipped_recent"] = 1
            return result
        log.info(
            "Starting senate votes sync: session=%s, force=%s, limit=%s, dry_run=%s",
            effective_session,
            force,
            limit,
            dry_run,
        )
        with ExitStack() as stack:
            if source is None:
                source = stack.enter_context(SenateRollCalls())
            sync = RollCallSync(source=source, unit_of_work_factory=effective_uow, dry_run=dry_run)
            result = sync.run(effective_session, force=force, limit=limit)
    except _SETUP_ERRORS as exc:
        log.exception("Senate votes sync failed")
        return VoteSyncResult.failed(SOURCE_NAME, f"{type(exc).__name__}: {exc}", dry_run=dry_run)

    log.info(
        "Finished senate votes sync: total=%s, skipped=%s, created=%s, updated=%s",
        result.total_items,
        result.cursor_skipped,
        result.created,
        result.updated,
    )
    return result


def repair_current_organizations(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    dry_run: bool = False,
) -> SyncResult:
    try:
        _ensure_started()
        return repair_organizations(
            unit_of_work_factory or SqlAlchemyReconciliationUnitOfWork,
            dry_run=dry_run,
        )
    except _SETUP_ERRORS as exc:
        log.exception("Affiliation repair failed")
        return SyncResult.failed(
            "repair_affiliations", f"{type(exc).__name__}: {exc}", dry_run=dry_run
        )


def sync_status(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> list[SyncMetadata]:
    _ensure_started()
    return SyncMetadataStore(unit_of_work_factory or SqlAlchemyReconciliationUnitOfWork).all()


def reset_sync(key: str, *, unit_of_work_factory: UnitOfWorkFactory | None = None) -> bool:
    """Forget the metadata of ``key`` so the next run starts from scratch."""

    _ensure_started()
    return SyncMetadataStore(unit_of_work_factory or SqlAlchemyReconciliationUnitOfWork).reset(key)
