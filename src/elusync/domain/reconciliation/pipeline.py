"""Four-phase batch upsert of a full feed snapshot.

1. snapshot: remember which records of this source's scope are open
2. stage: fetch and parse the whole feed, build the candidate index
3. reconcile: one transaction per record (resolve, merge, open/refresh)
4. close stale: one transaction per open record absent from the feed

Row-level failures are collected into the result; only setup and store
failures escape :meth:`BatchUpsertPipeline.run`.
"""

from __future__ import annotations

import time
from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from elusync.domain.data_integration import SyncResult
from elusync.domain.model import (
    Declaration,
    ExternalIdentifier,
    JudicialRecord,
    Locality,
    Organization,
    OwnerType,
    Person,
    utcnow,
)
from elusync.domain.ports import DuplicateRecordError, FeedUnavailableError

from .contracts import ResolutionStatus
from .identity import CandidateIndex, resolve_person
from .incremental import SyncMetadataStore
from .lifecycle import AffiliationService, MandateLifecycle, TenureChange
from .normalize import person_slug
from .priority import ORGANIZATION_FIELDS, PERSON_FIELDS, merge_fields

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date, datetime
    from uuid import UUID

    from elusync.domain.candidates import (
        DeclarationClaim,
        JudicialClaim,
        MandateClaim,
        OrganizationClaim,
        SourceRecord,
        StagedFeed,
    )
    from elusync.domain.model import DataSource, MandateType
    from elusync.domain.ports import (
        FeedFetcher,
        ReconciliationRepositories,
        ReconciliationUnitOfWork,
    )

    from .contracts import IdentityResolution

log = getLogger(__name__)

type Clock = Callable[[], datetime]


class ReconciliationError(ValueError):
    """A single record cannot be reconciled; the batch continues."""


class RecordOutcome(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    MATCHED = "matched"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True, kw_only=True)
class SnapshotScope:
    """What a source owns: the mandate types and affiliations it may close."""

    source: DataSource
    mandate_types: frozenset[MandateType] = frozenset()
    close_affiliations: bool = False
    create_missing: bool = True

    @property
    def closes_stale(self) -> bool:
        return bool(self.mandate_types) or self.close_affiliations


@dataclass(slots=True)
class Snapshot:
    mandates: dict[UUID, str] = field(default_factory=dict)
    affiliations: dict[UUID, UUID] = field(default_factory=dict)


@dataclass(slots=True)
class RunState:
    touched_keys: set[str] = field(default_factory=set)
    touched_persons: set[UUID] = field(default_factory=set)
    organizations: dict[tuple[DataSource, str], UUID] = field(default_factory=dict)


@dataclass(slots=True, kw_only=True)
class RecordReport:
    outcome: RecordOutcome
    resolution: IdentityResolution
    person_id: UUID | None = None
    closed: int = 0
    details: Counter[str] = field(default_factory=Counter)
    errors: list[str] = field(default_factory=list)
    # index/cache updates deferred until the record's transaction is settled
    deferred: list[Callable[[], None]] = field(default_factory=list)


class RecordReconciler:
    """Reconciles one :class:`SourceRecord` inside an open unit of work."""

    def __init__(self, *, scope: SnapshotScope, run_at: datetime, dry_run: bool) -> None:
        self._scope = scope
        self._run_at = run_at
        self._run_date: date = run_at.date()
        self._dry_run = dry_run

    def reconcile(
        self,
        record: SourceRecord,
        repositories: ReconciliationRepositories,
        index: CandidateIndex,
        state: RunState,
    ) -> RecordReport:
        resolution = resolve_person(record.person, index)
        report = RecordReport(outcome=RecordOutcome.MATCHED, resolution=resolution)

        if resolution.status is ResolutionStatus.NEW:
            if not self._scope.create_missing:
                report.outcome = RecordOutcome.NOT_FOUND
                return report
            person = self._create_person(record, repositories, index, report)
            report.outcome = RecordOutcome.CREATED
        else:
            if resolution.person_id is None:
                raise ReconciliationError(f"resolved without a person: {resolution.reason}")
            found = repositories.persons.get(resolution.person_id)
            if found is None:
                entry = index.get(resolution.person_id)
                if entry is not None and entry.provisional:
                    # created earlier in this dry run; nothing was persisted
                    report.person_id = resolution.person_id
                    return report
                raise ReconciliationError(f"indexed person {resolution.person_id} is missing")
            person = found

        report.person_id = person.id
        changed = self._apply_person(record, person, repositories, index, report)
        if record.mandate is not None:
            changed |= self._apply_mandate(record.mandate, person, repositories, index, state, report)
        if record.organization is not None:
            changed |= self._apply_organization(record.organization, person, repositories, state, report)
        if record.declaration is not None:
            changed |= self._apply_declaration(record.declaration, person, repositories, report)
        if record.judicial is not None:
            changed |= self._apply_judicial(record.judicial, person, repositories, report)
        state.touched_persons.add(person.id)

        if report.outcome is RecordOutcome.MATCHED and changed:
            report.outcome = RecordOutcome.UPDATED
        return report

    def _create_person(
        self,
        record: SourceRecord,
        repositories: ReconciliationRepositories,
        index: CandidateIndex,
        report: RecordReport,
    ) -> Person:
        candidate = record.person
        slug = index.unique_slug(person_slug(candidate.first_name, candidate.last_name))
        person = Person(
            first_name=candidate.first_name,
            last_name=candidate.last_name,
            slug=slug,
            created_at=self._run_at,
        )
        repositories.persons.add(person)
        provisional = self._dry_run

        def register() -> None:
            index.add(
                person_id=person.id,
                first_name=person.first_name,
                last_name=person.last_name,
                slug=slug,
                birth_date=candidate.birth_date,
                provisional=provisional,
            )
            for anchor in candidate.anchors:
                index.bind_anchor(anchor.source, anchor.value, person.id)

        report.deferred.append(register)
        return person

    def _apply_person(
        self,
        record: SourceRecord,
        person: Person,
        repositories: ReconciliationRepositories,
        index: CandidateIndex,
        report: RecordReport,
    ) -> bool:
        changes = merge_fields(
            person,
            record.person.mergeable_fields(),
            source=record.source,
            categories=PERSON_FIELDS,
        )
        if any(change.field == "birth_date" for change in changes):
            birth_date = person.birth_date
            report.deferred.append(lambda: index.note_birth_date(person.id, birth_date))
        anchored = self._attach_anchors(record, person, repositories, index, report)
        return bool(changes) or anchored

    def _attach_anchors(
        self,
        record: SourceRecord,
        person: Person,
        repositories: ReconciliationRepositories,
        index: CandidateIndex,
        report: RecordReport,
    ) -> bool:
        attached = False
        for anchor in record.person.anchors:
            existing = repositories.external_ids.get(anchor.source, anchor.value)
            if existing is not None:
                if existing.owner_id != person.id:
                    # identity anchors are never moved automatically
                    report.errors.append(
                        f"{record.label}: {anchor.source}={anchor.value} already bound to "
                        f"{existing.owner_id}"
                    )
                    report.details["anchor_conflicts"] += 1
                continue
            repositories.external_ids.add(
                ExternalIdentifier(
                    source=anchor.source,
                    value=anchor.value,
                    owner_type=OwnerType.PERSON,
                    owner_id=person.id,
                    url=anchor.url,
                )
            )
            report.deferred.append(
                lambda source=anchor.source, value=anchor.value: index.bind_anchor(
                    source, value, person.id
                )
            )
            attached = True
        return attached and report.outcome is not RecordOutcome.CREATED

    def _apply_mandate(
        self,
        claim: MandateClaim,
        person: Person,
        repositories: ReconciliationRepositories,
        index: CandidateIndex,
        state: RunState,
        report: RecordReport,
    ) -> bool:
        if claim.locality_code and claim.locality_name:
            if repositories.localities.get(claim.locality_code) is None:
                repositories.localities.add(
                    Locality(
                        code=claim.locality_code,
                        name=claim.locality_name,
                        department_code=claim.department_code,
                    )
                )
                report.details["localities_created"] += 1

        lifecycle = MandateLifecycle(
            repositories.mandates, run_date=self._run_date, run_at=self._run_at
        )
        outcome = lifecycle.apply(person.id, claim, source=self._scope.source)
        state.touched_keys.add(outcome.mandate.natural_key)
        if outcome.change is not TenureChange.UNCHANGED:
            report.details[f"mandates_{outcome.change}"] += 1
        report.closed += len(outcome.superseded)
        if claim.department_code:
            department = claim.department_code
            report.deferred.append(lambda: index.note_department(person.id, department))
        return outcome.change is not TenureChange.UNCHANGED or bool(outcome.superseded)

    def _apply_organization(
        self,
        claim: OrganizationClaim,
        person: Person,
        repositories: ReconciliationRepositories,
        state: RunState,
        report: RecordReport,
    ) -> bool:
        organization_id = self._resolve_organization(claim, repositories, state, report)
        service = AffiliationService(
            repositories.affiliations, run_date=self._run_date, run_at=self._run_at
        )
        change = service.set_current(
            person, organization_id, source=claim.source, start_date=claim.start_date
        )
        if change is not TenureChange.UNCHANGED:
            report.details[f"affiliations_{change}"] += 1
        return change is not TenureChange.UNCHANGED

    def _resolve_organization(
        self,
        claim: OrganizationClaim,
        repositories: ReconciliationRepositories,
        state: RunState,
        report: RecordReport,
    ) -> UUID:
        cache_key = (claim.source, claim.code)
        cached = state.organizations.get(cache_key)
        if cached is not None:
            if self._dry_run and repositories.organizations.get(cached) is None:
                # rolled back earlier in this dry run; stand it in again
                repositories.organizations.add(
                    Organization(id=cached, name=claim.name, short_name=claim.short_name)
                )
            return cached

        organization: Organization | None = None
        anchor = repositories.external_ids.get(claim.source, claim.anchor_value)
        if anchor is not None:
            organization = repositories.organizations.get(anchor.owner_id)
        if organization is None:
            organization = repositories.organizations.find_by_short_name(claim.short_name)
        if organization is None:
            organization = Organization(name=claim.name, short_name=claim.short_name)
            repositories.organizations.add(organization)
            report.details["organizations_created"] += 1
        if anchor is None:
            repositories.external_ids.add(
                ExternalIdentifier(
                    source=claim.source,
                    value=claim.anchor_value,
                    owner_type=OwnerType.ORGANIZATION,
                    owner_id=organization.id,
                )
            )
        changes = merge_fields(
            organization,
            {"name": claim.name, "color": claim.color},
            source=claim.source,
            categories=ORGANIZATION_FIELDS,
        )
        if changes:
            report.details["organizations_updated"] += 1

        organization_id = organization.id
        report.deferred.append(lambda: state.organizations.__setitem__(cache_key, organization_id))
        return organization_id

    def _apply_declaration(
        self,
        claim: DeclarationClaim,
        person: Person,
        repositories: ReconciliationRepositories,
        report: RecordReport,
    ) -> bool:
        existing = repositories.declarations.get_by_key(claim.natural_key)
        if existing is None:
            repositories.declarations.add(
                Declaration(
                    person_id=person.id,
                    declaration_type=claim.declaration_type,
                    natural_key=claim.natural_key,
                    source=self._scope.source,
                    deposit_date=claim.deposit_date,
                    published_on=claim.published_on,
                    url=claim.url,
                )
            )
            report.details["declarations_created"] += 1
            return True
        changed = False
        for name in ("declaration_type", "deposit_date", "published_on", "url"):
            value = getattr(claim, name)
            if value is not None and getattr(existing, name) != value:
                setattr(existing, name, value)
                changed = True
        if changed:
            report.details["declarations_updated"] += 1
        return changed

    def _apply_judicial(
        self,
        claim: JudicialClaim,
        person: Person,
        repositories: ReconciliationRepositories,
        report: RecordReport,
    ) -> bool:
        existing = repositories.judicial_records.get_by_key(claim.natural_key)
        if existing is not None:
            if existing.person_id != person.id:
                report.errors.append(
                    f"judicial record {claim.natural_key} belongs to another person"
                )
            return False
        repositories.judicial_records.add(
            JudicialRecord(
                person_id=person.id,
                title=claim.title,
                category=claim.category,
                status=claim.status,
                natural_key=claim.natural_key,
                source=self._scope.source,
                verdict_date=claim.verdict_date,
                source_url=claim.source_url,
            )
        )
        report.details["judicial_records_created"] += 1
        return True


class BatchUpsertPipeline:
    def __init__(
        self,
        *,
        scope: SnapshotScope,
        unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
        clock: Clock = utcnow,
        dry_run: bool = False,
        progress_every: int = 1000,
        metadata_key: str | None = None,
    ) -> None:
        self._scope = scope
        self._uow_factory = unit_of_work_factory
        self._clock = clock
        self._dry_run = dry_run
        self._progress_every = max(progress_every, 1)
        self._metadata_key = metadata_key or scope.source.value

    def run(self, fetch: FeedFetcher, *, limit: int | None = None) -> SyncResult:
        run_at = self._clock()
        started = time.monotonic()
        result = SyncResult(source=self._scope.source.value, dry_run=self._dry_run, started_at=run_at)
        log.info("Sync %s started (dry_run=%s)", self._scope.source, self._dry_run)

        snapshot = self._snapshot()
        log.info(
            "Snapshot: %s open mandates, %s open affiliations",
            len(snapshot.mandates),
            len(snapshot.affiliations),
        )

        try:
            feed = fetch().truncated(limit)
        except FeedUnavailableError as exc:
            log.error("Feed %s unavailable: %s", self._scope.source, exc)  # noqa: TRY400
            return SyncResult.failed(self._scope.source.value, str(exc), dry_run=self._dry_run)
        index = self._build_index()
        result.errors.extend(feed.errors)
        log.info(
            "Staged %s records (%s parse errors), index holds %s persons",
            len(feed.records),
            len(feed.errors),
            len(index),
        )

        state = RunState()
        reconciler = RecordReconciler(scope=self._scope, run_at=run_at, dry_run=self._dry_run)
        for position, record in enumerate(feed.records, start=1):
            self._reconcile_record(record, reconciler, index, state, result)
            if position % self._progress_every == 0:
                log.info("Reconciled %s/%s records", position, len(feed.records))

        if self._scope.closes_stale:
            if not feed.complete:
                log.warning("Feed %s is partial; stale closure skipped", self._scope.source)
            elif not feed.records:
                log.warning("Feed %s is empty; stale closure skipped", self._scope.source)
            else:
                self._close_stale(snapshot, state, run_at, result)

        result.duration_s = time.monotonic() - started
        if not self._dry_run:
            SyncMetadataStore(self._uow_factory, clock=self._clock).mark_completed(
                self._metadata_key,
                item_count=len(feed.records),
                duration_s=result.duration_s,
            )
        log.info("Sync %s finished: %s", self._scope.source, result.counters())
        return result

    def _snapshot(self) -> Snapshot:
        snapshot = Snapshot()
        with self._uow_factory() as uow:
            repositories = uow.repositories
            if self._scope.mandate_types:
                for mandate in repositories.mandates.list_open(self._scope.mandate_types):
                    snapshot.mandates[mandate.id] = mandate.natural_key
            if self._scope.close_affiliations:
                for affiliation in repositories.affiliations.list_open_by_source(self._scope.source):
                    snapshot.affiliations[affiliation.id] = affiliation.person_id
        return snapshot

    def _build_index(self) -> CandidateIndex:
        with self._uow_factory() as uow:
            repositories = uow.repositories
            return CandidateIndex.build(
                repositories.persons.list_all(),
                repositories.external_ids.list_for_owner_type(OwnerType.PERSON),
                repositories.mandates.open_departments(),
            )

    def _reconcile_record(
        self,
        record: SourceRecord,
        reconciler: RecordReconciler,
        index: CandidateIndex,
        state: RunState,
        result: SyncResult,
    ) -> None:
        try:
            with self._uow_factory() as uow:
                report = reconciler.reconcile(record, uow.repositories, index, state)
                self._settle(uow)
        except DuplicateRecordError as exc:
            log.warning("%s skipped, uniqueness conflict: %s", record.label, exc)
            result.skipped += 1
            return
        except ValueError as exc:
            log.warning("%s failed: %s", record.label, exc)
            result.errors.append(f"{record.label}: {exc}")
            return

        for apply in report.deferred:
            apply()
        if report.resolution.low_confidence:
            result.low_confidence += 1
        result.errors.extend(report.errors)
        result.details.update(report.details)
        result.closed += report.closed
        match report.outcome:
            case RecordOutcome.CREATED:
                result.created += 1
            case RecordOutcome.UPDATED:
                result.matched += 1
                result.updated += 1
            case RecordOutcome.MATCHED:
                result.matched += 1
            case RecordOutcome.NOT_FOUND:
                result.not_found += 1

    def _close_stale(
        self,
        snapshot: Snapshot,
        state: RunState,
        run_at: datetime,
        result: SyncResult,
    ) -> None:
        run_date = run_at.date()
        stale_mandates = [
            mandate_id
            for mandate_id, key in snapshot.mandates.items()
            if key not in state.touched_keys
        ]
        for mandate_id in stale_mandates:
            with self._uow_factory() as uow:
                mandate = uow.repositories.mandates.get(mandate_id)
                lifecycle = MandateLifecycle(
                    uow.repositories.mandates, run_date=run_date, run_at=run_at
                )
                if mandate is None or not lifecycle.close(mandate):
                    continue
                log.debug("Closing stale %s mandate %s", mandate.mandate_type, mandate.natural_key)
                self._settle(uow)
            result.closed += 1

        stale_affiliations = [
            affiliation_id
            for affiliation_id, person_id in snapshot.affiliations.items()
            if person_id not in state.touched_persons
        ]
        for affiliation_id in stale_affiliations:
            with self._uow_factory() as uow:
                repositories = uow.repositories
                affiliation = repositories.affiliations.get(affiliation_id)
                if affiliation is None:
                    continue
                person = repositories.persons.get(affiliation.person_id)
                if person is None:
                    continue
                service = AffiliationService(
                    repositories.affiliations, run_date=run_date, run_at=run_at
                )
                if not service.close(affiliation, person):
                    continue
                self._settle(uow)
            result.details["affiliations_closed"] += 1
        log.info(
            "Stale closure: %s mandates, %s affiliations",
            len(stale_mandates),
            len(stale_affiliations),
        )

    def _settle(self, uow: ReconciliationUnitOfWork) -> None:
        if self._dry_run:
            uow.rollback()
        else:
            uow.commit()
