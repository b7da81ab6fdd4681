"""Open/refresh/close/reopen transitions for mandates and affiliations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from elusync.domain.model import Affiliation, Mandate

if TYPE_CHECKING:
    from datetime import date, datetime
    from uuid import UUID

    from elusync.domain.candidates import MandateClaim
    from elusync.domain.model import DataSource, Person, Tenure
    from elusync.domain.ports import AffiliationRepository, MandateRepository

log = getLogger(__name__)

_REFRESHABLE = ("title", "constituency", "department_code", "locality_code", "url")


class TenureChange(StrEnum):
    CREATED = "created"
    REFRESHED = "refreshed"
    REOPENED = "reopened"
    UNCHANGED = "unchanged"


@dataclass(slots=True, kw_only=True)
class MandateOutcome:
    mandate: Mandate
    change: TenureChange
    superseded: list[Mandate] = field(default_factory=list)


def _end_for(tenure: Tenure, successor_start: date | None, fallback: date) -> date:
    """End date for a tenure being replaced by one starting at ``successor_start``."""

    if successor_start is None:
        return fallback
    if tenure.start_date is not None and successor_start < tenure.start_date:
        return fallback
    return successor_start


class MandateLifecycle:
    """Applies one feed sighting of an office to the store.

    A mandate is identified by its natural key (falling back to
    ``(type, institution)`` when the feed provides none). A closed mandate whose
    key reappears is reopened rather than duplicated. Opening a mandate closes
    any other open one the person holds for the same ``(type, institution)``,
    and any open one another person holds for the same seat key.
    """

    def __init__(self, mandates: MandateRepository, *, run_date: date, run_at: datetime) -> None:
        self._mandates = mandates
        self._run_date = run_date
        self._run_at = run_at

    def apply(self, person_id: UUID, claim: MandateClaim, *, source: DataSource) -> MandateOutcome:
        existing = self._mandates.find_for_person(
            person_id, claim.mandate_type, claim.natural_key, claim.institution
        )
        if existing is None:
            mandate = Mandate(
                person_id=person_id,
                source=source,
                mandate_type=claim.mandate_type,
                institution=claim.institution,
                title=claim.title,
                constituency=claim.constituency,
                department_code=claim.department_code,
                locality_code=claim.locality_code,
                external_id=claim.natural_key,
                url=claim.url,
                start_date=claim.start_date or claim.default_start_date or self._run_date,
            )
            self._mandates.add(mandate)
            change = TenureChange.CREATED
        else:
            mandate = existing
            reopened = False
            if not mandate.is_current:
                mandate.reopen()
                reopened = True
                log.info("Reopened %s mandate %s", mandate.mandate_type, mandate.natural_key)
            refreshed = self._refresh(mandate, claim)
            if reopened:
                change = TenureChange.REOPENED
            elif refreshed:
                change = TenureChange.REFRESHED
            else:
                change = TenureChange.UNCHANGED

        outcome = MandateOutcome(mandate=mandate, change=change)
        outcome.superseded.extend(self._close_superseded(mandate, claim))
        return outcome

    def close(self, mandate: Mandate, *, end_date: date | None = None) -> bool:
        if not mandate.is_current:
            return False
        mandate.close(end_date=end_date or self._run_date, closed_at=self._run_at)
        return True

    def _refresh(self, mandate: Mandate, claim: MandateClaim) -> bool:
        changed = False
        for name in _REFRESHABLE:
            value = getattr(claim, name)
            if value is not None and getattr(mandate, name) != value:
                setattr(mandate, name, value)
                changed = True
        if claim.start_date is not None and mandate.start_date != claim.start_date:
            mandate.start_date = claim.start_date
            changed = True
        return changed

    def _close_superseded(self, mandate: Mandate, claim: MandateClaim) -> list[Mandate]:
        closed: list[Mandate] = []
        for other in self._mandates.list_open_for_person(mandate.person_id):
            if other.id == mandate.id or not other.is_current:
                continue
            if (other.mandate_type, other.institution) != (claim.mandate_type, claim.institution):
                continue
            self.close(other, end_date=_end_for(other, claim.start_date, self._run_date))
            closed.append(other)
        if claim.natural_key:
            for other in self._mandates.list_open_by_key(claim.mandate_type, claim.natural_key):
                if other.person_id == mandate.person_id or not other.is_current:
                    continue
                self.close(other, end_date=_end_for(other, claim.start_date, self._run_date))
                closed.append(other)
        for other in closed:
            log.info("Closed superseded %s mandate %s", other.mandate_type, other.natural_key)
        return closed


class AffiliationService:
    """Single write path for affiliations and ``Person.current_organization_id``.

    After any call, the person's pointer equals the organization of their open
    affiliation, or None when none is open.
    """

    def __init__(
        self, affiliations: AffiliationRepository, *, run_date: date, run_at: datetime
    ) -> None:
        self._affiliations = affiliations
        self._run_date = run_date
        self._run_at = run_at

    def set_current(
        self,
        person: Person,
        organization_id: UUID,
        *,
        source: DataSource,
        start_date: date | None = None,
    ) -> TenureChange:
        start = start_date or self._run_date
        open_affiliations = [a for a in self._affiliations.list_open(person.id) if a.is_current]
        latest = self._affiliations.latest(person.id)
        kept = next((a for a in open_affiliations if a.organization_id == organization_id), None)

        change = TenureChange.UNCHANGED
        for affiliation in open_affiliations:
            if affiliation is kept:
                continue
            affiliation.close(
                end_date=_end_for(affiliation, start, self._run_date), closed_at=self._run_at
            )
            change = TenureChange.REFRESHED

        if kept is None:
            if (
                not open_affiliations
                and latest is not None
                and not latest.is_current
                and latest.organization_id == organization_id
            ):
                latest.reopen()
                change = TenureChange.REOPENED
            else:
                self._affiliations.add(
                    Affiliation(
                        person_id=person.id,
                        organization_id=organization_id,
                        source=source,
                        start_date=start,
                    )
                )
                change = TenureChange.CREATED

        if person._assign_current_organization(organization_id) and change is TenureChange.UNCHANGED:  # noqa: SLF001
            change = TenureChange.REFRESHED
        return change

    def clear(self, person: Person, *, end_date: date | None = None) -> bool:
        changed = False
        for affiliation in self._affiliations.list_open(person.id):
            if affiliation.is_current:
                affiliation.close(end_date=end_date or self._run_date, closed_at=self._run_at)
                changed = True
        return person._assign_current_organization(None) or changed  # noqa: SLF001

    def close(self, affiliation: Affiliation, person: Person) -> bool:
        if not affiliation.is_current:
            return False
        affiliation.close(end_date=self._run_date, closed_at=self._run_at)
        self.repair(person)
        return True

    def repair(self, person: Person) -> bool:
        """Recompute the pointer from open affiliations; keep only the newest open."""

        open_affiliations = [a for a in self._affiliations.list_open(person.id) if a.is_current]
        open_affiliations.sort(key=lambda a: (a.start_date is not None, a.start_date), reverse=True)
        changed = False
        for stale in open_affiliations[1:]:
            stale.close(end_date=self._run_date, closed_at=self._run_at)
            changed = True
        target = open_affiliations[0].organization_id if open_affiliations else None
        return person._assign_current_organization(target) or changed  # noqa: SLF001
