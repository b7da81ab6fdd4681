"""Administrative repairs over already-stored data."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from elusync.domain.data_integration import SyncResult
from elusync.domain.model import utcnow

from .lifecycle import AffiliationService

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from elusync.domain.ports import ReconciliationUnitOfWork

log = getLogger(__name__)


def repair_current_organizations(
    unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
    *,
    clock: Callable[[], datetime] = utcnow,
    dry_run: bool = False,
) -> SyncResult:
    """Realign every ``Person.current_organization_id`` with their open affiliation.

    Each fixed person counts as ``updated``; consistent ones as ``matched``.
    """

    run_at = clock()
    result = SyncResult(source="repair_affiliations", dry_run=dry_run, started_at=run_at)
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        service = AffiliationService(
            repositories.affiliations, run_date=run_at.date(), run_at=run_at
        )
        for person in repositories.persons.list_all():
            before = person.current_organization_id
            if service.repair(person):
                result.updated += 1
                log.info(
                    "Repaired %s: organization %s -> %s",
                    person.slug,
                    before,
                    person.current_organization_id,
                )
            else:
                result.matched += 1
        if dry_run:
            uow.rollback()
        else:
            uow.commit()
    log.info("Affiliation repair: %s fixed, %s consistent", result.updated, result.matched)
    return result
