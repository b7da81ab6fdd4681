from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest

from elusync import app
from elusync.domain.candidates import JudicialClaim, ScrutinRecord, SourceRecord
from elusync.domain.model import (
    DataSource,
    JudicialCategory,
    JudicialRecord,
    JudicialStatus,
    VotePosition,
)
from tests.helpers.feeds import BrokenFeed, FakeRollCalls, StaticFeed
from tests.helpers.records import deputy_record, make_candidate, stored_person

if TYPE_CHECKING:
    from collections.abc import Callable

    from elusync.adapters.sqlalchemy.unit_of_work import SqlAlchemyReconciliationUnitOfWork


def _deputies() -> StaticFeed:
    return StaticFeed(
        DataSource.ASSEMBLEE_NATIONALE,
        [
            deputy_record(1, "Marie", "Dupont", an_id="PA1"),
            deputy_record(2, "Jean", "Martin", an_id="PA2"),
        ],
    )


def test_sync_deputies_reports_counts(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    result = app.sync_deputies(source=_deputies(), unit_of_work_factory=sqlite_unit_of_work)

    assert result.success
    assert result.as_summary()["created"] == 2
    assert [entry.key for entry in app.sync_status(unit_of_work_factory=sqlite_unit_of_work)] == [
        "assemblee_nationale"
    ]


def test_min_interval_skips_recent_source(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    feed = _deputies()
    app.sync_deputies(source=feed, unit_of_work_factory=sqlite_unit_of_work)

    skipped = app.sync_deputies(
        source=feed, unit_of_work_factory=sqlite_unit_of_work, min_interval_hours=6
    )

    assert skipped.success
    assert skipped.details["skipped_recent"] == 1
    assert feed.calls == 1


def test_unavailable_feed_is_a_failed_summary(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    result = app.sync_senators(source=BrokenFeed(), unit_of_work_factory=sqlite_unit_of_work)

    assert not result.success
    assert result.fatal
    assert result.as_summary()["errors"] == ["HTTP 503 for https://example.invalid/feed.csv"]


def test_bad_configuration_is_a_failed_summary(
    monkeypatch: pytest.MonkeyPatch,
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    monkeypatch.setenv("ELUSYNC_MAYORS_MIN_INTERVAL", "often")

    result = app.sync_mayors(unit_of_work_factory=sqlite_unit_of_work)

    assert not result.success
    assert result.errors[0].startswith("ConfigurationError: ELUSYNC_MAYORS_MIN_INTERVAL")


def test_dry_run_leaves_no_metadata(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    result = app.sync_deputies(
        source=_deputies(), unit_of_work_factory=sqlite_unit_of_work, dry_run=True
    )

    assert result.dry_run
    assert result.created == 2
    assert app.sync_status(unit_of_work_factory=sqlite_unit_of_work) == []


def test_senate_votes_and_reset(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    source = FakeRollCalls()
    source.add(
        ScrutinRecord(
            session=2023,
            number=1,
            title="Proposition de loi",
            voting_date=date(2023, 10, 12),
            votes_for=1,
            votes_against=0,
            votes_abstain=0,
            adopted=True,
            source_url="https://www.senat.fr/scrutin-public/2023/scr2023-1.html",
            positions=(("21001", VotePosition.POUR),),
        )
    )

    result = app.sync_senate_votes(
        session=2023, source=source, unit_of_work_factory=sqlite_unit_of_work
    )
    skipped = app.sync_senate_votes(
        session=2023,
        source=source,
        unit_of_work_factory=sqlite_unit_of_work,
        min_interval_hours=1,
    )

    assert result.created == 1
    assert result.senators_not_found == {"21001"}
    assert skipped.details["skipped_recent"] == 1
    assert app.reset_sync("votes-senat:2023", unit_of_work_factory=sqlite_unit_of_work)
    assert not app.reset_sync("votes-senat:2023", unit_of_work_factory=sqlite_unit_of_work)


def test_repair_through_app(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    app.sync_deputies(source=_deputies(), unit_of_work_factory=sqlite_unit_of_work)

    result = app.repair_current_organizations(unit_of_work_factory=sqlite_unit_of_work)

    assert result.success
    assert result.updated == 0
    assert result.matched == 2


def _conviction(row: int, first_name: str, last_name: str, ecli: str) -> SourceRecord:
    return SourceRecord(
        source=DataSource.JUDILIBRE,
        row=row,
        person=make_candidate(first_name, last_name),
        judicial=JudicialClaim(
            title="[À VÉRIFIER] Corruption",
            category=JudicialCategory.CORRUPTION,
            status=JudicialStatus.CONDAMNATION_DEFINITIVE,
            natural_key=ecli,
        ),
    )


def test_judilibre_attaches_decisions_to_known_people_only(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.persons.add(stored_person("Jean", "Dupont"))
        uow.commit()
    feed = StaticFeed(
        DataSource.JUDILIBRE,
        [
            _conviction(1, "Jean", "Dupont", "ECLI:FR:CCASS:2021:CR00001"),
            _conviction(2, "Inconnu", "Personne", "ECLI:FR:CCASS:2021:CR00002"),
        ],
    )

    result = app.sync_judilibre(source=feed, unit_of_work_factory=sqlite_unit_of_work)
    rerun = app.sync_judilibre(source=feed, unit_of_work_factory=sqlite_unit_of_work)

    assert result.success
    assert result.not_found == 1
    assert result.created == 0
    assert result.details["judicial_records_created"] == 1
    assert rerun.details["judicial_records_created"] == 0
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.judicial_records.get_by_key("ECLI:FR:CCASS:2021:CR00001")
        assert stored is not None
        assert stored.source is DataSource.JUDILIBRE
        assert uow.repositories.judicial_records.get_by_key("ECLI:FR:CCASS:2021:CR00002") is None


def test_judilibre_searches_people_with_records_first(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    convicted = stored_person("Zoé", "Zimmer", birth_date=date(1960, 5, 1))
    with sqlite_unit_of_work() as uow:
        uow.repositories.persons.add(stored_person("Claire", "Durand"))
        uow.repositories.persons.add(stored_person("Alain", "Bernard"))
        uow.repositories.persons.add(convicted)
        uow.repositories.judicial_records.add(
            JudicialRecord(
                person_id=convicted.id,
                title="Fraude fiscale",
                category=JudicialCategory.FRAUDE_FISCALE,
                status=JudicialStatus.CONDAMNATION_DEFINITIVE,
                natural_key="zimmer-fraude",
                source=DataSource.WIKIDATA,
            )
        )
        uow.commit()

    everyone = app.judilibre_targets(sqlite_unit_of_work)
    first_two = app.judilibre_targets(sqlite_unit_of_work, limit=2)
    one = app.judilibre_targets(sqlite_unit_of_work, person_slug="claire-durand")

    assert [target.full_name for target in everyone] == [
        "Zoé Zimmer",
        "Alain Bernard",
        "Claire Durand",
    ]
    assert everyone[0].birth_date == date(1960, 5, 1)
    assert [target.full_name for target in first_two] == ["Zoé Zimmer", "Alain Bernard"]
    assert [target.full_name for target in one] == ["Claire Durand"]


def test_judilibre_without_credentials_is_a_failed_summary(
    monkeypatch: pytest.MonkeyPatch,
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    monkeypatch.delenv("ELUSYNC_JUDILIBRE_CLIENT_ID", raising=False)
    monkeypatch.delenv("ELUSYNC_JUDILIBRE_CLIENT_SECRET", raising=False)

    result = app.sync_judilibre(unit_of_work_factory=sqlite_unit_of_work)

    assert not result.success
    assert result.errors[0].startswith("MissingConfigurationError: Missing configuration for")
