from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from elusync.domain.model import (
    Affiliation,
    DataSource,
    ExternalIdentifier,
    Mandate,
    MandateType,
    Organization,
    OwnerType,
)
from tests.helpers.records import stored_person

if TYPE_CHECKING:
    from collections.abc import Callable

    from elusync.adapters.sqlalchemy.unit_of_work import SqlAlchemyReconciliationUnitOfWork

CLOSED_AT = datetime(2024, 6, 9, tzinfo=UTC)


def _mandate(person_id: object, **overrides: object) -> Mandate:
    values: dict[str, object] = {
        "person_id": person_id,
        "source": DataSource.ASSEMBLEE_NATIONALE,
        "mandate_type": MandateType.DEPUTE,
        "institution": "Assemblée nationale",
        "title": "Député",
        "external_id": "PA1-leg17",
        "department_code": "75",
        "start_date": date(2024, 7, 18),
    }
    values.update(overrides)
    return Mandate(**values)  # type: ignore[arg-type]


def test_find_for_person_prefers_open_row(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    person = stored_person("Jean", "Dupont")
    closed = _mandate(person.id, start_date=date(2022, 6, 22))
    closed.close(end_date=date(2024, 6, 9), closed_at=CLOSED_AT)
    current = _mandate(person.id)
    with sqlite_unit_of_work() as uow:
        repositories = uow.repositories
        repositories.persons.add(person)
        repositories.mandates.add(closed)
        repositories.mandates.add(current)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        mandates = uow.repositories.mandates
        found = mandates.find_for_person(
            person.id, MandateType.DEPUTE, "PA1-leg17", "Assemblée nationale"
        )
        assert found is not None
        assert found.id == current.id
        assert mandates.find_for_person(
            person.id, MandateType.DEPUTE, None, "Assemblée nationale"
        ) is None
        assert [m.id for m in mandates.list_open_for_person(person.id)] == [current.id]
        assert [m.id for m in mandates.list_open_by_key(MandateType.DEPUTE, "PA1-leg17")] == [
            current.id
        ]
        assert mandates.list_open([]) == []
        assert mandates.open_departments() == [(person.id, "75")]


def test_anchor_lookup_by_source(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    person = stored_person("Anne", "Martin")
    with sqlite_unit_of_work() as uow:
        repositories = uow.repositories
        repositories.persons.add(person)
        for source, value in ((DataSource.SENAT, "21001"), (DataSource.WIKIDATA, "Q1")):
            repositories.external_ids.add(
                ExternalIdentifier(
                    source=source, value=value, owner_type=OwnerType.PERSON, owner_id=person.id
                )
            )
        uow.commit()

    with sqlite_unit_of_work() as uow:
        external_ids = uow.repositories.external_ids
        anchor = external_ids.get(DataSource.SENAT, "21001")
        assert anchor is not None
        assert anchor.owner_id == person.id
        assert external_ids.get(DataSource.SENAT, "99999") is None
        assert [a.value for a in external_ids.list_for_source(DataSource.WIKIDATA, OwnerType.PERSON)] == [
            "Q1"
        ]
        assert len(external_ids.list_for_owner_type(OwnerType.PERSON)) == 2


def test_organization_and_affiliation_queries(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> None:
    person = stored_person("Paul", "Bernard")
    group = Organization(name="Les Républicains", short_name="LR")
    older = Affiliation(
        person_id=person.id,
        organization_id=group.id,
        source=DataSource.SENAT,
        start_date=date(2017, 10, 1),
    )
    older.close(end_date=date(2020, 9, 30), closed_at=CLOSED_AT)
    newer = Affiliation(
        person_id=person.id,
        organization_id=group.id,
        source=DataSource.SENAT,
        start_date=date(2020, 10, 1),
    )
    with sqlite_unit_of_work() as uow:
        repositories = uow.repositories
        repositories.persons.add(person)
        repositories.organizations.add(group)
        repositories.affiliations.add(older)
        repositories.affiliations.add(newer)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        repositories = uow.repositories
        found = repositories.organizations.find_by_short_name("LR")
        assert found is not None
        assert found.id == group.id
        assert repositories.organizations.find_by_short_name("PS") is None
        latest = repositories.affiliations.latest(person.id)
        assert latest is not None
        assert latest.id == newer.id
        assert [a.id for a in repositories.affiliations.list_open(person.id)] == [newer.id]
        assert [a.id for a in repositories.affiliations.list_open_by_source(DataSource.SENAT)] == [
            newer.id
        ]
