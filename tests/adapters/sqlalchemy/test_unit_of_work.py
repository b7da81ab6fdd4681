from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from elusync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from elusync.domain.model import DataSource, ExternalIdentifier, OwnerType
from elusync.domain.ports import DuplicateRecordError
from tests.helpers.records import stored_person

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyReconciliationUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_leaving_without_commit_discards(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    person = stored_person("Jean", "Dupont")

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        uow.repositories.persons.add(person)

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        assert uow.repositories.persons.get(person.id) is None


def test_commit_persists(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    person = stored_person("Jean", "Dupont")

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        uow.repositories.persons.add(person)
        uow.commit()

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        stored = uow.repositories.persons.get(person.id)
        assert stored is not None
        assert stored.slug == "jean-dupont"


def test_duplicate_anchor_surfaces_as_duplicate_record(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    first = stored_person("Jean", "Dupont")
    second = stored_person("Jean", "Dupond")

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        uow.repositories.persons.add(first)
        uow.repositories.persons.add(second)
        for owner in (first, second):
            uow.repositories.external_ids.add(
                ExternalIdentifier(
                    source=DataSource.ASSEMBLEE_NATIONALE,
                    value="PA1",
                    owner_type=OwnerType.PERSON,
                    owner_id=owner.id,
                )
            )
        with pytest.raises(DuplicateRecordError):
            uow.commit()


def test_session_is_unavailable_outside_block(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyReconciliationUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.session
