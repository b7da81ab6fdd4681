"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, select

from elusync.adapters.sqlalchemy.mappings import (
    affiliation_table,
    declaration_table,
    external_identifier_table,
    judicial_record_table,
    mandate_table,
    organization_table,
    scrutin_table,
    vote_table,
)
from elusync.domain.model import (
    Affiliation,
    Declaration,
    ExternalIdentifier,
    JudicialRecord,
    Locality,
    Mandate,
    Organization,
    Person,
    Scrutin,
    SyncMetadata,
    Vote,
)

if TYPE_CHECKING:
    from collections.abc import Collection
    from uuid import UUID

    from sqlalchemy.orm import Session

    from elusync.domain.model import DataSource, MandateType, OwnerType


class SqlAlchemyRepository[TEntity]:
    """Shared ``add``/``get`` for repositories keyed by primary key."""

    def __init__(self, session: Session, entity_cls: type[TEntity]) -> None:
        self.session = session
        self._entity_cls = entity_cls

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def get(self, key: object) -> TEntity | None:
        return self.session.get(self._entity_cls, key)


class SqlAlchemyPersonRepository(SqlAlchemyRepository[Person]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Person)

    def list_all(self) -> list[Person]:
        return list(self.session.scalars(select(Person)))


class SqlAlchemyOrganizationRepository(SqlAlchemyRepository[Organization]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Organization)

    def find_by_short_name(self, short_name: str) -> Organization | None:
        stmt = (
            select(Organization)
            .where(organization_table.c.short_name == short_name)
            .order_by(organization_table.c.created_at, organization_table.c.id)
            .limit(1)
        )
        return self.session.scalars(stmt).first()


class SqlAlchemyExternalIdentifierRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ExternalIdentifier) -> None:
        self.session.add(entity)

    def get(self, source: DataSource, value: str) -> ExternalIdentifier | None:
        stmt = (
            select(ExternalIdentifier)
            .where(external_identifier_table.c.source == source)
            .where(external_identifier_table.c.value == value)
        )
        return self.session.scalars(stmt).one_or_none()

    def list_for_owner_type(self, owner_type: OwnerType) -> list[ExternalIdentifier]:
        stmt = select(ExternalIdentifier).where(external_identifier_table.c.owner_type == owner_type)
        return list(self.session.scalars(stmt))

    def list_for_source(self, source: DataSource, owner_type: OwnerType) -> list[ExternalIdentifier]:
        stmt = (
            select(ExternalIdentifier)
            .where(external_identifier_table.c.source == source)
            .where(external_identifier_table.c.owner_type == owner_type)
        )
        return list(self.session.scalars(stmt))


class SqlAlchemyMandateRepository(SqlAlchemyRepository[Mandate]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Mandate)

    def find_for_person(
        self,
        person_id: UUID,
        mandate_type: MandateType,
        natural_key: str | None,
        institution: str,
    ) -> Mandate | None:
        """Prefer the open row, then the most recently started one."""

        stmt = (
            select(Mandate)
            .where(mandate_table.c.person_id == person_id)
            .where(mandate_table.c.mandate_type == mandate_type)
            .where(mandate_table.c.institution == institution)
        )
        if natural_key is None:
            stmt = stmt.where(mandate_table.c.external_id.is_(None))
        else:
            stmt = stmt.where(mandate_table.c.external_id == natural_key)
        stmt = stmt.order_by(
            mandate_table.c.is_current.desc(),
            mandate_table.c.start_date.desc(),
        ).limit(1)
        return self.session.scalars(stmt).first()

    def list_open_for_person(self, person_id: UUID) -> list[Mandate]:
        stmt = (
            select(Mandate)
            .where(mandate_table.c.person_id == person_id)
            .where(mandate_table.c.is_current.is_(True))
        )
        return list(self.session.scalars(stmt))

    def list_open(self, mandate_types: Collection[MandateType]) -> list[Mandate]:
        if not mandate_types:
            return []
        stmt = (
            select(Mandate)
            .where(mandate_table.c.mandate_type.in_(list(mandate_types)))
            .where(mandate_table.c.is_current.is_(True))
        )
        return list(self.session.scalars(stmt))

    def list_open_by_key(self, mandate_type: MandateType, natural_key: str) -> list[Mandate]:
        stmt = (
            select(Mandate)
            .where(mandate_table.c.mandate_type == mandate_type)
            .where(mandate_table.c.external_id == natural_key)
            .where(mandate_table.c.is_current.is_(True))
        )
        return list(self.session.scalars(stmt))

    def open_departments(self) -> list[tuple[UUID, str]]:
        stmt = (
            select(mandate_table.c.person_id, mandate_table.c.department_code)
            .where(mandate_table.c.is_current.is_(True))
            .where(mandate_table.c.department_code.is_not(None))
            .distinct()
        )
        return [(row.person_id, row.department_code) for row in self.session.execute(stmt)]


class SqlAlchemyAffiliationRepository(SqlAlchemyRepository[Affiliation]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Affiliation)

    def list_open(self, person_id: UUID) -> list[Affiliation]:
        stmt = (
            select(Affiliation)
            .where(affiliation_table.c.person_id == person_id)
            .where(affiliation_table.c.is_current.is_(True))
        )
        return list(self.session.scalars(stmt))

    def latest(self, person_id: UUID) -> Affiliation | None:
        stmt = (
            select(Affiliation)
            .where(affiliation_table.c.person_id == person_id)
            .order_by(
                affiliation_table.c.start_date.desc(),
                affiliation_table.c.closed_at.desc(),
            )
            .limit(1)
        )
        return self.session.scalars(stmt).first()

    def list_open_by_source(self, source: DataSource) -> list[Affiliation]:
        stmt = (
            select(Affiliation)
            .where(affiliation_table.c.source == source)
            .where(affiliation_table.c.is_current.is_(True))
        )
        return list(self.session.scalars(stmt))


class SqlAlchemyDeclarationRepository(SqlAlchemyRepository[Declaration]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Declaration)

    def get_by_key(self, natural_key: str) -> Declaration | None:
        stmt = select(Declaration).where(declaration_table.c.natural_key == natural_key)
        return self.session.scalars(stmt).one_or_none()


class SqlAlchemyJudicialRecordRepository(SqlAlchemyRepository[JudicialRecord]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, JudicialRecord)

    def get_by_key(self, natural_key: str) -> JudicialRecord | None:
        stmt = select(JudicialRecord).where(judicial_record_table.c.natural_key == natural_key)
        return self.session.scalars(stmt).one_or_none()

    def person_ids(self) -> set[UUID]:
        """People with at least one judicial record."""
        stmt = select(judicial_record_table.c.person_id).distinct()
        return set(self.session.scalars(stmt))


class SqlAlchemyLocalityRepository(SqlAlchemyRepository[Locality]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Locality)


class SqlAlchemyScrutinRepository(SqlAlchemyRepository[Scrutin]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Scrutin)

    def get_by_external_id(self, external_id: str) -> Scrutin | None:
        stmt = select(Scrutin).where(scrutin_table.c.external_id == external_id)
        return self.session.scalars(stmt).one_or_none()


class SqlAlchemyVoteRepository(SqlAlchemyRepository[Vote]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Vote)

    def list_for_scrutin(self, scrutin_id: UUID) -> list[Vote]:
        stmt = select(Vote).where(vote_table.c.scrutin_id == scrutin_id)
        return list(self.session.scalars(stmt))

    def delete_for_scrutin(self, scrutin_id: UUID) -> int:
        stmt = delete(Vote).where(vote_table.c.scrutin_id == scrutin_id)
        result = self.session.execute(stmt)
        return result.rowcount or 0


class SqlAlchemySyncMetadataRepository(SqlAlchemyRepository[SyncMetadata]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, SyncMetadata)

    def list_all(self) -> list[SyncMetadata]:
        return list(self.session.scalars(select(SyncMetadata)))

    def delete(self, entity: SyncMetadata) -> None:
        self.session.delete(entity)
