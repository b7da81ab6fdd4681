"""Ports for persisting domain aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from uuid import UUID

    from elusync.domain.model import (
        Affiliation,
        DataSource,
        Declaration,
        ExternalIdentifier,
        JudicialRecord,
        Locality,
        Mandate,
        MandateType,
        Organization,
        OwnerType,
        Person,
        Scrutin,
        SyncMetadata,
        Vote,
    )


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class PersonRepository(Repository["Person"], Protocol):
    def get(self, person_id: UUID) -> Person | None: ...

    def list_all(self) -> Sequence[Person]: ...


@runtime_checkable
class OrganizationRepository(Repository["Organization"], Protocol):
    def get(self, organization_id: UUID) -> Organization | None: ...

    def find_by_short_name(self, short_name: str) -> Organization | None: ...


@runtime_checkable
class ExternalIdentifierRepository(Repository["ExternalIdentifier"], Protocol):
    def get(self, source: DataSource, value: str) -> ExternalIdentifier | None: ...

    def list_for_owner_type(self, owner_type: OwnerType) -> Sequence[ExternalIdentifier]: ...

    def list_for_source(
        self, source: DataSource, owner_type: OwnerType
    ) -> Sequence[ExternalIdentifier]: ...


@runtime_checkable
class MandateRepository(Repository["Mandate"], Protocol):
    def get(self, mandate_id: UUID) -> Mandate | None: ...

    def find_for_person(
        self,
        person_id: UUID,
        mandate_type: MandateType,
        natural_key: str | None,
        institution: str,
    ) -> Mandate | None: ...

    def list_open_for_person(self, person_id: UUID) -> Sequence[Mandate]: ...

    def list_open(self, mandate_types: Collection[MandateType]) -> Sequence[Mandate]: ...

    def list_open_by_key(self, mandate_type: MandateType, natural_key: str) -> Sequence[Mandate]: ...

    def open_departments(self) -> Sequence[tuple[UUID, str]]: ...


@runtime_checkable
class AffiliationRepository(Repository["Affiliation"], Protocol):
    def get(self, affiliation_id: UUID) -> Affiliation | None: ...

    def list_open(self, person_id: UUID) -> Sequence[Affiliation]: ...

    def latest(self, person_id: UUID) -> Affiliation | None: ...

    def list_open_by_source(self, source: DataSource) -> Sequence[Affiliation]: ...


@runtime_checkable
class DeclarationRepository(Repository["Declaration"], Protocol):
    def get_by_key(self, natural_key: str) -> Declaration | None: ...


@runtime_checkable
class JudicialRecordRepository(Repository["JudicialRecord"], Protocol):
    def get_by_key(self, natural_key: str) -> JudicialRecord | None: ...

    def person_ids(self) -> set[UUID]: ...


@runtime_checkable
class LocalityRepository(Repository["Locality"], Protocol):
    def get(self, code: str) -> Locality | None: ...


@runtime_checkable
class ScrutinRepository(Repository["Scrutin"], Protocol):
    def get_by_external_id(self, external_id: str) -> Scrutin | None: ...


@runtime_checkable
class VoteRepository(Repository["Vote"], Protocol):
    def list_for_scrutin(self, scrutin_id: UUID) -> Sequence[Vote]: ...

    def delete_for_scrutin(self, scrutin_id: UUID) -> int: ...


@runtime_checkable
class SyncMetadataRepository(Repository["SyncMetadata"], Protocol):
    def get(self, key: str) -> SyncMetadata | None: ...

    def list_all(self) -> Sequence[SyncMetadata]: ...

    def delete(self, entity: SyncMetadata) -> None: ...
