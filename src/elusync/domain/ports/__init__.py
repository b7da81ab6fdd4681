"""Domain port definitions for adapters."""

from __future__ import annotations

from .errors import DuplicateRecordError, FeedUnavailableError
from .fetching import FeedFetcher, RollCallSource
from .persistence import (
    AffiliationRepository,
    DeclarationRepository,
    ExternalIdentifierRepository,
    JudicialRecordRepository,
    LocalityRepository,
    MandateRepository,
    OrganizationRepository,
    PersonRepository,
    Repository,
    ScrutinRepository,
    SyncMetadataRepository,
    VoteRepository,
)
from .unit_of_work import (
    ReconciliationRepositories,
    ReconciliationUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AffiliationRepository",
    "DeclarationRepository",
    "DuplicateRecordError",
    "ExternalIdentifierRepository",
    "FeedFetcher",
    "FeedUnavailableError",
    "JudicialRecordRepository",
    "LocalityRepository",
    "MandateRepository",
    "OrganizationRepository",
    "PersonRepository",
    "ReconciliationRepositories",
    "ReconciliationUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "RollCallSource",
    "ScrutinRepository",
    "SyncMetadataRepository",
    "UnitOfWork",
    "VoteRepository",
]
