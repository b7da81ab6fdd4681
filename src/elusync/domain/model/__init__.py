"""Domain model package."""

from __future__ import annotations

from elusync.domain.model._time import utcnow
from elusync.domain.model.enums import (
    GOVERNMENT_MANDATE_TYPES,
    DataSource,
    DeclarationType,
    JudicialCategory,
    JudicialStatus,
    MandateType,
    OwnerType,
    VotePosition,
)
from elusync.domain.model.people import (
    ExternalIdentifier,
    FieldSourcesMixin,
    Organization,
    Person,
)
from elusync.domain.model.records import Declaration, JudicialRecord, Locality
from elusync.domain.model.sync_state import SyncMetadata
from elusync.domain.model.tenure import Affiliation, Mandate, Tenure, TenureStateError
from elusync.domain.model.votes import Scrutin, Vote

__all__ = [
    "GOVERNMENT_MANDATE_TYPES",
    "Affiliation",
    "DataSource",
    "Declaration",
    "DeclarationType",
    "ExternalIdentifier",
    "FieldSourcesMixin",
    "JudicialCategory",
    "JudicialRecord",
    "JudicialStatus",
    "Locality",
    "Mandate",
    "MandateType",
    "Organization",
    "OwnerType",
    "Person",
    "Scrutin",
    "SyncMetadata",
    "Tenure",
    "TenureStateError",
    "Vote",
    "VotePosition",
    "utcnow",
]
