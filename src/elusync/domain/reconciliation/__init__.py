"""Reconciliation of external feeds onto the stored people, mandates and votes."""

from __future__ import annotations

from .contracts import IdentityResolution, MatchKind, ResolutionStatus
from .identity import CandidateIndex, resolve_person
from .incremental import SyncMetadataStore, advance_cursor, cursor_key, vote_positions_hash
from .lifecycle import AffiliationService, MandateLifecycle, TenureChange
from .maintenance import repair_current_organizations
from .pipeline import BatchUpsertPipeline, ReconciliationError, RecordReconciler, SnapshotScope
from .roll_calls import RollCallSync

__all__ = [
    "AffiliationService",
    "BatchUpsertPipeline",
    "CandidateIndex",
    "IdentityResolution",
    "MandateLifecycle",
    "MatchKind",
    "ReconciliationError",
    "RecordReconciler",
    "ResolutionStatus",
    "RollCallSync",
    "SnapshotScope",
    "SyncMetadataStore",
    "TenureChange",
    "advance_cursor",
    "cursor_key",
    "repair_current_organizations",
    "resolve_person",
    "vote_positions_hash",
]
