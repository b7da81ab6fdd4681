from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(eq=False, kw_only=True)
class SyncMetadata:
    """Per source-partition bookkeeping: last run, cursor and item count."""

    key: str
    last_sync_at: datetime | None = None
    cursor: str | None = None
    item_count: int = 0
    last_duration_s: float | None = None
