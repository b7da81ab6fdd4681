"""Synchronisation defaults for the reconciliation pipelines."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .env import env_float

DEFAULT_MAYOR_START = date(2020, 5, 18)
DEFAULT_SENATOR_START_SERIES_1 = date(2023, 10, 1)
DEFAULT_SENATOR_START_SERIES_2 = date(2020, 10, 1)
DEFAULT_MEP_START = date(2024, 7, 16)
DEFAULT_SENATE_SESSION = 2024
DEFAULT_PROGRESS_EVERY = 1000
DEFAULT_MIN_SYNC_INTERVAL_HOURS = 0.0
ERROR_SAMPLE_SIZE = 10


@dataclass(frozen=True, slots=True)
class SyncConfig:
    mayor_default_start: date = DEFAULT_MAYOR_START
    senator_start_series_1: date = DEFAULT_SENATOR_START_SERIES_1
    senator_start_series_2: date = DEFAULT_SENATOR_START_SERIES_2
    mep_default_start: date = DEFAULT_MEP_START
    senate_session: int = DEFAULT_SENATE_SESSION
    progress_every: int = DEFAULT_PROGRESS_EVERY
    min_sync_interval_hours: float = DEFAULT_MIN_SYNC_INTERVAL_HOURS


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        senate_session=int(env_float("ELUSYNC_SENATE_SESSION", DEFAULT_SENATE_SESSION)),
        min_sync_interval_hours=env_float(
            "ELUSYNC_MIN_SYNC_INTERVAL_HOURS", DEFAULT_MIN_SYNC_INTERVAL_HOURS
        ),
    )
