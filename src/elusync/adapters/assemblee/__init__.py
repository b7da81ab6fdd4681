"""Assemblée nationale deputies adapter."""

from __future__ import annotations

from .fetcher import DeputiesFetcher
from .schema import DeputyRow
from .translator import PARTY_MAPPINGS, deputy_title, stage_deputies, translate_deputy

__all__ = [
    "PARTY_MAPPINGS",
    "DeputiesFetcher",
    "DeputyRow",
    "deputy_title",
    "stage_deputies",
    "translate_deputy",
]
