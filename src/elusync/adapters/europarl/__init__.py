"""Parlement européen adapter (French MEPs)."""

from __future__ import annotations

from .fetcher import MepsFetcher
from .schema import MepPayload
from .translator import EUROPEAN_GROUPS, stage_meps

__all__ = ["EUROPEAN_GROUPS", "MepPayload", "MepsFetcher", "stage_meps"]
