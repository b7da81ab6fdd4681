"""Répertoire national des élus adapter (mayors)."""

from __future__ import annotations

from .fetcher import MayorsFetcher
from .schema import MayorRow
from .translator import insee_code, stage_mayors

__all__ = ["MayorRow", "MayorsFetcher", "insee_code", "stage_mayors"]
