"""Sénat adapter: senators and roll-call votes."""

from __future__ import annotations

from .fetcher import SenateRollCalls, SenatorsFetcher
from .schema import SenatorPayload
from .translator import (
    SENATE_GROUP_MAPPINGS,
    parse_ballots,
    parse_scrutin_numbers,
    parse_scrutin_page,
    stage_senators,
    vote_position,
)

__all__ = [
    "SENATE_GROUP_MAPPINGS",
    "SenateRollCalls",
    "SenatorPayload",
    "SenatorsFetcher",
    "parse_ballots",
    "parse_scrutin_numbers",
    "parse_scrutin_page",
    "stage_senators",
    "vote_position",
]
