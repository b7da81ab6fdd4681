"""Gouvernement adapter (current ministers)."""

from __future__ import annotations

from .fetcher import GovernmentFetcher
from .schema import GovernmentMemberRow
from .translator import FUNCTION_CODES, mandate_type_for, stage_government, translate_member

__all__ = [
    "FUNCTION_CODES",
    "GovernmentFetcher",
    "GovernmentMemberRow",
    "mandate_type_for",
    "stage_government",
    "translate_member",
]
