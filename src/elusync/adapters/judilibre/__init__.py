"""Judilibre adapter (Cour de cassation criminal decisions)."""

from __future__ import annotations

from .client import ClientCredentialsAuth, JudilibreAuthError
from .fetcher import JudilibreFetcher
from .schema import Decision, DecisionSummary
from .translator import (
    SearchTarget,
    decision_title,
    is_conviction,
    is_relevant,
    refers_to,
    translate_decision,
)

__all__ = [
    "ClientCredentialsAuth",
    "Decision",
    "DecisionSummary",
    "JudilibreAuthError",
    "JudilibreFetcher",
    "SearchTarget",
    "decision_title",
    "is_conviction",
    "is_relevant",
    "refers_to",
    "translate_decision",
]
