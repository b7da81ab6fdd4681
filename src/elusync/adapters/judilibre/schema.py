"""Pydantic models for the Judilibre search API and the PISTE token endpoint."""

from __future__ import annotations

from pydantic import Field

from elusync.adapters.feeds import FeedModel


class TokenResponse(FeedModel):
    access_token: str = Field(min_length=1)
    expires_in: float = 3600.0


class DecisionSummary(FeedModel):
    id: str = Field(min_length=1)
    ecli: str | None = None
    number: str | None = None
    numbers: list[str] = Field(default_factory=list)
    decision_date: str | None = None
    chamber: str | None = None
    solution: str = ""
    themes: list[str] = Field(default_factory=list)
    summary: str | None = None


class Decision(DecisionSummary):
    text: str = ""


class SearchPage(FeedModel):
    results: list[dict[str, object]] = Field(default_factory=list)
    total: int = 0
