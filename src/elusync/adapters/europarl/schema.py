"""Pydantic models for the European Parliament open data API."""

from __future__ import annotations

from datetime import date  # noqa: TC003

from pydantic import Field, field_validator

from elusync.adapters.feeds import FeedModel, blank_to_none, parse_iso_date


class MepPayload(FeedModel):
    identifier: str
    given_name: str = Field(alias="givenName")
    family_name: str = Field(alias="familyName")
    bday: date | None = None
    country: str | None = Field(default=None, alias="api:country-of-representation")
    political_group: str | None = Field(default=None, alias="api:political-group")

    _blank_to_none = field_validator(
        "identifier", "given_name", "family_name", "country", "political_group", mode="before"
    )(blank_to_none)

    @field_validator("identifier", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> object:
        return str(value) if isinstance(value, int) else value

    @field_validator("bday", mode="before")
    @classmethod
    def _parse_date(cls, value: object) -> date | None:
        return parse_iso_date(value) if isinstance(value, str) else None


class MepListPayload(FeedModel):
    data: list[dict[str, object]] = Field(default_factory=list)
