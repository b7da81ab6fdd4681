"""Pydantic models for senat.fr payloads."""

from __future__ import annotations

from pydantic import Field, field_validator

from elusync.adapters.feeds import FeedModel, blank_to_none


class SenateGroup(FeedModel):
    code: str | None = None
    libelle: str | None = None

    _blank_to_none = field_validator("code", "libelle", mode="before")(blank_to_none)


class SenateConstituency(FeedModel):
    code: str | None = None
    libelle: str | None = None

    _blank_to_none = field_validator("code", "libelle", mode="before")(blank_to_none)


class SenatorPayload(FeedModel):
    matricule: str
    nom: str
    prenom: str
    civilite: str | None = None
    feminise: bool = False
    serie: int | None = None
    url: str | None = None
    url_avatar: str | None = Field(default=None, alias="urlAvatar")
    groupe: SenateGroup | None = None
    circonscription: SenateConstituency | None = None

    _blank_to_none = field_validator(
        "matricule", "nom", "prenom", "civilite", "url", "url_avatar", mode="before"
    )(blank_to_none)

    @field_validator("serie", mode="before")
    @classmethod
    def _lenient_series(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class SenateBallot(FeedModel):
    """One senator's position in a roll call's JSON breakdown."""

    matricule: str
    vote: str = ""
    siege: int | None = None

    @field_validator("matricule", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> object:
        return str(value).strip() if isinstance(value, int) else value


class SenateBallotsPayload(FeedModel):
    votes: list[SenateBallot] = Field(default_factory=list)
