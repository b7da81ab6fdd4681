"""Pydantic models for the data.gouv deputies CSV."""

from __future__ import annotations

from datetime import date  # noqa: TC003

from pydantic import Field, field_validator

from elusync.adapters.feeds import FeedModel, blank_to_none, parse_iso_date

REQUIRED_COLUMNS = ("id", "legislature", "nom", "prenom", "groupeAbrev", "circo")


class DeputyRow(FeedModel):
    id: str
    legislature: str
    nom: str
    prenom: str
    civ: str | None = None
    ville_naissance: str | None = Field(default=None, alias="villeNaissance")
    naissance: date | None = None
    groupe: str | None = None
    groupe_abrev: str | None = Field(default=None, alias="groupeAbrev")
    departement_nom: str | None = Field(default=None, alias="departementNom")
    departement_code: str | None = Field(default=None, alias="departementCode")
    circo: int | None = None
    date_prise_fonction: date | None = Field(default=None, alias="datePriseFonction")

    _blank_to_none = field_validator(
        "id",
        "legislature",
        "nom",
        "prenom",
        "civ",
        "ville_naissance",
        "groupe",
        "groupe_abrev",
        "departement_nom",
        "departement_code",
        "circo",
        mode="before",
    )(blank_to_none)

    @field_validator("naissance", "date_prise_fonction", mode="before")
    @classmethod
    def _parse_date(cls, value: object) -> date | None:
        return parse_iso_date(value) if isinstance(value, str) else None
