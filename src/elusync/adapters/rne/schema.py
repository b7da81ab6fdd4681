"""Pydantic model for the RNE (répertoire national des élus) mayors CSV."""

from __future__ import annotations

from datetime import date  # noqa: TC003

from pydantic import Field, field_validator

from elusync.adapters.feeds import FeedModel, blank_to_none, parse_dmy_date

REQUIRED_COLUMNS = (
    "Code du département",
    "Code de la commune",
    "Nom de l'élu",
    "Prénom de l'élu",
)


class MayorRow(FeedModel):
    department_code: str = Field(alias="Code du département")
    commune_code: str = Field(alias="Code de la commune")
    commune_name: str | None = Field(default=None, alias="Libellé de la commune")
    last_name: str = Field(alias="Nom de l'élu")
    first_name: str = Field(alias="Prénom de l'élu")
    sex: str | None = Field(default=None, alias="Code sexe")
    birth_date: date | None = Field(default=None, alias="Date de naissance")
    mandate_start: date | None = Field(default=None, alias="Date de début du mandat")
    function_start: date | None = Field(default=None, alias="Date de début de la fonction")

    _blank_to_none = field_validator(
        "department_code",
        "commune_code",
        "commune_name",
        "last_name",
        "first_name",
        "sex",
        mode="before",
    )(blank_to_none)

    @field_validator("birth_date", "mandate_start", "function_start", mode="before")
    @classmethod
    def _parse_date(cls, value: object) -> date | None:
        return parse_dmy_date(value) if isinstance(value, str) else None
