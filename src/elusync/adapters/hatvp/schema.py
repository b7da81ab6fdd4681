"""Pydantic model for the HATVP open-data declarations list."""

from __future__ import annotations

from datetime import date  # noqa: TC003

from pydantic import field_validator

from elusync.adapters.feeds import FeedModel, blank_to_none, parse_any_date

REQUIRED_COLUMNS = ("prenom", "nom", "type_mandat", "type_document", "nom_fichier")


class DeclarationRow(FeedModel):
    civilite: str | None = None
    prenom: str | None = None
    nom: str | None = None
    type_mandat: str | None = None
    type_document: str | None = None
    departement: str | None = None
    date_publication: date | None = None
    date_depot: date | None = None
    nom_fichier: str | None = None
    url_dossier: str | None = None
    id_origine: str | None = None
    url_photo: str | None = None

    _blank_to_none = field_validator(
        "civilite",
        "prenom",
        "nom",
        "type_mandat",
        "type_document",
        "departement",
        "nom_fichier",
        "url_dossier",
        "id_origine",
        "url_photo",
        mode="before",
    )(blank_to_none)

    @field_validator("date_publication", "date_depot", mode="before")
    @classmethod
    def _parse_date(cls, value: object) -> date | None:
        return parse_any_date(value) if isinstance(value, str) else None
