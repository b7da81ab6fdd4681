"""Pydantic model for the data.gouv list of Fifth-Republic government members."""

from __future__ import annotations

from pydantic import field_validator

from elusync.adapters.feeds import FeedModel, blank_to_none

REQUIRED_COLUMNS = (
    "id",
    "code_fonction",
    "prenom",
    "nom",
    "fonction",
    "date_debut_fonction",
    "date_fin_fonction",
)


class GovernmentMemberRow(FeedModel):
    id: str
    gouvernement: str | None = None
    code_fonction: str | None = None
    prenom: str
    nom: str
    fonction: str
    date_debut_fonction: str | None = None
    date_fin_fonction: str | None = None

    _blank_to_none = field_validator(
        "id",
        "gouvernement",
        "code_fonction",
        "prenom",
        "nom",
        "fonction",
        "date_debut_fonction",
        "date_fin_fonction",
        mode="before",
    )(blank_to_none)

    @property
    def is_current(self) -> bool:
        return self.date_fin_fonction is None
