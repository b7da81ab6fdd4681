from __future__ import annotations

from datetime import date

import httpx
import pytest

from elusync.adapters.assemblee import DeputiesFetcher, deputy_title, stage_deputies
from elusync.adapters.feeds import FeedFormatError
from elusync.config import get_deputies_source
from elusync.domain.model import DataSource, MandateType
from tests.helpers.feeds import mock_client_factory

HEADER = (
    "id,legislature,civ,nom,prenom,villeNaissance,naissance,age,groupe,groupeAbrev,"
    "departementNom,departementCode,circo,datePriseFonction"
)
CSV = "\n".join(
    [
        HEADER,
        "PA841605,17,Mme,DUPONT,Marie,Lyon,1975-03-02,49,Ensemble pour la République,EPR,"
        "Rhône,69,3,2024-07-18",
        "PA722170,17,M.,Martin,Jean-Luc,Brest,1962-11-30,62,Groupe inconnu,NEW,"
        "Finistère,29,1,2024-07-18",
        "PA1,17,M.,,Paul,,,,,,,,,",
    ]
)


def test_stage_deputies_translates_rows() -> None:
    feed = stage_deputies(CSV)

    assert feed.source is DataSource.ASSEMBLEE_NATIONALE
    assert len(feed.records) == 2
    first = feed.records[0]
    assert first.row == 1
    assert first.person.first_name == "Marie"
    assert first.person.last_name == "Dupont"
    assert first.person.gender == "F"
    assert first.person.birth_date == date(1975, 3, 2)
    assert first.person.department == "69"
    assert first.person.photo_url == (
        "https://www2.assemblee-nationale.fr/static/tribun/17/photos/841605.jpg"
    )
    anchors = {anchor.source: anchor.value for anchor in first.person.anchors}
    assert anchors == {DataSource.ASSEMBLEE_NATIONALE: "PA841605", DataSource.NOSDEPUTES: "marie-dupont"}

    mandate = first.mandate
    assert mandate is not None
    assert mandate.mandate_type is MandateType.DEPUTE
    assert mandate.title == "Députée de la 3e circonscription"
    assert mandate.natural_key == "PA841605-leg17"
    assert mandate.constituency == "Rhône (3)"
    assert mandate.start_date == date(2024, 7, 18)

    organization = first.organization
    assert organization is not None
    assert organization.short_name == "EPR"
    assert organization.color == "#FFEB00"


def test_unknown_group_falls_back_to_row_label() -> None:
    organization = stage_deputies(CSV).records[1].organization

    assert organization is not None
    assert organization.short_name == "NEW"
    assert organization.name == "Groupe inconnu"
    assert organization.color == "#888888"


def test_row_without_last_name_is_reported() -> None:
    feed = stage_deputies(CSV)

    assert len(feed.errors) == 1
    assert feed.errors[0].startswith("Row 3: nom")


def test_missing_column_fails_feed() -> None:
    with pytest.raises(FeedFormatError):
        stage_deputies("id,nom,prenom\nPA1,Dupont,Jean\n")


@pytest.mark.parametrize(
    ("circo", "civ", "expected"),
    [
        (1, "M.", "Député de la 1re circonscription"),
        (12, "Mme", "Députée de la 12e circonscription"),
        (None, None, "Député"),
    ],
)
def test_deputy_title(circo: int | None, civ: str | None, expected: str) -> None:
    assert deputy_title(circo, civ) == expected


def test_fetcher_downloads_configured_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ELUSYNC_DEPUTIES_URL", "https://mirror.example/deputes.csv")
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text=CSV)

    fetcher = DeputiesFetcher(
        source=get_deputies_source(), client_factory=mock_client_factory(handler)
    )
    feed = fetcher()

    assert seen == ["https://mirror.example/deputes.csv"]
    assert len(feed.records) == 2
