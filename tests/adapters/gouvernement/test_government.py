from __future__ import annotations

from datetime import date

import httpx
import pytest

from elusync.adapters.gouvernement import GovernmentFetcher, stage_government
from elusync.adapters.gouvernement.translator import mandate_type_for
from elusync.config import get_government_source
from elusync.domain.model import DataSource, MandateType
from tests.helpers.feeds import mock_client_factory

CSV = "\n".join(
    [
        "id;gouvernement;code_fonction;prenom;nom;fonction;date_debut_fonction;date_fin_fonction",
        "45;Bayrou;PM;François;BAYROU;Premier ministre;13/12/2024;",
        "45;Bayrou;MD;Anne;Martin;Ministre déléguée chargée du Numérique;23 décembre 2024;",
        "44;Barnier;M;Jean;Dupont;Ministre de l'Intérieur;21/09/2024;13/12/2024",
        "45;Bayrou;SE;Paul;Durand;Secrétaire d'État;bientôt;",
    ]
)


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("PM", MandateType.PREMIER_MINISTRE),
        ("md", MandateType.MINISTRE_DELEGUE),
        ("SE", MandateType.SECRETAIRE_ETAT),
        ("M", MandateType.MINISTRE),
        (None, MandateType.MINISTRE),
    ],
)
def test_mandate_type_for(code: str | None, expected: MandateType) -> None:
    assert mandate_type_for(code) is expected


def test_only_current_members_are_staged() -> None:
    feed = stage_government(CSV)

    assert feed.source is DataSource.GOUVERNEMENT
    assert [record.row for record in feed.records] == [1, 2]
    prime_minister = feed.records[0]
    assert prime_minister.person.last_name == "Bayrou"
    assert prime_minister.mandate is not None
    assert prime_minister.mandate.mandate_type is MandateType.PREMIER_MINISTRE
    assert prime_minister.mandate.start_date == date(2024, 12, 13)
    assert prime_minister.mandate.natural_key == "gouv-45-francois-bayrou"
    assert feed.records[1].mandate is not None
    assert feed.records[1].mandate.start_date == date(2024, 12, 23)


def test_unparseable_start_date_is_reported() -> None:
    feed = stage_government(CSV)

    assert feed.errors == ["Row 4: unparseable start date 'bientôt'"]


def test_fetcher_stages_downloaded_csv() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=CSV.encode("utf-8"))

    feed = GovernmentFetcher(
        source=get_government_source(), client_factory=mock_client_factory(handler)
    )()

    assert len(feed.records) == 2
