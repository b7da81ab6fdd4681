from __future__ import annotations

from datetime import date

import httpx
import pytest

from elusync.adapters.feeds import FeedFormatError
from elusync.adapters.senat import SenatorsFetcher, stage_senators
from elusync.config import SyncConfig, get_senators_source
from elusync.domain.model import DataSource, MandateType
from tests.helpers.feeds import mock_client_factory

SERIES_1 = date(2023, 10, 1)
SERIES_2 = date(2020, 10, 1)


def test_stage_senators_translates_payload(senators_payload: list[dict[str, object]]) -> None:
    feed = stage_senators(senators_payload, series_1_start=SERIES_1, series_2_start=SERIES_2)

    assert feed.source is DataSource.SENAT
    assert len(feed.records) == 2
    record = feed.records[0]
    person = record.person
    assert (person.first_name, person.last_name) == ("Anne-Sophie", "De La Tour")
    assert person.gender == "F"
    assert person.department == "33"
    assert person.photo_url == "https://www.senat.fr/senimg/de_la_tour_anne_sophie19034f_carre.jpg"
    anchors = {anchor.source: anchor for anchor in person.anchors}
    assert anchors[DataSource.SENAT].value == "19034F"
    assert anchors[DataSource.SENAT].url == (
        "https://www.senat.fr/senateur/de_la_tour_anne_sophie19034f.html"
    )
    assert anchors[DataSource.NOSSENATEURS].value == "anne-sophie-de-la-tour"

    mandate = record.mandate
    assert mandate is not None
    assert mandate.mandate_type is MandateType.SENATEUR
    assert mandate.title == "Sénatrice (Gironde)"
    assert mandate.natural_key == "senat-19034F"
    assert mandate.start_date is None
    assert mandate.default_start_date == SERIES_1

    organization = record.organization
    assert organization is not None
    assert (organization.short_name, organization.color) == ("UC", "#FF9900")


def test_series_two_and_unknown_group(senators_payload: list[dict[str, object]]) -> None:
    record = stage_senators(
        senators_payload, series_1_start=SERIES_1, series_2_start=SERIES_2
    ).records[1]

    assert record.person.gender == "M"
    assert record.person.department == "099"
    assert record.mandate is not None
    assert record.mandate.title == "Sénateur (Français établis hors de France)"
    assert record.mandate.default_start_date == SERIES_2
    assert record.person.photo_url == "https://www.senat.fr/senateur/21001/photo.jpg"
    assert record.organization is not None
    assert record.organization.name == "Groupe nouveau"


def test_incomplete_senator_is_a_row_error(senators_payload: list[dict[str, object]]) -> None:
    feed = stage_senators(senators_payload, series_1_start=SERIES_1, series_2_start=SERIES_2)

    assert feed.errors == ["Row 3: nom: Field required"]


def test_non_list_payload_fails_feed() -> None:
    with pytest.raises(FeedFormatError):
        stage_senators({"senateurs": []}, series_1_start=SERIES_1, series_2_start=SERIES_2)


def test_fetcher_uses_sync_series_dates(senators_payload: list[dict[str, object]]) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=senators_payload)

    fetcher = SenatorsFetcher(
        source=get_senators_source(),
        sync=SyncConfig(senator_start_series_1=date(2017, 10, 1)),
        client_factory=mock_client_factory(handler),
    )
    feed = fetcher()

    first = feed.records[0].mandate
    assert first is not None
    assert first.default_start_date == date(2017, 10, 1)
