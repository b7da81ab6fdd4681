from __future__ import annotations

from datetime import date

import httpx
import pytest

from elusync.adapters.judilibre import (
    ClientCredentialsAuth,
    DecisionSummary,
    JudilibreAuthError,
    JudilibreFetcher,
    SearchTarget,
    decision_title,
    is_conviction,
    is_relevant,
    refers_to,
)
from elusync.config import JudilibreConfig, ResilienceConfig, SourceConfig
from elusync.domain.model import DataSource, JudicialCategory, JudicialStatus
from tests.helpers.feeds import mock_client_factory

DUPONT = SearchTarget(first_name="Jean", last_name="Dupont", birth_date=date(1960, 3, 2))
PORTES = SearchTarget(first_name="Claire", last_name="Portes")

CONFIG = JudilibreConfig(
    client_id="client",
    client_secret="secret",
    token_url="https://oauth.example/api/oauth/token",
    source=SourceConfig(
        url="https://judilibre.example/v1.0",
        resilience=ResilienceConfig(name="judilibre", base_url="https://judilibre.example/v1.0"),
    ),
)


def _decision(**fields: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": "60f1a2",
        "ecli": "ECLI:FR:CCASS:2021:CR00871",
        "number": "20-83.102",
        "decision_date": "2021-06-16",
        "chamber": "cr",
        "solution": "Rejet",
        "themes": ["corruption passive"],
        "summary": "M. Dupont, condamné pour corruption passive, forme un pourvoi.",
    }
    payload.update(fields)
    return payload


@pytest.mark.parametrize(
    ("text", "target", "expected"),
    [
        ("Arrêt concernant Jean Dupont, maire.", DUPONT, True),
        ("Dupont (Jean), né le 2 mars 1960", DUPONT, True),
        ("Le prévenu Dupont a été condamné.", DUPONT, True),
        ("La société Dupont et fils", DUPONT, False),
        ("Effraction des portes de la mairie", PORTES, False),
        ("Mme Portes, appelante", PORTES, True),
        (None, DUPONT, False),
    ],
)
def test_refers_to(text: str | None, target: SearchTarget, expected: bool) -> None:
    assert refers_to(text, target) is expected


def test_homonym_too_young_at_decision_is_dropped() -> None:
    decision = DecisionSummary.model_validate(_decision(decision_date="1975-01-10"))

    assert not is_relevant(decision, DUPONT)
    assert is_relevant(DecisionSummary.model_validate(_decision()), DUPONT)


@pytest.mark.parametrize(
    ("solution", "summary", "expected"),
    [
        ("Rejet", "condamné à deux ans d'emprisonnement", True),
        ("Non-admission", "déclaré coupable de favoritisme", True),
        ("Cassation partielle", "condamné à une amende", False),
        ("Rejet", "question prioritaire de constitutionnalité", False),
        ("Désistement", "condamné", False),
    ],
)
def test_is_conviction(solution: str, summary: str, expected: bool) -> None:
    decision = DecisionSummary.model_validate(_decision(solution=solution, summary=summary))

    assert is_conviction(decision) is expected


def test_decision_title_falls_back_to_theme() -> None:
    assert decision_title(DecisionSummary.model_validate(_decision())) == "Corruption"
    outrage = _decision(themes=["outrage à magistrat"], summary="outrage")
    assert decision_title(DecisionSummary.model_validate(outrage)) == "Outrage à magistrat"
    bare = _decision(themes=[], summary="", solution="Rejet")
    assert decision_title(DecisionSummary.model_validate(bare)) == (
        "Décision Cour de cassation (Rejet)"
    )


class _PisteSite:
    """Token endpoint plus the search and decision routes of the API."""

    def __init__(self) -> None:
        self.searches: dict[str, httpx.Response] = {}
        self.decisions: dict[str, httpx.Response] = {}
        self.token_requests = 0
        self.authorizations: list[str | None] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "oauth.example":
            self.token_requests += 1
            assert b"grant_type=client_credentials" in request.content
            return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
        self.authorizations.append(request.headers.get("Authorization"))
        if request.url.path == "/v1.0/search":
            assert request.url.params["chamber"] == "cr"
            return self.searches.get(request.url.params["query"], httpx.Response(404))
        if request.url.path == "/v1.0/decision":
            return self.decisions.get(request.url.params["id"], httpx.Response(404))
        return httpx.Response(404)


def _fetcher(site: _PisteSite, *targets: SearchTarget) -> JudilibreFetcher:
    return JudilibreFetcher(
        targets=targets, config=CONFIG, client_factory=mock_client_factory(site)
    )


def test_fetcher_stages_confirmed_convictions() -> None:
    site = _PisteSite()
    site.searches["Jean Dupont"] = httpx.Response(
        200,
        json={
            "total": 4,
            "results": [
                _decision(),
                _decision(id="b2", ecli="ECLI:B2", summary="La société Dupont, condamnée."),
                {"ecli": "ECLI:NO-ID"},
                _decision(id="c3", ecli="ECLI:C3", solution="Cassation"),
            ],
        },
    )
    site.decisions["60f1a2"] = httpx.Response(
        200, json=_decision(text="Statuant sur le pourvoi formé par M. Jean Dupont ...")
    )

    feed = _fetcher(site, DUPONT, PORTES)()

    assert feed.source is DataSource.JUDILIBRE
    assert not feed.complete
    assert feed.errors == ["Row 3: id: Field required"]
    assert [record.row for record in feed.records] == [1]
    record = feed.records[0]
    assert (record.person.first_name, record.person.last_name) == ("Jean", "Dupont")
    assert record.person.birth_date == date(1960, 3, 2)
    judicial = record.judicial
    assert judicial is not None
    assert judicial.natural_key == "ECLI:FR:CCASS:2021:CR00871"
    assert judicial.title == "[À VÉRIFIER] Corruption"
    assert judicial.category is JudicialCategory.CORRUPTION
    assert judicial.status is JudicialStatus.CONDAMNATION_DEFINITIVE
    assert judicial.verdict_date == date(2021, 6, 16)
    assert judicial.source_url == "https://www.courdecassation.fr/decision/60f1a2"
    assert site.token_requests == 1
    assert set(site.authorizations) == {"Bearer tok"}


def test_name_missing_from_full_text_drops_decision() -> None:
    site = _PisteSite()
    site.searches["Jean Dupont"] = httpx.Response(200, json={"total": 1, "results": [_decision()]})
    site.decisions["60f1a2"] = httpx.Response(
        200, json=_decision(text="Statuant sur le pourvoi formé par M. Paul Dupontel ...")
    )

    feed = _fetcher(site, DUPONT)()

    assert feed.records == []
    assert feed.errors == []


def test_unavailable_full_text_keeps_summary_check() -> None:
    site = _PisteSite()
    site.searches["Jean Dupont"] = httpx.Response(200, json={"total": 1, "results": [_decision()]})
    site.decisions["60f1a2"] = httpx.Response(410)

    feed = _fetcher(site, DUPONT)()

    assert [record.judicial.natural_key for record in feed.records if record.judicial] == [
        "ECLI:FR:CCASS:2021:CR00871"
    ]


def test_failed_search_is_reported_and_the_rest_continue() -> None:
    site = _PisteSite()
    site.searches["Jean Dupont"] = httpx.Response(400)
    site.searches["Claire Portes"] = httpx.Response(
        200,
        json={"results": [_decision(id="p1", ecli="ECLI:P1", summary="Mme Portes, condamnée.")]},
    )
    site.decisions["p1"] = httpx.Response(200, json=_decision(text="Mme Claire Portes"))

    feed = _fetcher(site, DUPONT, PORTES)()

    assert len(feed.errors) == 1
    assert feed.errors[0].startswith("Jean Dupont: judilibre: HTTP 400")
    assert [record.person.last_name for record in feed.records] == ["Portes"]


def test_refused_credentials_fail_the_feed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "oauth.example":
            return httpx.Response(401, json={"error": "invalid_client"})
        return httpx.Response(200, json={"results": []})

    fetcher = JudilibreFetcher(
        targets=(DUPONT, PORTES), config=CONFIG, client_factory=mock_client_factory(handler)
    )

    with pytest.raises(JudilibreAuthError, match="HTTP 401"):
        fetcher()


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_token_is_reused_until_it_nearly_expires() -> None:
    clock = _Clock()
    tokens = iter(["first", "second"])
    seen: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return httpx.Response(200, json={"access_token": next(tokens), "expires_in": 600})
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200)

    auth = ClientCredentialsAuth("https://oauth.example/token", "id", "secret", clock=clock)
    with httpx.Client(transport=httpx.MockTransport(handler), auth=auth) as client:
        client.get("https://judilibre.example/search")
        clock.now += 500
        client.get("https://judilibre.example/search")
        clock.now += 50
        client.get("https://judilibre.example/search")

    assert seen == ["Bearer first", "Bearer first", "Bearer second"]


def test_revoked_token_is_renewed_once() -> None:
    tokens = iter(["stale", "fresh"])
    seen: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return httpx.Response(200, json={"access_token": next(tokens), "expires_in": 3600})
        seen.append(request.headers.get("Authorization"))
        if request.headers.get("Authorization") == "Bearer stale":
            return httpx.Response(401)
        return httpx.Response(200)

    auth = ClientCredentialsAuth("https://oauth.example/token", "id", "secret")
    with httpx.Client(transport=httpx.MockTransport(handler), auth=auth) as client:
        response = client.get("https://judilibre.example/search")

    assert response.status_code == 200
    assert seen == ["Bearer stale", "Bearer fresh"]
