from __future__ import annotations

import pytest

from elusync.config import (
    MissingConfigurationError,
    get_deputies_source,
    get_judilibre_config,
    get_senate_votes_source,
    get_sync_config,
    get_wikidata_source,
)
from elusync.config.sources import (
    DEFAULT_CONTACT,
    DEPUTIES_CSV_URL,
    JUDILIBRE_API_URL,
    PISTE_TOKEN_URL,
    SENAT_BASE_URL,
)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ELUSYNC_DEPUTIES_URL", raising=False)
    monkeypatch.delenv("ELUSYNC_CONTACT", raising=False)

    source = get_deputies_source()

    assert source.url == DEPUTIES_CSV_URL
    assert source.resilience.name == "deputies"
    assert source.resilience.default_headers == {"User-Agent": DEFAULT_CONTACT}
    assert source.resilience.ratelimit is not None
    assert source.resilience.ratelimit.per_seconds == 1.0
    assert source.resilience.cache is None


def test_env_overrides_url_interval_and_contact(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ELUSYNC_WIKIDATA_URL", "https://sparql.example/query")
    monkeypatch.setenv("ELUSYNC_WIKIDATA_MIN_INTERVAL", "5")
    monkeypatch.setenv("ELUSYNC_CONTACT", "civic-lab (ops@example.org)")

    source = get_wikidata_source()

    assert source.url == "https://sparql.example/query"
    assert source.resilience.ratelimit is not None
    assert source.resilience.ratelimit.per_seconds == 5.0
    assert source.resilience.default_headers == {"User-Agent": "civic-lab (ops@example.org)"}


@pytest.mark.parametrize(("flag", "cached"), [("1", True), ("yes", True), ("0", False), ("", False)])
def test_roll_call_cache_is_opt_in(
    monkeypatch: pytest.MonkeyPatch, flag: str, cached: bool
) -> None:
    monkeypatch.setenv("ELUSYNC_HTTP_CACHE", flag)
    monkeypatch.delenv("ELUSYNC_SENATE_VOTES_URL", raising=False)

    source = get_senate_votes_source()

    assert (source.resilience.cache is not None) is cached
    assert source.resilience.base_url == SENAT_BASE_URL


def test_sync_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ELUSYNC_SENATE_SESSION", "2023")
    monkeypatch.setenv("ELUSYNC_MIN_SYNC_INTERVAL_HOURS", "12")

    config = get_sync_config()

    assert config.senate_session == 2023
    assert config.min_sync_interval_hours == 12.0


def test_judilibre_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ELUSYNC_JUDILIBRE_CLIENT_ID", "client")
    monkeypatch.setenv("ELUSYNC_JUDILIBRE_CLIENT_SECRET", " ")

    with pytest.raises(MissingConfigurationError, match="ELUSYNC_JUDILIBRE_CLIENT_SECRET"):
        get_judilibre_config()


def test_judilibre_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ELUSYNC_JUDILIBRE_CLIENT_ID", "client")
    monkeypatch.setenv("ELUSYNC_JUDILIBRE_CLIENT_SECRET", "secret")
    monkeypatch.delenv("ELUSYNC_JUDILIBRE_URL", raising=False)
    monkeypatch.delenv("ELUSYNC_JUDILIBRE_TOKEN_URL", raising=False)

    config = get_judilibre_config()

    assert (config.client_id, config.client_secret) == ("client", "secret")
    assert config.token_url == PISTE_TOKEN_URL
    assert config.source.resilience.base_url == JUDILIBRE_API_URL
    assert "secret" not in repr(config)
