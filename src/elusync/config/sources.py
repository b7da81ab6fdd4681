"""Feed endpoints and HTTP behaviour for each external source."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_flag, env_float, env_or_default, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_CONTACT = "elusync/0.1 (public officials open-data sync)"

DEPUTIES_CSV_URL = (
    "https://static.data.gouv.fr/resources/"
    "deputes-actifs-de-lassemblee-nationale-informations-et-statistiques/"
    "20260118-063755/deputes-active.csv"
)
SENATORS_JSON_URL = "https://www.senat.fr/api-senat/senateurs.json"
MAYORS_CSV_URL = (
    "https://static.data.gouv.fr/resources/repertoire-national-des-elus-1/"
    "20251223-104211/elus-maires-mai.csv"
)
GOVERNMENT_CSV_URL = (
    "https://static.data.gouv.fr/resources/historique-des-gouvernements-de-la-veme-republique/"
    "20250313-105416/liste-membres-gouvernements-5eme-republique.csv"
)
EUROPARL_MEPS_URL = "https://data.europarl.europa.eu/api/v2/meps/show-current"
HATVP_CSV_URL = "https://www.hatvp.fr/livraison/opendata/liste.csv"
WIKIDATA_SPARQL_URL = "https://query.wikidata.org/sparql"
SENAT_BASE_URL = "https://www.senat.fr"
JUDILIBRE_API_URL = "https://api.piste.gouv.fr/cassation/judilibre/v1.0"
PISTE_TOKEN_URL = "https://oauth.piste.gouv.fr/api/oauth/token"


@dataclass(frozen=True, slots=True)
class SourceConfig:
    """Where a feed lives and how politely to fetch it."""

    url: str
    resilience: ResilienceConfig


def _user_agent() -> str:
    return env_or_default("ELUSYNC_CONTACT", DEFAULT_CONTACT)


def _source(
    name: str,
    default_url: str,
    *,
    min_interval_seconds: float,
    base_url: str | None = None,
    cache: CacheConfig | None = None,
) -> SourceConfig:
    env_prefix = f"ELUSYNC_{name.upper()}"
    url = env_or_default(f"{env_prefix}_URL", default_url)
    interval = env_float(f"{env_prefix}_MIN_INTERVAL", min_interval_seconds)
    resilience = ResilienceConfig(
        name=name,
        base_url=base_url,
        ratelimit=RateLimit.min_interval(interval),
        retry=RetryPolicy(total=3),
        cache=cache,
        default_headers={"User-Agent": _user_agent()},
    )
    return SourceConfig(url=url, resilience=resilience)


def get_deputies_source() -> SourceConfig:
    return _source("deputies", DEPUTIES_CSV_URL, min_interval_seconds=1.0)


def get_senators_source() -> SourceConfig:
    return _source("senators", SENATORS_JSON_URL, min_interval_seconds=1.0)


def get_mayors_source() -> SourceConfig:
    return _source("mayors", MAYORS_CSV_URL, min_interval_seconds=1.0)


def get_government_source() -> SourceConfig:
    return _source("government", GOVERNMENT_CSV_URL, min_interval_seconds=1.0)


def get_europarl_source() -> SourceConfig:
    return _source("europarl", EUROPARL_MEPS_URL, min_interval_seconds=0.5)


def get_hatvp_source() -> SourceConfig:
    return _source("hatvp", HATVP_CSV_URL, min_interval_seconds=1.0)


def get_wikidata_source() -> SourceConfig:
    # The public SPARQL endpoint throttles aggressively.
    return _source("wikidata", WIKIDATA_SPARQL_URL, min_interval_seconds=2.0)


def _http_cache() -> CacheConfig | None:
    """Opt-in on-disk response cache, enabled by ``ELUSYNC_HTTP_CACHE=1``."""
    if not env_flag("ELUSYNC_HTTP_CACHE"):
        return None
    return CacheConfig.on_disk(env_float("ELUSYNC_HTTP_CACHE_TTL", 86400.0))


def get_senate_votes_source() -> SourceConfig:
    # roll-call pages rarely change once published
    return _source(
        "senate_votes",
        SENAT_BASE_URL,
        min_interval_seconds=0.5,
        base_url=env_or_default("ELUSYNC_SENATE_VOTES_URL", SENAT_BASE_URL),
        cache=_http_cache(),
    )


@dataclass(frozen=True, slots=True)
class JudilibreConfig:
    """PISTE client credentials plus the case-law API endpoint."""

    client_id: str
    client_secret: str = field(repr=False)
    token_url: str
    source: SourceConfig


def get_judilibre_config() -> JudilibreConfig:
    values = require_env_vars(("ELUSYNC_JUDILIBRE_CLIENT_ID", "ELUSYNC_JUDILIBRE_CLIENT_SECRET"))
    return JudilibreConfig(
        client_id=values["ELUSYNC_JUDILIBRE_CLIENT_ID"],
        client_secret=values["ELUSYNC_JUDILIBRE_CLIENT_SECRET"],
        token_url=env_or_default("ELUSYNC_JUDILIBRE_TOKEN_URL", PISTE_TOKEN_URL),
        source=_source(
            "judilibre",
            JUDILIBRE_API_URL,
            min_interval_seconds=0.5,
            base_url=env_or_default("ELUSYNC_JUDILIBRE_URL", JUDILIBRE_API_URL),
        ),
    )
