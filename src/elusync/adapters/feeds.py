"""Shared plumbing for feed adapters: downloads, CSV reading, date parsing."""

from __future__ import annotations

import asyncio
import csv
import io
import re
from datetime import date
from logging import getLogger
from typing import TYPE_CHECKING, Final, NamedTuple, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from elusync.adapters.http_resilience import ResilientClient
from elusync.domain.candidates import StagedFeed
from elusync.domain.ports import FeedUnavailableError
from elusync.domain.reconciliation.normalize import strip_accents

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Iterable, Mapping

    from aiolimiter import AsyncLimiter

    from elusync.config import ResilienceConfig
    from elusync.domain.candidates import SourceRecord
    from elusync.domain.model import DataSource

log = getLogger(__name__)

class ClientFactory(Protocol):
    """Builds the client a fetcher downloads through; ``limiter`` is shared when given."""

    def __call__(
        self, config: ResilienceConfig, /, *, limiter: AsyncLimiter | None = None
    ) -> ResilientClient: ...


FRENCH_MONTHS: Final[dict[str, int]] = {
    "janvier": 1,
    "fevrier": 2,
    "mars": 3,
    "avril": 4,
    "mai": 5,
    "juin": 6,
    "juillet": 7,
    "aout": 8,
    "septembre": 9,
    "octobre": 10,
    "novembre": 11,
    "decembre": 12,
}

_DMY_RE: Final = re.compile(r"^\s*(\d{1,2})/(\d{1,2})/(\d{4})\s*$")
_ISO_RE: Final = re.compile(r"^\s*(\d{4})-(\d{2})-(\d{2})")
_FRENCH_DATE_RE: Final = re.compile(r"(\d{1,2})(?:er)?\s+([^\W\d_]+)\s+(\d{4})")
_MIN_YEAR: Final = 1900
_MAX_YEAR: Final = 2100


class FeedError(FeedUnavailableError):
    """A feed could not be downloaded; ``status_code`` is set for HTTP error statuses."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FeedFormatError(FeedError):
    """A feed was downloaded but its overall shape is not what the adapter expects."""


class RowError(ValueError):
    """One row cannot be translated; reported as a parse error, the feed goes on."""


def default_client_factory(
    config: ResilienceConfig, /, *, limiter: AsyncLimiter | None = None
) -> ResilientClient:
    return ResilientClient(config, limiter=limiter)


async def download(
    client: ResilientClient,
    url: str,
    *,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """GET ``url``; any transport or HTTP status failure becomes :class:`FeedError`."""

    try:
        response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise FeedError(
            f"{client.config.name}: HTTP {exc.response.status_code} for {url}",
            status_code=exc.response.status_code,
        ) from exc
    except httpx.HTTPError as exc:
        raise FeedError(f"{client.config.name}: {type(exc).__name__} for {url}: {exc}") from exc
    return response


def fetch_text(
    config: ResilienceConfig,
    url: str,
    *,
    client_factory: ClientFactory = default_client_factory,
) -> str:
    async def run() -> str:
        async with client_factory(config) as client:
            response = await download(client, url)
            return response.text

    return asyncio.run(run())


def fetch_json(
    config: ResilienceConfig,
    url: str,
    *,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
    client_factory: ClientFactory = default_client_factory,
) -> object:
    async def run() -> object:
        async with client_factory(config) as client:
            response = await download(client, url, params=params, headers=headers)
            try:
                return response.json()
            except ValueError as exc:
                raise FeedFormatError(f"{config.name}: response is not JSON") from exc

    return asyncio.run(run())


def read_csv(
    text: str,
    *,
    delimiter: str,
    required: Collection[str] = (),
) -> list[dict[str, str]]:
    """Parse a header-first delimited text into trimmed row dicts.

    A leading BOM is dropped. Missing required columns fail the whole feed.
    """

    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")), delimiter=delimiter)
    header = [name.strip() for name in reader.fieldnames or ()]
    missing = [name for name in required if name not in header]
    if missing:
        raise FeedFormatError(f"missing column(s): {', '.join(missing)}")
    rows: list[dict[str, str]] = []
    for raw in reader:
        row = {
            (key or "").strip(): (value or "").strip()
            for key, value in raw.items()
            if isinstance(value, str) or value is None
        }
        if any(row.values()):
            rows.append(row)
    return rows


def blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "row"
    return f"{location}: {first['msg']}"


class FeedModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


def _checked(year: int, month: int, day: int) -> date | None:
    if not _MIN_YEAR <= year <= _MAX_YEAR:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_dmy_date(value: str | None) -> date | None:
    """``DD/MM/YYYY`` with a plausible year, else None."""

    if not value:
        return None
    match = _DMY_RE.match(value)
    if match is None:
        return None
    day, month, year = (int(part) for part in match.groups())
    return _checked(year, month, day)


def parse_iso_date(value: str | None) -> date | None:
    if not value:
        return None
    match = _ISO_RE.match(value)
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    return _checked(year, month, day)


def parse_french_date(value: str | None) -> date | None:
    """Find ``D mois YYYY`` anywhere in ``value``, e.g. "vendredi 13 décembre 2024".

    Month names match with or without accents.
    """

    if not value:
        return None
    match = _FRENCH_DATE_RE.search(value)
    if match is None:
        return None
    month = FRENCH_MONTHS.get(strip_accents(match.group(2)).lower())
    if month is None:
        return None
    return _checked(int(match.group(3)), month, int(match.group(1)))


def parse_any_date(value: str | None) -> date | None:
    return parse_iso_date(value) or parse_dmy_date(value) or parse_french_date(value)


def stage_rows[TRow: BaseModel](
    source: DataSource,
    rows: Iterable[Mapping[str, object]],
    model: type[TRow],
    translate: Callable[[TRow, int], SourceRecord | None],
) -> StagedFeed:
    """Validate and translate every row; bad rows become ``"Row N: reason"`` errors.

    ``translate`` returns None for rows the source deliberately leaves out.
    """

    feed = StagedFeed(source=source)
    for number, raw in enumerate(rows, start=1):
        try:
            parsed = model.model_validate(raw)
        except ValidationError as exc:
            feed.errors.append(f"Row {number}: {describe_validation_error(exc)}")
            continue
        try:
            record = translate(parsed, number)
        except RowError as exc:
            feed.errors.append(f"Row {number}: {exc}")
            continue
        if record is not None:
            feed.records.append(record)
    if feed.errors:
        log.warning("%s: %s malformed rows", source, len(feed.errors))
    log.info("%s: staged %s records", source, len(feed.records))
    return feed


class PartyMapping(NamedTuple):
    """Display data for a parliamentary group code."""

    short_name: str
    full_name: str
    color: str
