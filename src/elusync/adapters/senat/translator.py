"""Translate senat.fr payloads into source records and roll calls."""

from __future__ import annotations

import html
import re
from datetime import date  # noqa: TC003
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from elusync.adapters.departments import department_code
from elusync.adapters.feeds import (
    FeedFormatError,
    PartyMapping,
    describe_validation_error,
    parse_french_date,
    stage_rows,
)
from elusync.domain.candidates import (
    Anchor,
    MandateClaim,
    OrganizationClaim,
    PersonCandidate,
    ScrutinRecord,
    SourceRecord,
)
from elusync.domain.model import DataSource, MandateType, VotePosition
from elusync.domain.reconciliation.normalize import normalize_name, person_slug

from .schema import SenateBallotsPayload, SenatorPayload

if TYPE_CHECKING:
    from collections.abc import Callable

    from elusync.domain.candidates import StagedFeed

log = getLogger(__name__)

INSTITUTION: Final = "Sénat"
SENAT_SITE: Final = "https://www.senat.fr"
UNKNOWN_GROUP_COLOR: Final = "#888888"

SENATE_GROUP_MAPPINGS: Final[dict[str, PartyMapping]] = {
    "RDPI": PartyMapping(
        "RDPI", "Rassemblement des démocrates progressistes et indépendants", "#FFEB00"
    ),
    "LR": PartyMapping("LR", "Les Républicains", "#0066CC"),
    "SER": PartyMapping("SER", "Socialiste, Écologiste et Républicain", "#FF8080"),
    "UC": PartyMapping("UC", "Union Centriste", "#FF9900"),
    "CRCE-K": PartyMapping(
        "CRCE", "Communiste, Républicain, Citoyen et Écologiste - Kanaky", "#DD0000"
    ),
    "CRCE": PartyMapping("CRCE", "Communiste, Républicain, Citoyen et Écologiste", "#DD0000"),
    "GEST": PartyMapping("GEST", "Écologiste - Solidarité et Territoires", "#00C000"),
    "RDSE": PartyMapping("RDSE", "Rassemblement Démocratique et Social Européen", "#F0A000"),
    "INDEP": PartyMapping("INDEP", "Les Indépendants - République et Territoires", "#00AAAA"),
    "RASNAG": PartyMapping("RN", "Rassemblement National", "#0D378A"),
    "RN": PartyMapping("RN", "Rassemblement National", "#0D378A"),
    "NI": PartyMapping("NI", "Non-inscrits", "#AAAAAA"),
    "SENRI": PartyMapping("NI", "Sénateurs ne figurant sur la liste d'aucun groupe", "#AAAAAA"),
}

VOTE_CODES: Final[dict[str, VotePosition]] = {
    "p": VotePosition.POUR,
    "c": VotePosition.CONTRE,
    "a": VotePosition.ABSTENTION,
    "n": VotePosition.NON_VOTANT,
}


def senator_page_url(payload: SenatorPayload) -> str:
    if payload.url:
        return payload.url if payload.url.startswith("http") else f"{SENAT_SITE}{payload.url}"
    return f"{SENAT_SITE}/senateur/{payload.matricule}/"


def _photo_url(payload: SenatorPayload) -> str:
    if payload.url_avatar:
        avatar = payload.url_avatar
        return avatar if avatar.startswith("http") else f"{SENAT_SITE}{avatar}"
    return f"{SENAT_SITE}/senateur/{payload.matricule}/photo.jpg"


def _is_female(payload: SenatorPayload) -> bool:
    return payload.feminise or (payload.civilite or "").lower().startswith("mme")


def _group_claim(payload: SenatorPayload) -> OrganizationClaim | None:
    group = payload.groupe
    if group is None or group.code is None:
        return None
    mapping = SENATE_GROUP_MAPPINGS.get(group.code) or PartyMapping(
        group.code, group.libelle or group.code, UNKNOWN_GROUP_COLOR
    )
    return OrganizationClaim(
        source=DataSource.SENAT,
        code=group.code,
        name=mapping.full_name,
        short_name=mapping.short_name,
        color=mapping.color,
    )


def make_senator_translator(
    *, series_1_start: date, series_2_start: date
) -> Callable[[SenatorPayload, int], SourceRecord]:
    """Build the row translator; the renewal series decides the fallback start date."""

    def translate(payload: SenatorPayload, number: int) -> SourceRecord:
        first_name = normalize_name(payload.prenom)
        last_name = normalize_name(payload.nom)
        slug = person_slug(first_name, last_name)
        constituency = payload.circonscription.libelle if payload.circonscription else None
        department = department_code(constituency)
        page = senator_page_url(payload)

        person = PersonCandidate(
            first_name=first_name,
            last_name=last_name,
            anchors=(
                Anchor(source=DataSource.SENAT, value=payload.matricule, url=page),
                Anchor(source=DataSource.NOSSENATEURS, value=slug),
            ),
            gender="F" if _is_female(payload) else "M",
            photo_url=_photo_url(payload),
            department=department,
        )
        noun = "Sénatrice" if _is_female(payload) else "Sénateur"
        mandate = MandateClaim(
            mandate_type=MandateType.SENATEUR,
            institution=INSTITUTION,
            title=f"{noun} ({constituency})" if constituency else noun,
            natural_key=f"senat-{payload.matricule}",
            constituency=constituency,
            department_code=department,
            default_start_date=series_1_start if payload.serie == 1 else series_2_start,
            url=page,
        )
        return SourceRecord(
            source=DataSource.SENAT,
            row=number,
            person=person,
            mandate=mandate,
            organization=_group_claim(payload),
        )

    return translate


def stage_senators(payload: object, *, series_1_start: date, series_2_start: date) -> StagedFeed:
    if not isinstance(payload, list):
        raise FeedFormatError("senators: expected a JSON list")
    translate = make_senator_translator(
        series_1_start=series_1_start, series_2_start=series_2_start
    )
    return stage_rows(DataSource.SENAT, payload, SenatorPayload, translate)


# roll calls

_TAG_RE: Final = re.compile(r"<[^>]+>")
_SPACE_RE: Final = re.compile(r"\s+")
_PAGE_LEAD_RE: Final = re.compile(r'<p\s+class="page-lead">(.*?)</p>', re.IGNORECASE | re.DOTALL)
_H1_RE: Final = re.compile(r"<h1[^>]*>(.*?)</h1>", re.IGNORECASE | re.DOTALL)
_SITTING_DATE_RE: Final = re.compile(
    r"séance\s+du\s+(\d{1,2}(?:er)?\s+[^\W\d_]+\s+\d{4})", re.IGNORECASE
)
_FOR_HTML_RE: Final = re.compile(r"<strong>\s*(\d+)\s*</strong>\s*pour", re.IGNORECASE)
_FOR_TEXT_RE: Final = re.compile(r"(\d+)\s+pour(?!\s+part)", re.IGNORECASE)
_AGAINST_HTML_RE: Final = re.compile(r"<strong>\s*(\d+)\s*</strong>\s*contre", re.IGNORECASE)
_AGAINST_TEXT_RE: Final = re.compile(r"(\d+)\s+contre", re.IGNORECASE)
_ABSTAIN_TEXT_RE: Final = re.compile(r"abstentions?\s*:?\s*(\d+)", re.IGNORECASE)
_ABSTAIN_HTML_RE: Final = re.compile(r"<strong>\s*(\d+)\s*</strong>\s*abstention", re.IGNORECASE)
_ADOPTED_RE: Final = re.compile(r"Le\s+Sénat\s+a\s+adopté|a\s+été\s+adopté", re.IGNORECASE)
_REJECTED_RE: Final = re.compile(r"n['’]a\s+pas\s+adopté|a\s+été\s+rejeté|rejet", re.IGNORECASE)
_MIN_TITLE_LENGTH: Final = 6


def scrutin_path(session: int, number: int, suffix: str) -> str:
    return f"/scrutin-public/{session}/scr{session}-{number}.{suffix}"


def session_index_path(session: int) -> str:
    return f"/scrutin-public/scr{session}.html"


def parse_scrutin_numbers(page: str, session: int) -> list[int]:
    """Distinct scrutin numbers linked from a session index page, ascending."""

    pattern = re.compile(rf"scr{session}-(\d+)\.html")
    return sorted({int(number) for number in pattern.findall(page)})


def _text(fragment: str) -> str:
    return _SPACE_RE.sub(" ", _TAG_RE.sub(" ", fragment)).strip()


def _title(page: str, number: int) -> str:
    lead = _PAGE_LEAD_RE.search(page)
    if lead is not None:
        text = _text(lead.group(1))
        if len(text) >= _MIN_TITLE_LENGTH:
            return text
    heading = _H1_RE.search(page)
    if heading is not None:
        text = _text(re.sub(r"En savoir plus", " ", heading.group(1), flags=re.IGNORECASE))
        if len(text) >= _MIN_TITLE_LENGTH:
            return text
    return f"Scrutin n°{number}"


def _first_int(*candidates: re.Match[str] | None) -> int:
    for match in candidates:
        if match is not None:
            return int(match.group(1))
    return 0


def parse_scrutin_page(page: str, *, session: int, number: int) -> ScrutinRecord:
    """Metadata of one roll call from its HTML page; positions are added separately."""

    decoded = html.unescape(page)
    text = _text(decoded)
    sitting = _SITTING_DATE_RE.search(text)
    adopted = _ADOPTED_RE.search(text) is not None and _REJECTED_RE.search(text) is None
    return ScrutinRecord(
        session=session,
        number=number,
        title=_title(decoded, number),
        voting_date=parse_french_date(sitting.group(1)) if sitting else None,
        votes_for=_first_int(_FOR_HTML_RE.search(decoded), _FOR_TEXT_RE.search(text)),
        votes_against=_first_int(_AGAINST_HTML_RE.search(decoded), _AGAINST_TEXT_RE.search(text)),
        votes_abstain=_first_int(_ABSTAIN_TEXT_RE.search(text), _ABSTAIN_HTML_RE.search(decoded)),
        adopted=adopted,
        source_url=f"{SENAT_SITE}{scrutin_path(session, number, 'html')}",
    )


def vote_position(code: str) -> VotePosition:
    return VOTE_CODES.get(code.strip().lower(), VotePosition.ABSENT)


def parse_ballots(payload: object) -> tuple[tuple[str, VotePosition], ...]:
    try:
        ballots = SenateBallotsPayload.model_validate(payload)
    except ValidationError as exc:
        raise FeedFormatError(f"senate votes: {describe_validation_error(exc)}") from exc
    return tuple((ballot.matricule, vote_position(ballot.vote)) for ballot in ballots.votes)
