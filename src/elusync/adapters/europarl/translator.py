"""Translate French MEPs into source records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from elusync.adapters.feeds import (
    FeedFormatError,
    PartyMapping,
    describe_validation_error,
    stage_rows,
)
from elusync.domain.candidates import (
    Anchor,
    MandateClaim,
    OrganizationClaim,
    PersonCandidate,
    SourceRecord,
)
from elusync.domain.model import DataSource, MandateType
from elusync.domain.reconciliation.normalize import normalize_name

from .schema import MepListPayload, MepPayload

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date

    from elusync.domain.candidates import StagedFeed

INSTITUTION: Final = "Parlement européen"
MEP_PAGE_URL: Final = "https://www.europarl.europa.eu/meps/fr/{id}"
MEP_PHOTO_URL: Final = "https://www.europarl.europa.eu/mepphoto/{id}.jpg"
FRANCE: Final = "FR"
UNKNOWN_GROUP_COLOR: Final = "#888888"

EUROPEAN_GROUPS: Final[dict[str, PartyMapping]] = {
    "PPE": PartyMapping("PPE", "Parti populaire européen", "#3399FF"),
    "S&D": PartyMapping("S&D", "Alliance Progressiste des Socialistes et Démocrates", "#F0001C"),
    "Renew": PartyMapping("Renew", "Renew Europe", "#FFD700"),
    "Verts/ALE": PartyMapping("Verts/ALE", "Verts/Alliance libre européenne", "#009900"),
    "PfE": PartyMapping("PfE", "Patriots for Europe", "#1E3A5F"),
    "ECR": PartyMapping("ECR", "Conservateurs et Réformistes européens", "#0054A5"),
    "The Left": PartyMapping("GUE/NGL", "La Gauche au Parlement européen", "#990000"),
    "ESN": PartyMapping("ESN", "Europe of Sovereign Nations", "#4A4A4A"),
    "NI": PartyMapping("NI", "Non-inscrits", "#999999"),
}


def _group_claim(code: str | None) -> OrganizationClaim | None:
    if code is None:
        return None
    mapping = EUROPEAN_GROUPS.get(code) or PartyMapping(code, code, UNKNOWN_GROUP_COLOR)
    return OrganizationClaim(
        source=DataSource.PARLEMENT_EUROPEEN,
        code=code,
        name=mapping.full_name,
        short_name=mapping.short_name,
        color=mapping.color,
    )


def make_mep_translator(*, default_start: date) -> Callable[[MepPayload, int], SourceRecord | None]:
    def translate(payload: MepPayload, number: int) -> SourceRecord | None:
        if payload.country != FRANCE:
            return None
        page = MEP_PAGE_URL.format(id=payload.identifier)
        person = PersonCandidate(
            first_name=normalize_name(payload.given_name),
            last_name=normalize_name(payload.family_name),
            anchors=(
                Anchor(source=DataSource.PARLEMENT_EUROPEEN, value=payload.identifier, url=page),
            ),
            birth_date=payload.bday,
            photo_url=MEP_PHOTO_URL.format(id=payload.identifier),
        )
        mandate = MandateClaim(
            mandate_type=MandateType.DEPUTE_EUROPEEN,
            institution=INSTITUTION,
            title="Député européen",
            natural_key=f"ep-{payload.identifier}",
            constituency="France",
            default_start_date=default_start,
            url=page,
        )
        return SourceRecord(
            source=DataSource.PARLEMENT_EUROPEEN,
            row=number,
            person=person,
            mandate=mandate,
            organization=_group_claim(payload.political_group),
        )

    return translate


def stage_meps(payload: object, *, default_start: date) -> StagedFeed:
    try:
        listing = MepListPayload.model_validate(payload)
    except ValidationError as exc:
        raise FeedFormatError(f"europarl: {describe_validation_error(exc)}") from exc
    return stage_rows(
        DataSource.PARLEMENT_EUROPEEN,
        listing.data,
        MepPayload,
        make_mep_translator(default_start=default_start),
    )
