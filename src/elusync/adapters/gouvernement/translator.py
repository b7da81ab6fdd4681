"""Translate current government members into source records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from elusync.adapters.feeds import RowError, parse_any_date, read_csv, stage_rows
from elusync.domain.candidates import Anchor, MandateClaim, PersonCandidate, SourceRecord
from elusync.domain.model import DataSource, MandateType
from elusync.domain.reconciliation.normalize import normalize_name, person_slug

from .schema import REQUIRED_COLUMNS, GovernmentMemberRow

if TYPE_CHECKING:
    from elusync.domain.candidates import StagedFeed

INSTITUTION: Final = "Gouvernement"
COMPOSITION_URL: Final = "https://www.info.gouv.fr/composition-du-gouvernement"

FUNCTION_CODES: Final[dict[str, MandateType]] = {
    "PM": MandateType.PREMIER_MINISTRE,
    "PE": MandateType.PREMIER_MINISTRE,
    "ME": MandateType.MINISTRE,
    "M": MandateType.MINISTRE,
    "MD": MandateType.MINISTRE_DELEGUE,
    "SE": MandateType.SECRETAIRE_ETAT,
}


def mandate_type_for(code: str | None) -> MandateType:
    return FUNCTION_CODES.get((code or "").strip().upper(), MandateType.MINISTRE)


def translate_member(row: GovernmentMemberRow, number: int) -> SourceRecord | None:
    if not row.is_current:
        return None
    start = parse_any_date(row.date_debut_fonction)
    if start is None:
        raise RowError(f"unparseable start date {row.date_debut_fonction!r}")

    first_name = normalize_name(row.prenom)
    last_name = normalize_name(row.nom)
    key = f"gouv-{row.id}-{person_slug(first_name, last_name)}"
    person = PersonCandidate(
        first_name=first_name,
        last_name=last_name,
        anchors=(Anchor(source=DataSource.GOUVERNEMENT, value=key, url=COMPOSITION_URL),),
    )
    mandate = MandateClaim(
        mandate_type=mandate_type_for(row.code_fonction),
        institution=INSTITUTION,
        title=row.fonction,
        natural_key=key,
        start_date=start,
        url=COMPOSITION_URL,
    )
    return SourceRecord(source=DataSource.GOUVERNEMENT, row=number, person=person, mandate=mandate)


def stage_government(text: str) -> StagedFeed:
    rows = read_csv(text, delimiter=";", required=REQUIRED_COLUMNS)
    return stage_rows(DataSource.GOUVERNEMENT, rows, GovernmentMemberRow, translate_member)
