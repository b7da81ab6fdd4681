"""Translate RNE mayor rows into source records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from elusync.adapters.feeds import read_csv, stage_rows
from elusync.domain.candidates import Anchor, MandateClaim, PersonCandidate, SourceRecord
from elusync.domain.model import DataSource, MandateType
from elusync.domain.reconciliation.normalize import normalize_name, person_slug

from .schema import REQUIRED_COLUMNS, MayorRow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date

    from elusync.domain.candidates import StagedFeed

INSTITUTION: Final = "Commune"
_INSEE_LENGTH: Final = 5
_OVERSEAS_DEPARTMENT_LENGTH: Final = 3


def insee_code(department: str, commune: str) -> str:
    """Five-character INSEE code of a commune.

    The RNE commune column usually already holds the full code, sometimes with a
    prefix from a neighbouring department, so a 5-character value is kept as is.
    """

    department = department.strip()
    commune = commune.strip()
    if len(commune) == _INSEE_LENGTH:
        return commune
    if len(department) == _OVERSEAS_DEPARTMENT_LENGTH:
        return department + commune.zfill(_INSEE_LENGTH - _OVERSEAS_DEPARTMENT_LENGTH)
    return department.zfill(2) + commune.zfill(_INSEE_LENGTH - 2)


def _gender(code: str | None) -> str | None:
    return code if code in {"M", "F"} else None


def make_mayor_translator(*, default_start: date) -> Callable[[MayorRow, int], SourceRecord]:
    def translate(row: MayorRow, number: int) -> SourceRecord:
        first_name = normalize_name(row.first_name)
        last_name = normalize_name(row.last_name)
        code = insee_code(row.department_code, row.commune_code)
        commune = row.commune_name or code
        person = PersonCandidate(
            first_name=first_name,
            last_name=last_name,
            anchors=(
                Anchor(source=DataSource.RNE, value=f"{code}-{person_slug(first_name, last_name)}"),
            ),
            birth_date=row.birth_date,
            gender=_gender(row.sex),
            department=row.department_code,
        )
        mandate = MandateClaim(
            mandate_type=MandateType.MAIRE,
            institution=INSTITUTION,
            title=f"Maire de {commune}",
            natural_key=code,
            constituency=f"{commune} ({code})",
            department_code=row.department_code,
            locality_code=code,
            locality_name=row.commune_name,
            start_date=row.function_start or row.mandate_start,
            default_start_date=default_start,
        )
        return SourceRecord(source=DataSource.RNE, row=number, person=person, mandate=mandate)

    return translate


def stage_mayors(text: str, *, default_start: date) -> StagedFeed:
    rows = read_csv(text, delimiter=";", required=REQUIRED_COLUMNS)
    return stage_rows(
        DataSource.RNE, rows, MayorRow, make_mayor_translator(default_start=default_start)
    )
