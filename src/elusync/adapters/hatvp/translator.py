"""Translate HATVP declaration rows into enrichment-only source records."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from elusync.adapters.feeds import RowError, read_csv, stage_rows
from elusync.domain.candidates import Anchor, DeclarationClaim, PersonCandidate, SourceRecord
from elusync.domain.model import DataSource, DeclarationType
from elusync.domain.reconciliation.normalize import normalize_name, slugify

from .schema import REQUIRED_COLUMNS, DeclarationRow

if TYPE_CHECKING:
    from elusync.domain.candidates import StagedFeed

HATVP_SITE: Final = "https://www.hatvp.fr"
DOSSIER_FILES_URL: Final = "https://www.hatvp.fr/livraison/dossiers/{name}"
RELEVANT_MANDATES: Final = frozenset({"depute", "senateur", "gouvernement", "europe"})

DOCUMENT_TYPES: Final[dict[str, DeclarationType]] = {
    "di": DeclarationType.INTERETS,
    "dim": DeclarationType.INTERETS,
    "dia": DeclarationType.INTERETS,
    "diam": DeclarationType.INTERETS,
    "dsp": DeclarationType.PATRIMOINE_DEBUT_MANDAT,
    "dspm": DeclarationType.PATRIMOINE_MODIFICATION,
    "dspfm": DeclarationType.PATRIMOINE_FIN_MANDAT,
}

_SENATE_SUFFIX_RE: Final = re.compile(r"[A-Za-z]$")


def declaration_type(code: str | None) -> DeclarationType:
    return DOCUMENT_TYPES.get((code or "").strip().lower(), DeclarationType.INTERETS)


def _absolute(url: str) -> str:
    return url if url.startswith("http") else f"{HATVP_SITE}{url}"


def _anchors(row: DeclarationRow) -> tuple[Anchor, ...]:
    anchors: list[Anchor] = []
    if row.id_origine:
        if row.type_mandat == "depute":
            anchors.append(Anchor(source=DataSource.ASSEMBLEE_NATIONALE, value=f"PA{row.id_origine}"))
        elif row.type_mandat == "senateur":
            anchors.append(
                Anchor(source=DataSource.SENAT, value=_SENATE_SUFFIX_RE.sub("", row.id_origine))
            )
    if row.url_dossier:
        anchors.append(
            Anchor(
                source=DataSource.HATVP,
                value=row.url_dossier.strip("/"),
                url=_absolute(row.url_dossier),
            )
        )
    return tuple(anchors)


def translate_declaration(row: DeclarationRow, number: int) -> SourceRecord | None:
    if row.type_mandat not in RELEVANT_MANDATES:
        return None
    if row.prenom is None or row.nom is None:
        raise RowError("missing name")
    first_name = normalize_name(row.prenom)
    last_name = normalize_name(row.nom)
    kind = declaration_type(row.type_document)
    natural_key = row.nom_fichier or slugify(
        first_name, last_name, row.type_document or kind, str(row.date_depot or "")
    )
    person = PersonCandidate(
        first_name=first_name,
        last_name=last_name,
        anchors=_anchors(row),
        photo_url=_absolute(row.url_photo) if row.url_photo else None,
        department=row.departement,
    )
    declaration = DeclarationClaim(
        declaration_type=kind,
        natural_key=natural_key,
        deposit_date=row.date_depot,
        published_on=row.date_publication,
        url=DOSSIER_FILES_URL.format(name=row.nom_fichier) if row.nom_fichier else None,
    )
    return SourceRecord(
        source=DataSource.HATVP, row=number, person=person, declaration=declaration
    )


def stage_declarations(text: str) -> StagedFeed:
    rows = read_csv(text, delimiter=";", required=REQUIRED_COLUMNS)
    return stage_rows(DataSource.HATVP, rows, DeclarationRow, translate_declaration)
