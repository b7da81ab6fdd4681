"""Translate deputies CSV rows into source records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from elusync.adapters.feeds import PartyMapping, read_csv, stage_rows
from elusync.domain.candidates import (
    Anchor,
    MandateClaim,
    OrganizationClaim,
    PersonCandidate,
    SourceRecord,
)
from elusync.domain.model import DataSource, MandateType
from elusync.domain.reconciliation.normalize import normalize_name, person_slug

from .schema import REQUIRED_COLUMNS, DeputyRow

if TYPE_CHECKING:
    from elusync.domain.candidates import StagedFeed

INSTITUTION: Final = "Assemblée nationale"
DEPUTY_PAGE_URL: Final = "https://www.assemblee-nationale.fr/dyn/deputes/{id}"
PHOTO_URL: Final = "https://www2.assemblee-nationale.fr/static/tribun/{legislature}/photos/{number}.jpg"
UNKNOWN_GROUP_COLOR: Final = "#888888"

PARTY_MAPPINGS: Final[dict[str, PartyMapping]] = {
    "RN": PartyMapping("RN", "Rassemblement National", "#0D378A"),
    "LFI-NFP": PartyMapping("LFI", "La France Insoumise - Nouveau Front Populaire", "#CC2443"),
    "SOC": PartyMapping("SOC", "Socialistes et apparentés", "#FF8080"),
    "EPR": PartyMapping("EPR", "Ensemble pour la République", "#FFEB00"),
    "DR": PartyMapping("DR", "Droite Républicaine", "#0066CC"),
    "DEM": PartyMapping("DEM", "Les Démocrates", "#FF9900"),
    "HOR": PartyMapping("HOR", "Horizons & Indépendants", "#0001AA"),
    "LIOT": PartyMapping("LIOT", "Libertés, Indépendants, Outre-mer et Territoires", "#AADDFF"),
    "ECOS": PartyMapping("ECOS", "Écologiste et Social", "#00C000"),
    "GDR": PartyMapping("GDR", "Gauche Démocrate et Républicaine", "#DD0000"),
    "UDDPLR": PartyMapping("UDR", "Union des Droites pour la République", "#8040C0"),
    "NI": PartyMapping("NI", "Non-inscrits", "#AAAAAA"),
}


def _gender(civ: str | None) -> str | None:
    if civ is None:
        return None
    if civ.lower().startswith("mme"):
        return "F"
    if civ.lower().startswith("m"):
        return "M"
    return None


def deputy_title(circo: int | None, civ: str | None) -> str:
    noun = "Députée" if _gender(civ) == "F" else "Député"
    if circo is None:
        return noun
    ordinal = "1re" if circo == 1 else f"{circo}e"
    return f"{noun} de la {ordinal} circonscription"


def _group_claim(row: DeputyRow) -> OrganizationClaim | None:
    if row.groupe_abrev is None:
        return None
    mapping = PARTY_MAPPINGS.get(row.groupe_abrev)
    if mapping is None:
        mapping = PartyMapping(
            row.groupe_abrev, row.groupe or row.groupe_abrev, UNKNOWN_GROUP_COLOR
        )
    return OrganizationClaim(
        source=DataSource.ASSEMBLEE_NATIONALE,
        code=row.groupe_abrev,
        name=mapping.full_name,
        short_name=mapping.short_name,
        color=mapping.color,
        start_date=row.date_prise_fonction,
    )


def translate_deputy(row: DeputyRow, number: int) -> SourceRecord:
    first_name = normalize_name(row.prenom)
    last_name = normalize_name(row.nom)
    slug = person_slug(first_name, last_name)
    official_number = row.id.removeprefix("PA")

    person = PersonCandidate(
        first_name=first_name,
        last_name=last_name,
        anchors=(
            Anchor(
                source=DataSource.ASSEMBLEE_NATIONALE,
                value=row.id,
                url=DEPUTY_PAGE_URL.format(id=row.id),
            ),
            Anchor(source=DataSource.NOSDEPUTES, value=slug),
        ),
        birth_date=row.naissance,
        birth_place=row.ville_naissance,
        gender=_gender(row.civ),
        photo_url=PHOTO_URL.format(legislature=row.legislature, number=official_number),
        department=row.departement_code,
    )
    constituency = None
    if row.departement_nom is not None:
        constituency = (
            row.departement_nom if row.circo is None else f"{row.departement_nom} ({row.circo})"
        )
    mandate = MandateClaim(
        mandate_type=MandateType.DEPUTE,
        institution=INSTITUTION,
        title=deputy_title(row.circo, row.civ),
        natural_key=f"{row.id}-leg{row.legislature}",
        constituency=constituency,
        department_code=row.departement_code,
        start_date=row.date_prise_fonction,
        url=DEPUTY_PAGE_URL.format(id=row.id),
    )
    return SourceRecord(
        source=DataSource.ASSEMBLEE_NATIONALE,
        row=number,
        person=person,
        mandate=mandate,
        organization=_group_claim(row),
    )


def stage_deputies(text: str) -> StagedFeed:
    rows = read_csv(text, delimiter=",", required=REQUIRED_COLUMNS)
    return stage_rows(DataSource.ASSEMBLEE_NATIONALE, rows, DeputyRow, translate_deputy)
