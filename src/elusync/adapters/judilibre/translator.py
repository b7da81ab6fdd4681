"""Translate Cour de cassation decisions into judicial records of known people.

The Cour de cassation rules on appeals, not on the facts: a rejected appeal
makes the conviction below final, a cassation sends the case back. Only
rejected appeals whose text speaks of a sentence become records.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from logging import getLogger
from typing import TYPE_CHECKING, Final

from elusync.adapters.feeds import parse_iso_date
from elusync.adapters.wikidata import crime_category
from elusync.domain.candidates import JudicialClaim, PersonCandidate, SourceRecord
from elusync.domain.model import DataSource, JudicialCategory, JudicialStatus
from elusync.domain.reconciliation.normalize import normalize_text

if TYPE_CHECKING:
    from .schema import Decision, DecisionSummary

log = getLogger(__name__)

DECISION_URL: Final = "https://www.courdecassation.fr/decision/{id}"
UNVERIFIED_PREFIX: Final = "[À VÉRIFIER] "
MIN_AGE_AT_DECISION: Final = 18

# normalized solutions meaning the appeal failed and the ruling below stands
REJECTION_MARKERS: Final = ("rejet", "irrecevabilite", "non admission", "decheance")
CONVICTION_MARKERS: Final = (
    "condamne",
    "condamnation",
    "coupable",
    "peine",
    "emprisonnement",
    "prison",
    "amende",
    "reclusion",
    "ineligibilite",
    "interdiction",
)
# titles that put a bare surname in a party's position
_PARTY_TITLES: Final = (
    r"m|mme|mr|sieur|dame|prevenue?|condamnee?|appelante?|demandeur|defendeur"
)

CATEGORY_LABELS: Final[dict[JudicialCategory, str]] = {
    JudicialCategory.CORRUPTION: "Corruption",
    JudicialCategory.TRAFIC_INFLUENCE: "Trafic d'influence",
    JudicialCategory.PRISE_ILLEGALE_INTERETS: "Prise illégale d'intérêts",
    JudicialCategory.FAVORITISME: "Favoritisme",
    JudicialCategory.DETOURNEMENT_FONDS_PUBLICS: "Détournement de fonds publics",
    JudicialCategory.FRAUDE_FISCALE: "Fraude fiscale",
    JudicialCategory.BLANCHIMENT: "Blanchiment",
    JudicialCategory.ABUS_BIENS_SOCIAUX: "Abus de biens sociaux",
    JudicialCategory.EMPLOI_FICTIF: "Emploi fictif",
    JudicialCategory.FINANCEMENT_ILLEGAL_PARTI: "Financement illégal de parti",
    JudicialCategory.VIOLENCE: "Violence",
    JudicialCategory.AGRESSION_SEXUELLE: "Agression sexuelle",
    JudicialCategory.HARCELEMENT: "Harcèlement",
    JudicialCategory.DIFFAMATION: "Diffamation",
}


@dataclass(frozen=True, slots=True)
class SearchTarget:
    """A person already in the graph, searched by full name."""

    first_name: str
    last_name: str
    birth_date: date | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


def refers_to(text: str | None, target: SearchTarget) -> bool:
    """Whether ``text`` names the person rather than a word that happens to be their surname.

    The full name, or first and last name anywhere, or the surname right after a
    party title ("M. Dupont", "prévenu Dupont") all count.
    """

    haystack = normalize_text(text)
    first = normalize_text(target.first_name)
    last = normalize_text(target.last_name)
    if not haystack or not last:
        return False
    if normalize_text(target.full_name) in haystack:
        return True
    if first and re.search(rf"\b{re.escape(first)}\b", haystack) and re.search(
        rf"\b{re.escape(last)}\b", haystack
    ):
        return True
    return re.search(rf"\b(?:{_PARTY_TITLES})\s+{re.escape(last)}\b", haystack) is not None


def _age_on(birth_date: date, day: date) -> int:
    before_birthday = (day.month, day.day) < (birth_date.month, birth_date.day)
    return day.year - birth_date.year - before_birthday


def is_relevant(decision: DecisionSummary, target: SearchTarget) -> bool:
    """Drop homonyms: too young at the decision date, or not named in the summary."""

    decided = parse_iso_date(decision.decision_date)
    if target.birth_date is not None and decided is not None:
        if _age_on(target.birth_date, decided) < MIN_AGE_AT_DECISION:
            return False
    return refers_to(decision.summary, target)


def is_conviction(decision: DecisionSummary | Decision) -> bool:
    solution = normalize_text(decision.solution)
    if "cassation" in solution:
        return False
    if not any(marker in solution for marker in REJECTION_MARKERS):
        return False
    text = normalize_text(f"{getattr(decision, 'text', '')} {decision.summary or ''}")
    return any(marker in text for marker in CONVICTION_MARKERS)


def decision_category(decision: DecisionSummary) -> JudicialCategory:
    return crime_category(" ".join([*decision.themes, decision.summary or ""]))


def decision_title(decision: DecisionSummary) -> str:
    category = decision_category(decision)
    if category in CATEGORY_LABELS:
        return CATEGORY_LABELS[category]
    if decision.themes:
        theme = decision.themes[0].strip()
        return theme[:1].upper() + theme[1:]
    return f"Décision Cour de cassation ({decision.solution or 'inconnue'})"


def natural_key(decision: DecisionSummary) -> str:
    """The ECLI when published, else the Judilibre id."""
    return decision.ecli or f"judilibre-{decision.id}"


def translate_decision(
    decision: DecisionSummary, target: SearchTarget, number: int
) -> SourceRecord | None:
    if not is_conviction(decision):
        log.debug("%s: %s is procedural, skipped", target.full_name, natural_key(decision))
        return None
    judicial = JudicialClaim(
        title=UNVERIFIED_PREFIX + decision_title(decision),
        category=decision_category(decision),
        status=JudicialStatus.CONDAMNATION_DEFINITIVE,
        natural_key=natural_key(decision),
        verdict_date=parse_iso_date(decision.decision_date),
        source_url=DECISION_URL.format(id=decision.id),
    )
    person = PersonCandidate(
        first_name=target.first_name,
        last_name=target.last_name,
        birth_date=target.birth_date,
    )
    return SourceRecord(source=DataSource.JUDILIBRE, row=number, person=person, judicial=judicial)
