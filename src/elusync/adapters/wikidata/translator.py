"""Translate Wikidata conviction bindings into judicial records."""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from elusync.adapters.feeds import (
    FeedFormatError,
    RowError,
    describe_validation_error,
    parse_iso_date,
    stage_rows,
)
from elusync.domain.candidates import Anchor, JudicialClaim, PersonCandidate, SourceRecord
from elusync.domain.model import DataSource, JudicialCategory, JudicialStatus
from elusync.domain.reconciliation.normalize import normalize_text, slugify

from .schema import ConvictionBinding, SparqlResponse

if TYPE_CHECKING:
    from datetime import date

    from elusync.domain.candidates import StagedFeed

    from .schema import BindingValue

log = getLogger(__name__)

FIFTH_REPUBLIC_START: Final = 1958
ENTITY_URL: Final = "https://www.wikidata.org/wiki/{id}"

CONVICTIONS_QUERY: Final = """
SELECT DISTINCT ?person ?personLabel ?crimeLabel ?convictionDate ?birthDate ?deathDate ?article
WHERE {{
  ?person wdt:P27 wd:Q142 .
  ?person wdt:P106 wd:Q82955 .
  ?person p:P1399 ?conviction .
  ?conviction ps:P1399 ?crime .
  OPTIONAL {{ ?conviction pq:P585 ?convictionDate }}
  OPTIONAL {{ ?person wdt:P569 ?birthDate }}
  OPTIONAL {{ ?person wdt:P570 ?deathDate }}
  OPTIONAL {{
    ?article schema:about ?person ;
             schema:isPartOf <https://fr.wikipedia.org/> .
  }}
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "fr,en" }}
}}
ORDER BY DESC(?convictionDate)
LIMIT {limit}
"""

# matched longest first, on accent-free lowercase labels
CRIME_KEYWORDS: Final[dict[str, JudicialCategory]] = {
    "agression sexuelle": JudicialCategory.AGRESSION_SEXUELLE,
    "sexual assault": JudicialCategory.AGRESSION_SEXUELLE,
    "viol": JudicialCategory.AGRESSION_SEXUELLE,
    "rape": JudicialCategory.AGRESSION_SEXUELLE,
    "harcelement": JudicialCategory.HARCELEMENT,
    "harassment": JudicialCategory.HARCELEMENT,
    "violences conjugales": JudicialCategory.VIOLENCE,
    "domestic violence": JudicialCategory.VIOLENCE,
    "coups et blessures": JudicialCategory.VIOLENCE,
    "assault": JudicialCategory.VIOLENCE,
    "violence": JudicialCategory.VIOLENCE,
    "corruption": JudicialCategory.CORRUPTION,
    "trafic d influence": JudicialCategory.TRAFIC_INFLUENCE,
    "prise illegale d interets": JudicialCategory.PRISE_ILLEGALE_INTERETS,
    "favoritisme": JudicialCategory.FAVORITISME,
    "detournement de fonds": JudicialCategory.DETOURNEMENT_FONDS_PUBLICS,
    "embezzlement": JudicialCategory.DETOURNEMENT_FONDS_PUBLICS,
    "fraude fiscale": JudicialCategory.FRAUDE_FISCALE,
    "tax evasion": JudicialCategory.FRAUDE_FISCALE,
    "tax fraud": JudicialCategory.FRAUDE_FISCALE,
    "blanchiment": JudicialCategory.BLANCHIMENT,
    "money laundering": JudicialCategory.BLANCHIMENT,
    "abus de biens sociaux": JudicialCategory.ABUS_BIENS_SOCIAUX,
    "emploi fictif": JudicialCategory.EMPLOI_FICTIF,
    "financement illegal": JudicialCategory.FINANCEMENT_ILLEGAL_PARTI,
    "illegal party financing": JudicialCategory.FINANCEMENT_ILLEGAL_PARTI,
    "diffamation": JudicialCategory.DIFFAMATION,
    "defamation": JudicialCategory.DIFFAMATION,
}

_ORDERED_KEYWORDS: Final = sorted(CRIME_KEYWORDS.items(), key=lambda item: -len(item[0]))
_UNRESOLVED_LABEL_RE: Final = re.compile(r"^Q\d+$")


def crime_category(label: str) -> JudicialCategory:
    normalized = normalize_text(label)
    for keyword, category in _ORDERED_KEYWORDS:
        if keyword in normalized:
            return category
    log.debug("Unmatched crime label %r", label)
    return JudicialCategory.AUTRE


def split_label(label: str) -> tuple[str, str]:
    """``"Jean-Marie Le Pen"`` -> ``("Jean-Marie Le", "Pen")``: the last word is the surname."""

    parts = label.split()
    if len(parts) == 1:
        return "", parts[0]
    return " ".join(parts[:-1]), parts[-1]


def _date(value: BindingValue | None) -> date | None:
    return parse_iso_date(value.value) if value is not None else None


def _before_fifth_republic(value: date | None) -> bool:
    return value is not None and value.year < FIFTH_REPUBLIC_START


def translate_conviction(binding: ConvictionBinding, number: int) -> SourceRecord | None:
    label = binding.person_label.value.strip()
    if not label:
        raise RowError("empty person label")
    if _UNRESOLVED_LABEL_RE.match(label):
        return None
    conviction_date = _date(binding.conviction_date)
    if _before_fifth_republic(_date(binding.death_date)) or _before_fifth_republic(conviction_date):
        return None
    crime = binding.crime_label.value.strip()
    if not crime:
        raise RowError("empty crime label")

    first_name, last_name = split_label(label)
    entity = binding.entity_id
    page = ENTITY_URL.format(id=entity)
    person = PersonCandidate(
        first_name=first_name,
        last_name=last_name,
        anchors=(Anchor(source=DataSource.WIKIDATA, value=entity, url=page),),
        birth_date=_date(binding.birth_date),
    )
    judicial = JudicialClaim(
        title=crime[:1].upper() + crime[1:],
        category=crime_category(crime),
        status=JudicialStatus.CONDAMNATION_DEFINITIVE,
        natural_key=slugify(first_name, last_name, crime),
        verdict_date=conviction_date,
        source_url=binding.article.value if binding.article else page,
    )
    return SourceRecord(source=DataSource.WIKIDATA, row=number, person=person, judicial=judicial)


def stage_convictions(payload: object) -> StagedFeed:
    try:
        response = SparqlResponse.model_validate(payload)
    except ValidationError as exc:
        raise FeedFormatError(f"wikidata: {describe_validation_error(exc)}") from exc
    return stage_rows(
        DataSource.WIKIDATA, response.results.bindings, ConvictionBinding, translate_conviction
    )
