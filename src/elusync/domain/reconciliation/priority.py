"""Per-field source priority tables and the overwrite rule."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from elusync.domain.model import DataSource

if TYPE_CHECKING:
    from collections.abc import Mapping

    from elusync.domain.model import FieldSourcesMixin


class FieldCategory(StrEnum):
    PORTRAIT = "portrait"
    CIVIL_STATUS = "civil_status"
    ORGANIZATION = "organization"


PRIORITY_TABLES: Final[Mapping[FieldCategory, Mapping[DataSource, int]]] = {
    FieldCategory.PORTRAIT: {
        DataSource.ASSEMBLEE_NATIONALE: 10,
        DataSource.SENAT: 10,
        DataSource.PARLEMENT_EUROPEEN: 10,
        DataSource.GOUVERNEMENT: 9,
        DataSource.HATVP: 8,
        DataSource.NOSDEPUTES: 5,
        DataSource.NOSSENATEURS: 5,
        DataSource.WIKIDATA: 3,
        DataSource.MANUAL: 1,
    },
    FieldCategory.CIVIL_STATUS: {
        DataSource.RNE: 10,
        DataSource.ASSEMBLEE_NATIONALE: 9,
        DataSource.SENAT: 9,
        DataSource.GOUVERNEMENT: 8,
        DataSource.PARLEMENT_EUROPEEN: 8,
        DataSource.HATVP: 6,
        DataSource.NOSDEPUTES: 5,
        DataSource.NOSSENATEURS: 5,
        DataSource.WIKIDATA: 3,
        DataSource.MANUAL: 1,
    },
    FieldCategory.ORGANIZATION: {
        DataSource.ASSEMBLEE_NATIONALE: 10,
        DataSource.SENAT: 10,
        DataSource.PARLEMENT_EUROPEEN: 10,
        DataSource.GOUVERNEMENT: 8,
        DataSource.WIKIDATA: 3,
        DataSource.MANUAL: 1,
    },
}

PERSON_FIELDS: Final[Mapping[str, FieldCategory]] = {
    "photo_url": FieldCategory.PORTRAIT,
    "birth_date": FieldCategory.CIVIL_STATUS,
    "birth_place": FieldCategory.CIVIL_STATUS,
    "gender": FieldCategory.CIVIL_STATUS,
}

ORGANIZATION_FIELDS: Final[Mapping[str, FieldCategory]] = {
    "name": FieldCategory.ORGANIZATION,
    "color": FieldCategory.ORGANIZATION,
}


def source_priority(category: FieldCategory, source: DataSource | None) -> int:
    """Rank of ``source`` for ``category``; unknown or missing sources rank 0."""

    if source is None:
        return 0
    return PRIORITY_TABLES[category].get(source, 0)


def _is_empty(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def should_overwrite(
    category: FieldCategory,
    *,
    current_value: object,
    current_source: DataSource | None,
    candidate_value: object,
    candidate_source: DataSource,
) -> bool:
    """Overwrite iff the slot is empty or the candidate ranks at least as high.

    Equal rank lets the latest write win, which keeps re-runs of the same
    source idempotent.
    """

    if _is_empty(candidate_value):
        return False
    if _is_empty(current_value):
        return True
    return source_priority(category, candidate_source) >= source_priority(
        category, current_source
    )


@dataclass(frozen=True, slots=True)
class FieldChange:
    field: str
    old: object
    new: object
    source: DataSource


def merge_fields(
    entity: FieldSourcesMixin,
    values: Mapping[str, object],
    *,
    source: DataSource,
    categories: Mapping[str, FieldCategory],
) -> list[FieldChange]:
    """Apply ``values`` to ``entity`` field by field under the priority policy.

    Each field is judged on its own provenance. An identical value only moves the
    provenance tag when the new source ranks strictly higher, so two sources that
    agree never flip the tag back and forth.
    """

    changes: list[FieldChange] = []
    for name, candidate in values.items():
        category = categories[name]
        if _is_empty(candidate):
            continue
        current = getattr(entity, name)
        current_source = entity.source_of(name)
        if current == candidate:
            if source_priority(category, source) > source_priority(category, current_source):
                entity.record_source(name, source)
            continue
        if not should_overwrite(
            category,
            current_value=current,
            current_source=current_source,
            candidate_value=candidate,
            candidate_source=source,
        ):
            continue
        setattr(entity, name, candidate)
        entity.record_source(name, source)
        changes.append(FieldChange(name, current, candidate, source))
    return changes
