"""Identity resolution against an in-memory candidate index.

The index is built once per run from the store (persons, identity anchors and
the departments of their open mandates) and updated as the run creates people,
so resolving tens of thousands of rows never issues a query per row.

Resolution order, first hit wins:

1. identity anchor ``(source, value)``
2. slug of first + last name, when no homonym competes with it
3. case/accent-insensitive first + last name
4. among several homonyms: birth date within one day, then a shared
   department, then the oldest candidate (logged as low confidence)

Homonyms whose known birth date contradicts the record's are excluded before
steps 2-4: a different birth date means a different person.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .contracts import IdentityResolution, MatchKind
from .normalize import name_key, person_slug

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date
    from uuid import UUID

    from elusync.domain.candidates import Anchor, PersonCandidate
    from elusync.domain.model import DataSource, ExternalIdentifier, Person

log = getLogger(__name__)

BIRTH_DATE_TOLERANCE: Final[timedelta] = timedelta(days=1)


@dataclass(slots=True, kw_only=True)
class IndexedPerson:
    person_id: UUID
    first_name: str
    last_name: str
    slug: str
    rank: int
    birth_date: date | None = None
    departments: set[str] = field(default_factory=set)
    provisional: bool = False

    @property
    def key(self) -> str:
        return name_key(self.first_name, self.last_name)


class CandidateIndex:
    """Per-run lookup tables keyed by anchor, slug and normalised name."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, IndexedPerson] = {}
        self._by_name: dict[str, list[IndexedPerson]] = {}
        self._by_slug: dict[str, UUID] = {}
        self._by_anchor: dict[tuple[DataSource, str], UUID] = {}
        self._next_rank = 0

    @classmethod
    def build(
        cls,
        persons: Iterable[Person],
        anchors: Iterable[ExternalIdentifier] = (),
        departments: Iterable[tuple[UUID, str]] = (),
    ) -> CandidateIndex:
        index = cls()
        ordered = sorted(persons, key=lambda person: (person.created_at, str(person.id)))
        for person in ordered:
            index.add(
                person_id=person.id,
                first_name=person.first_name,
                last_name=person.last_name,
                slug=person.slug,
                birth_date=person.birth_date,
            )
        for anchor in anchors:
            index.bind_anchor(anchor.source, anchor.value, anchor.owner_id)
        for person_id, department in departments:
            index.note_department(person_id, department)
        log.debug(
            "Candidate index built: %s persons, %s anchors", len(index._by_id), len(index._by_anchor)
        )
        return index

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, person_id: object) -> bool:
        return person_id in self._by_id

    def add(
        self,
        *,
        person_id: UUID,
        first_name: str,
        last_name: str,
        slug: str,
        birth_date: date | None = None,
        provisional: bool = False,
    ) -> IndexedPerson:
        entry = IndexedPerson(
            person_id=person_id,
            first_name=first_name,
            last_name=last_name,
            slug=slug,
            birth_date=birth_date,
            rank=self._next_rank,
            provisional=provisional,
        )
        self._next_rank += 1
        self._by_id[person_id] = entry
        self._by_name.setdefault(entry.key, []).append(entry)
        self._by_slug.setdefault(slug, person_id)
        return entry

    def get(self, person_id: UUID) -> IndexedPerson | None:
        return self._by_id.get(person_id)

    def bind_anchor(self, source: DataSource, value: str, person_id: UUID) -> None:
        self._by_anchor.setdefault((source, value), person_id)

    def note_department(self, person_id: UUID, department: str | None) -> None:
        entry = self._by_id.get(person_id)
        if entry is not None and department:
            entry.departments.add(department)

    def note_birth_date(self, person_id: UUID, birth_date: date | None) -> None:
        entry = self._by_id.get(person_id)
        if entry is not None and birth_date is not None:
            entry.birth_date = birth_date

    def lookup_anchor(self, source: DataSource, value: str) -> UUID | None:
        return self._by_anchor.get((source, value))

    def lookup_slug(self, slug: str) -> IndexedPerson | None:
        person_id = self._by_slug.get(slug)
        return None if person_id is None else self._by_id.get(person_id)

    def homonyms(self, first_name: str, last_name: str) -> list[IndexedPerson]:
        return list(self._by_name.get(name_key(first_name, last_name), ()))

    def unique_slug(self, base: str) -> str:
        if base not in self._by_slug:
            return base
        suffix = 2
        while f"{base}-{suffix}" in self._by_slug:
            suffix += 1
        return f"{base}-{suffix}"


def birth_dates_match(left: date | None, right: date | None) -> bool:
    if left is None or right is None:
        return False
    return abs(left - right) <= BIRTH_DATE_TOLERANCE


def _contradicts(entry: IndexedPerson, birth_date: date | None) -> bool:
    if entry.birth_date is None or birth_date is None:
        return False
    return not birth_dates_match(entry.birth_date, birth_date)


def resolve_person(
    candidate: PersonCandidate,
    index: CandidateIndex,
    *,
    anchors: Iterable[Anchor] | None = None,
) -> IdentityResolution:
    """Resolve ``candidate`` to an indexed person, or report that one must be created."""

    for anchor in candidate.anchors if anchors is None else anchors:
        person_id = index.lookup_anchor(anchor.source, anchor.value)
        if person_id is not None:
            return IdentityResolution.resolved(person_id, MatchKind.EXTERNAL_ID, "anchor_match")

    homonyms = index.homonyms(candidate.first_name, candidate.last_name)
    viable = [entry for entry in homonyms if not _contradicts(entry, candidate.birth_date)]

    slug_entry = index.lookup_slug(person_slug(candidate.first_name, candidate.last_name))
    if slug_entry is not None and not _contradicts(slug_entry, candidate.birth_date):
        rivals = [entry for entry in viable if entry.person_id != slug_entry.person_id]
        if not rivals:
            return IdentityResolution.resolved(slug_entry.person_id, MatchKind.SLUG, "slug_match")

    if not viable:
        reason = "birth_date_conflict" if homonyms else "no_match"
        return IdentityResolution.new(reason, candidate_count=len(homonyms))

    if len(viable) == 1:
        return IdentityResolution.resolved(viable[0].person_id, MatchKind.NAME, "name_match")

    return _disambiguate(candidate, sorted(viable, key=lambda entry: entry.rank))


def _disambiguate(
    candidate: PersonCandidate,
    viable: list[IndexedPerson],
) -> IdentityResolution:
    count = len(viable)

    by_birth = [entry for entry in viable if birth_dates_match(entry.birth_date, candidate.birth_date)]
    if by_birth:
        return IdentityResolution.resolved(
            by_birth[0].person_id, MatchKind.BIRTH_DATE, "birth_date_match", candidate_count=count
        )

    if candidate.department:
        by_department = [entry for entry in viable if candidate.department in entry.departments]
        if by_department:
            return IdentityResolution.resolved(
                by_department[0].person_id,
                MatchKind.DEPARTMENT,
                "department_match",
                candidate_count=count,
            )

    chosen = viable[0]
    log.info(
        "Ambiguous match for %s: %s homonyms, picked oldest %s",
        candidate.label,
        count,
        chosen.person_id,
    )
    return IdentityResolution.resolved(
        chosen.person_id, MatchKind.FALLBACK, "ambiguous_first_candidate", candidate_count=count
    )
