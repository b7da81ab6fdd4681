"""Roll-call votes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from datetime import date

    from elusync.domain.model.enums import VotePosition


@dataclass(eq=False, kw_only=True)
class Scrutin:
    external_id: str
    chamber: str
    session: int
    number: int
    title: str
    id: UUID = field(default_factory=uuid4)
    voting_date: date | None = None
    votes_for: int = 0
    votes_against: int = 0
    votes_abstain: int = 0
    adopted: bool = False
    source_url: str | None = None
    votes_hash: str | None = None


@dataclass(eq=False, kw_only=True)
class Vote:
    scrutin_id: UUID
    person_id: UUID
    position: VotePosition
    id: UUID = field(default_factory=uuid4)
