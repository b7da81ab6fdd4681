"""Pydantic models for Wikidata SPARQL JSON results."""

from __future__ import annotations

from pydantic import Field

from elusync.adapters.feeds import FeedModel


class BindingValue(FeedModel):
    value: str


class ConvictionBinding(FeedModel):
    person: BindingValue
    person_label: BindingValue = Field(alias="personLabel")
    crime_label: BindingValue = Field(alias="crimeLabel")
    conviction_date: BindingValue | None = Field(default=None, alias="convictionDate")
    birth_date: BindingValue | None = Field(default=None, alias="birthDate")
    death_date: BindingValue | None = Field(default=None, alias="deathDate")
    article: BindingValue | None = None

    @property
    def entity_id(self) -> str:
        return self.person.value.rstrip("/").rsplit("/", 1)[-1]


class SparqlResults(FeedModel):
    bindings: list[dict[str, object]] = Field(default_factory=list)


class SparqlResponse(FeedModel):
    results: SparqlResults
