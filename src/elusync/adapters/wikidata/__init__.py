"""Wikidata adapter (criminal convictions of French politicians)."""

from __future__ import annotations

from .fetcher import ConvictionsFetcher, raise_on_query_timeout
from .schema import ConvictionBinding
from .translator import crime_category, split_label, stage_convictions, translate_conviction

__all__ = [
    "ConvictionBinding",
    "ConvictionsFetcher",
    "crime_category",
    "raise_on_query_timeout",
    "split_label",
    "stage_convictions",
    "translate_conviction",
]
