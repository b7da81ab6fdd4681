"""HATVP adapter (asset and interest declarations)."""

from __future__ import annotations

from .fetcher import DeclarationsFetcher
from .schema import DeclarationRow
from .translator import declaration_type, stage_declarations, translate_declaration

__all__ = [
    "DeclarationRow",
    "DeclarationsFetcher",
    "declaration_type",
    "stage_declarations",
    "translate_declaration",
]
