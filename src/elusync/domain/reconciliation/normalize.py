"""Text normalisation used for identity keys and slugs."""

from __future__ import annotations

import re
import unicodedata

_SEPARATORS = re.compile(r"[\s\-‐‑–—'’_.]+")
_NON_SLUG = re.compile(r"[^a-z0-9]+")


def strip_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def normalize_text(value: str | None) -> str:
    """Lowercase, accent-free, with dashes/apostrophes folded into single spaces."""

    if not value:
        return ""
    folded = strip_accents(value).casefold()
    return _SEPARATORS.sub(" ", folded).strip()


def name_key(first_name: str, last_name: str) -> str:
    return f"{normalize_text(first_name)}|{normalize_text(last_name)}"


def slugify(*parts: str) -> str:
    joined = " ".join(part for part in parts if part)
    return _NON_SLUG.sub("-", normalize_text(joined)).strip("-")


def person_slug(first_name: str, last_name: str) -> str:
    return slugify(first_name, last_name)


def normalize_name(value: str) -> str:
    """Title-case a name coming from an all-caps register ("DE LA TOUR" -> "De La Tour")."""

    value = " ".join(value.split())
    if not value:
        return value
    if value != value.upper() and value != value.lower():
        return value
    return "-".join(
        " ".join(word.capitalize() for word in chunk.split(" ")) for chunk in value.split("-")
    )
