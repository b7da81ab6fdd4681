"""Shared fixtures for senat.fr adapter tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

FIXTURES = Path("tests/data/senat")


@pytest.fixture
def senators_payload() -> list[dict[str, object]]:
    return json.loads((FIXTURES / "senateurs.json").read_text(encoding="utf-8"))


@pytest.fixture
def session_index() -> str:
    return (FIXTURES / "scr2024.html").read_text(encoding="utf-8")


@pytest.fixture
def scrutin_page() -> str:
    return (FIXTURES / "scr2024-1.html").read_text(encoding="utf-8")


@pytest.fixture
def ballots_payload() -> dict[str, object]:
    return json.loads((FIXTURES / "scr2024-1.json").read_text(encoding="utf-8"))
