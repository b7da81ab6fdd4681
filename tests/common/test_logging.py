from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from elusync.common.logging import CHATTY_LOGGERS, configure_logging, resolve_level


@pytest.fixture
def chatty_levels() -> Iterator[None]:
    saved = {name: logging.getLogger(name).level for name in CHATTY_LOGGERS}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


@pytest.mark.parametrize(
    ("env_value", "verbose", "expected"),
    [
        (None, False, logging.INFO),
        (None, True, logging.DEBUG),
        ("error", True, logging.ERROR),
        ("nonsense", False, logging.INFO),
    ],
)
def test_resolve_level(
    monkeypatch: pytest.MonkeyPatch, env_value: str | None, *, verbose: bool, expected: int
) -> None:
    if env_value is None:
        monkeypatch.delenv("ELUSYNC_LOG_LEVEL", raising=False)
    else:
        monkeypatch.setenv("ELUSYNC_LOG_LEVEL", env_value)

    assert resolve_level(verbose=verbose) == expected


@pytest.mark.usefixtures("chatty_levels")
def test_http_loggers_stay_at_warning_when_verbose(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ELUSYNC_LOG_LEVEL", raising=False)

    configure_logging(verbose=True)

    assert all(logging.getLogger(name).level == logging.WARNING for name in CHATTY_LOGGERS)
