"""Typed readers for ELUSYNC_* environment variables.

Blank values count as unset everywhere, so ``FOO=`` in a ``.env`` file falls back
to the default instead of overriding it with an empty string.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _raw(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def env_or_default(name: str, default: str) -> str:
    raw = _raw(name)
    return default if raw is None else raw


def env_flag(name: str, *, default: bool = False) -> bool:
    raw = _raw(name)
    return default if raw is None else raw.lower() in _TRUTHY


def env_float(name: str, default: float) -> float:
    raw = _raw(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the given environment variables or raise if any are missing/blank."""

    missing: list[str] = []
    values: dict[str, str] = {}
    for name in names:
        raw = _raw(name)
        if raw is None:
            missing.append(name)
            continue
        values[name] = raw

    if missing:
        missing_list = ", ".join(sorted(missing))
        raise MissingConfigurationError(f"Missing configuration for: {missing_list}")

    return values
