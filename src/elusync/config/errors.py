"""Errors raised while reading ELUSYNC_* settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """An environment value is present but unusable (e.g. a non-numeric interval)."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required configuration values are absent."""
