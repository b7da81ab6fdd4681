"""Errors that adapters raise across the port boundary."""

from __future__ import annotations


class FeedUnavailableError(RuntimeError):
    """A feed could not be fetched or parsed as a whole; the run cannot proceed."""


class DuplicateRecordError(RuntimeError):
    """A write collided with a uniqueness constraint in the store."""
