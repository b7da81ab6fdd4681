"""SQLAlchemy adapter package for elusync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyReconciliationUnitOfWork",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "start_mappers",
    "shutdown",
    "startup",
]
