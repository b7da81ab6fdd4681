"""Run the packaged Alembic migrations programmatically."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from elusync.config import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the schema up to the latest revision.

    With ``engine`` the upgrade runs on one of its connections, which is how an
    in-memory SQLite database keeps its tables. Otherwise Alembic connects to
    ``database_uri`` (or the configured database) itself.
    """
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if engine is None:
        config.set_main_option("sqlalchemy.url", database_uri or get_database_config().uri)
        command.upgrade(config, "head")
        return
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
