"""Alembic upgrade helper for the remote store schema."""

from __future__ import annotations

import logging

from logbook.core.config import BASE_DIR

logger = logging.getLogger(__name__)

ALEMBIC_INI = BASE_DIR / "alembic.ini"
MIGRATIONS_DIR = BASE_DIR / "migrations"


def _alembic_config(database_url: str):
    from alembic.config import Config

    # 日本語: ini の script_location は実行ディレクトリ依存なので絶対パスで上書き / English: Override script_location with an absolute path
    config = Config(str(ALEMBIC_INI))
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    config.set_main_option("sqlalchemy.url", database_url)
    return config


def upgrade_to_head(database_url: str) -> None:
    """Bring the logbook tables (task, weekly_log, user_settings) to the latest revision."""
    from alembic import command

    logger.info("Applying logbook migrations from %s", MIGRATIONS_DIR)
    command.upgrade(_alembic_config(database_url), "head")
