"""
Alembic migrations runner (used on application startup)
"""
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from app.config import get_settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def get_alembic_config() -> Config:
    """Alembic config pointing at migrations/ with URL taken from settings"""
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", get_settings().get_sqlalchemy_url().replace("%", "%%"))
    # keep the application logging setup (env.py skips fileConfig)
    cfg.attributes["configure_logger"] = False
    return cfg


def run_migrations(revision: str = "head") -> None:
    """
    Применить миграции до указанной ревизии

    Raises:
        sqlalchemy.exc.OperationalError: если БД недоступна
    """
    command.upgrade(get_alembic_config(), revision)
    logger.info("Migrations completed successfully (revision=%s)", revision)
