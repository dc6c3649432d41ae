"""
Database engine and sessions for the subscriptions store (SQLAlchemy + psycopg)
"""
from functools import lru_cache
from typing import Iterator

import psycopg
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from app.config import get_settings


class Base(DeclarativeBase):
    pass


@lru_cache
def get_engine() -> Engine:
    """Engine for DATABASE_URL, created on first use"""
    return create_engine(get_settings().get_sqlalchemy_url(), pool_pre_ping=True)


@lru_cache
def get_session_factory() -> sessionmaker:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False)


def get_db() -> Iterator[Session]:
    """
    FastAPI dependency: одна session на запрос, закрывается после ответа

    В тестах подменяется через app.dependency_overrides[get_db].
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> None:
    """
    Readiness: SELECT 1 через psycopg, таймаут 3 секунды

    Raises:
        psycopg.OperationalError: если PostgreSQL недоступен
    """
    dsn = get_settings().get_psycopg_dsn()
    with psycopg.connect(dsn, connect_timeout=3) as conn:
        conn.execute("SELECT 1;").fetchone()
