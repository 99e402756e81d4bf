from __future__ import annotations

from collections.abc import Generator
from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from erp_nav.settings import get_settings


@lru_cache
def get_engine() -> Engine:
    url = get_settings().resolved_db_url()
    return create_engine(
        url,
        connect_args={"check_same_thread": False} if url.startswith("sqlite") else {},
    )


@lru_cache
def get_sessionmaker() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), autocommit=False, autoflush=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; user lookups are the only queries made."""

    db = get_sessionmaker()()
    try:
        yield db
    finally:
        db.close()
