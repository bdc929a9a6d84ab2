from __future__ import annotations

import logging
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from shop_api.core.config import settings

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    # Request sessions run on the threadpool, not on the thread that opened the file
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    future=True,
    pool_pre_ping=True,
    echo=settings.DB_ECHO,
    connect_args=_connect_args(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

Base = declarative_base()


def init_db() -> None:
    """Creates the missing tables. Models are imported first so they are all registered."""
    from shop_api import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("tables ensured", extra={"tables": sorted(Base.metadata.tables)})


def get_db() -> Iterator[Session]:
    """Request-scoped session, rolled back when the request fails."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        logger.exception("db session rolled back")
        raise
    finally:
        db.close()
