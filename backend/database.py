# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
SQLAlchemy engine, session factory, declarative base, and the FastAPI
dependency that provides a DB session per request.

The engine is built exactly once, when this module is first imported at
process start.  Nothing re-creates it later; the stores in stores/ only
ever receive the per-request session yielded by :func:`get_db`.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import settings


def _connect_args(url: str) -> dict:
    # FastAPI runs sync endpoints in a thread pool
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


# pool_pre_ping keeps idle connections alive across MySQL's wait_timeout
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.database_url),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    FastAPI dependency.  Yields a session for the duration of the request,
    then closes it.  Use with Depends(get_db).
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
