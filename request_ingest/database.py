"""
Database configuration and initialization for Request Ingest.

Uses SQLite as the durable backing for the key-value blob store,
through SQLAlchemy ORM.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from .config import DATABASE_URL


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}  # Required for SQLite with FastAPI
    return {}


engine = create_engine(
    DATABASE_URL,
    connect_args=_connect_args(DATABASE_URL),
    echo=False  # Set to True for SQL query logging
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def init_db(bind=None):
    """
    Initialize the database by creating all tables.

    This function should be called at application startup to ensure
    the database schema exists. It will create tables if they don't exist.

    Args:
        bind: Optional engine to create tables on (defaults to the app engine)
    """
    # Import models so they register with Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
