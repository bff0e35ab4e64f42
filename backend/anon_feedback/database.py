"""
Central SQLAlchemy models and engine utilities.

These definitions power both Alembic migrations and runtime ORM queries.
"""

from typing import Optional

from sqlalchemy import (
    Column,
    Index,
    Integer,
    String,
    Text,
    TIMESTAMP,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import func

from .config import Config

Base = declarative_base()


class Feedback(Base):
    """
    Anonymous feedback entries.

    Nothing identifying the submitter is stored. Only ``status`` changes after insert.
    """
    __tablename__ = "feedback"

    # AUTOINCREMENT keeps SQLite from handing out the id of a deleted row again.
    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(String(100), nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(String(20), nullable=False, default="medium")
    status = Column(String(20), nullable=False, default="new")
    created_at = Column(TIMESTAMP, nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_feedback_created", "created_at"),
        Index("idx_feedback_category", "category"),
        Index("idx_feedback_status", "status"),
        {"sqlite_autoincrement": True},
    )


def get_database_url() -> str:
    """
    Get database URL from configuration, defaulting to in-memory SQLite.

    Returns:
        Database connection string
    """
    return Config.DATABASE_URL


def is_memory_url(database_url: str) -> bool:
    """True when the URL points at a private in-memory SQLite database."""
    url = make_url(database_url)
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def create_engine_for_url(database_url: Optional[str] = None) -> Engine:
    """Build a SQLAlchemy engine for the given URL (or default configuration)."""
    url = database_url or get_database_url()

    if is_memory_url(url):
        # One shared connection, otherwise every checkout would see a fresh empty database.
        engine = create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
            url,
            echo=False,
            pool_pre_ping=True,
        )

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _set_sqlite_pragmas)

    return engine


def _set_sqlite_pragmas(dbapi_connection, connection_record):
    """Apply SQLite pragmas for better consistency."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
