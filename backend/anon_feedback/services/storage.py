"""
SQLAlchemy-backed storage for anonymous feedback.

The store owns the ``feedback`` table and runs parameterized queries for the
service layer. It performs no business validation: enum checks, defaults and
page coercion happen in FeedbackService before anything reaches this module.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager, nullcontext
from datetime import UTC, datetime
from typing import Any, Dict, Generator, List, Optional, Tuple

from sqlalchemy import desc, func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, sessionmaker

from ..database import (
    Base,
    Feedback as FeedbackORM,
    create_engine_for_url,
    get_database_url,
    is_memory_url,
)
from .errors import StorageError
from .models import ALL_FILTER, SQL_INT_MAX, FeedbackRecord

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back naive; they were written as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _feedback_to_dto(row: FeedbackORM) -> FeedbackRecord:
    return FeedbackRecord(
        id=row.id,
        category=row.category,
        message=row.message,
        priority=row.priority,
        status=row.status,
        created_at=_as_utc(row.created_at),
    )


def _filter_active(value: Optional[str]) -> bool:
    return bool(value) and value != ALL_FILTER


class FeedbackStorage:
    """
    Holder of feedback rows for the lifetime of the process.

    Mutations are serialized through one lock per store. Reads skip the lock
    unless the store sits on a single shared in-memory SQLite connection.
    """

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or get_database_url()
        self.engine, self.session_factory = self._configure_engine(self.database_url)
        self.dialect = self.engine.dialect.name
        self._lock = threading.RLock()
        self._serialize_reads = is_memory_url(self.database_url)
        self._closed = False

        Base.metadata.create_all(self.engine)

    def insert(self, category: str, message: str, priority: str) -> int:
        row = FeedbackORM(
            category=category,
            message=message,
            priority=priority,
            status="new",
            created_at=datetime.now(UTC).replace(tzinfo=None),
        )

        with self._session_scope("insert feedback", exclusive=True) as session:
            session.add(row)
            session.flush()
            return row.id

    def query_page(
        self,
        category: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[FeedbackRecord], int]:
        """
        Fetch one page of feedback, newest first.

        Args:
            category: Equality filter; None or "all" applies no predicate.
            status: Equality filter; None or "all" applies no predicate.
            page: 1-based page number (already validated by the caller).
            limit: Page size (already validated by the caller).

        Returns:
            (rows on this page, total rows matching the filters)
        """
        with self._session_scope("query feedback") as session:
            rows = (
                self._filtered(session.query(FeedbackORM), category, status)
                .order_by(desc(FeedbackORM.created_at), desc(FeedbackORM.id))
                .offset(min((page - 1) * limit, SQL_INT_MAX))
                .limit(limit)
                .all()
            )
            total = self._filtered(
                session.query(func.count(FeedbackORM.id)), category, status
            ).scalar()

            return [_feedback_to_dto(row) for row in rows], int(total or 0)

    def update_status(self, feedback_id: int, status: str) -> int:
        with self._session_scope("update feedback status", exclusive=True) as session:
            return (
                session.query(FeedbackORM)
                .filter(FeedbackORM.id == feedback_id)
                .update({FeedbackORM.status: status}, synchronize_session=False)
            )

    def delete_by_id(self, feedback_id: int) -> int:
        with self._session_scope("delete feedback", exclusive=True) as session:
            return (
                session.query(FeedbackORM)
                .filter(FeedbackORM.id == feedback_id)
                .delete(synchronize_session=False)
            )

    def delete_by_status(self, status: str) -> int:
        with self._session_scope("delete feedback by status", exclusive=True) as session:
            return (
                session.query(FeedbackORM)
                .filter(FeedbackORM.status == status)
                .delete(synchronize_session=False)
            )

    def delete_all(self) -> int:
        with self._session_scope("delete all feedback", exclusive=True) as session:
            return session.query(FeedbackORM).delete(synchronize_session=False)

    def count(self) -> int:
        with self._session_scope("count feedback") as session:
            return int(session.query(func.count(FeedbackORM.id)).scalar() or 0)

    def aggregate_stats(self, recent_limit: int = 5) -> Dict[str, Any]:
        """
        Run the dashboard aggregates as one snapshot.

        Holding the store lock keeps writers out, so the total, both breakdowns
        and the recent list always describe the same set of rows.

        Returns:
            {"total": int,
             "by_category": [(category, count)] by count desc,
             "by_priority": [(priority, count)] by count desc,
             "recent": [FeedbackRecord] newest first}
        """
        with self._session_scope("aggregate feedback stats", exclusive=True) as session:
            total = session.query(func.count(FeedbackORM.id)).scalar()

            category_count = func.count(FeedbackORM.id).label("count")
            by_category = (
                session.query(FeedbackORM.category, category_count)
                .group_by(FeedbackORM.category)
                .order_by(desc(category_count), FeedbackORM.category)
                .all()
            )

            priority_count = func.count(FeedbackORM.id).label("count")
            by_priority = (
                session.query(FeedbackORM.priority, priority_count)
                .group_by(FeedbackORM.priority)
                .order_by(desc(priority_count), FeedbackORM.priority)
                .all()
            )

            recent = (
                session.query(FeedbackORM)
                .order_by(desc(FeedbackORM.created_at), desc(FeedbackORM.id))
                .limit(recent_limit)
                .all()
            )

            return {
                "total": int(total or 0),
                "by_category": [(category, int(n)) for category, n in by_category],
                "by_priority": [(priority, int(n)) for priority, n in by_priority],
                "recent": [_feedback_to_dto(row) for row in recent],
            }

    def close(self) -> None:
        """Release the engine and its connections. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self.engine.dispose()
        logger.info("Feedback storage closed")

    @property
    def closed(self) -> bool:
        return self._closed

    @staticmethod
    def _filtered(query: Query, category: Optional[str], status: Optional[str]) -> Query:
        if _filter_active(category):
            query = query.filter(FeedbackORM.category == category)
        if _filter_active(status):
            query = query.filter(FeedbackORM.status == status)
        return query

    def _configure_engine(self, database_url: str) -> tuple[Engine, sessionmaker]:
        engine = create_engine_for_url(database_url)
        factory = sessionmaker(
            bind=engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
        return engine, factory

    @contextmanager
    def _session_scope(self, operation: str, exclusive: bool = False) -> Generator[Session, None, None]:
        guard = self._lock if (exclusive or self._serialize_reads) else nullcontext()
        with guard:
            if self._closed:
                raise StorageError("Feedback storage is closed")

            session = self.session_factory()
            try:
                yield session
                session.commit()
            except (SQLAlchemyError, OverflowError) as e:
                session.rollback()
                logger.exception("Database error during %s", operation)
                raise StorageError(f"Failed to {operation}") from e
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()
