"""
Feedback service: validation, request normalization and result shaping.

Sits between the transport layer and FeedbackStorage. Every public method
either returns a result model or raises exactly one FeedbackError subclass.
"""

from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Iterator, Optional

from .errors import NotFoundError, StorageError, ValidationError
from .models import (
    PRIORITIES,
    SQL_INT_MAX,
    STATUSES,
    CategoryCount,
    DeleteResult,
    FeedbackStats,
    PagedFeedback,
    Pagination,
    PriorityCount,
    RecentFeedback,
    StatusUpdateResult,
    SubmissionResult,
)
from .storage import FeedbackStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedbackSettings:
    """Defaults applied while normalizing requests."""

    default_priority: str = "medium"
    default_page: int = 1
    default_limit: int = 20
    recent_limit: int = 5
    # Observed behavior accepts any priority string; flip to reject unknown ones.
    enforce_priority: bool = False


def _coerce_positive_int(value: Any, default: int) -> int:
    """Parse a page/limit value; anything missing, non-numeric, < 1 or too large for SQL becomes the default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if 0 < number <= SQL_INT_MAX else default


def _valid_row_id(feedback_id: int) -> bool:
    return 0 < feedback_id <= SQL_INT_MAX


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


@contextmanager
def _storage_failure(message: str) -> Iterator[None]:
    # Replace the store's diagnostic message with one that is safe to return.
    try:
        yield
    except StorageError as e:
        raise StorageError(message) from e


class FeedbackService:
    """
    Orchestrates feedback submission and the admin operations.

    The store is owned by whoever builds the service (see container.py) and
    handed in explicitly; the service never closes it.
    """

    def __init__(self, storage: FeedbackStorage, settings: Optional[FeedbackSettings] = None):
        self.storage = storage
        self.settings = settings or FeedbackSettings()

    def submit_feedback(
        self,
        category: Any,
        message: Any,
        priority: Any = None,
    ) -> SubmissionResult:
        """
        Record one anonymous submission.

        The confirmation deliberately omits the new row id so a submitter
        cannot be correlated with their entry later.

        Raises:
            ValidationError: category or message missing/blank, or (when
                enforce_priority is on) priority outside low/medium/high.
            StorageError: the insert failed.
        """
        if _is_blank(category) or _is_blank(message):
            raise ValidationError("Category and message are required")

        if priority is None or priority == "":
            priority = self.settings.default_priority
        elif not isinstance(priority, str):
            raise ValidationError("Priority must be a string")

        if self.settings.enforce_priority and priority not in PRIORITIES:
            raise ValidationError("Invalid priority")

        with _storage_failure("Failed to submit feedback"):
            self.storage.insert(category, message, priority)

        logger.info("New feedback submitted: %s - %s priority", category, priority)
        return SubmissionResult()

    def get_stats(self) -> FeedbackStats:
        """Total count, category/priority breakdowns and the most recent entries."""
        with _storage_failure("Failed to get stats"):
            raw = self.storage.aggregate_stats(recent_limit=self.settings.recent_limit)

        return FeedbackStats(
            total=raw["total"],
            by_category=[CategoryCount(category=c, count=n) for c, n in raw["by_category"]],
            by_priority=[PriorityCount(priority=p, count=n) for p, n in raw["by_priority"]],
            recent=[
                RecentFeedback(
                    category=r.category,
                    message=r.message,
                    priority=r.priority,
                    created_at=r.created_at,
                )
                for r in raw["recent"]
            ],
            generated_at=datetime.now(UTC),
        )

    def list_feedback(
        self,
        category: Optional[str] = None,
        status: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
    ) -> PagedFeedback:
        """
        Filtered, paginated admin listing (newest first).

        "all" for category or status means no filter. A page past the end is
        not an error: it comes back empty with the same pagination metadata.
        """
        page = _coerce_positive_int(page, self.settings.default_page)
        limit = _coerce_positive_int(limit, self.settings.default_limit)

        with _storage_failure("Failed to fetch feedback"):
            rows, total = self.storage.query_page(
                category=category, status=status, page=page, limit=limit
            )

        return PagedFeedback(
            feedback=rows,
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                pages=math.ceil(total / limit),
            ),
        )

    def set_status(self, feedback_id: int, status: Any) -> StatusUpdateResult:
        if status not in STATUSES:
            raise ValidationError("Invalid status")

        if not _valid_row_id(feedback_id):
            raise NotFoundError("Feedback not found")

        with _storage_failure("Failed to update status"):
            changed = self.storage.update_status(feedback_id, status)

        if changed == 0:
            raise NotFoundError("Feedback not found")

        logger.info("Feedback %s status set to %s", feedback_id, status)
        return StatusUpdateResult(message=f"Status updated to {status}", id=feedback_id)

    def delete_one(self, feedback_id: int) -> DeleteResult:
        if not _valid_row_id(feedback_id):
            raise NotFoundError("Feedback not found")

        with _storage_failure("Failed to delete feedback"):
            changed = self.storage.delete_by_id(feedback_id)

        if changed == 0:
            raise NotFoundError("Feedback not found")

        logger.info("Feedback %s deleted", feedback_id)
        return DeleteResult(
            message=f"Feedback #{feedback_id} deleted successfully",
            deleted_id=feedback_id,
        )

    def delete_resolved(self) -> DeleteResult:
        """Remove every resolved entry. Zero matches is a normal outcome."""
        with _storage_failure("Failed to delete resolved feedback"):
            count = self.storage.delete_by_status("resolved")

        logger.info("Deleted %d resolved feedback items", count)
        return DeleteResult(
            message=f"Deleted {count} resolved feedback items",
            deleted_count=count,
        )

    def delete_all(self) -> DeleteResult:
        # No confirmation step at this layer.
        with _storage_failure("Failed to delete all feedback"):
            count = self.storage.delete_all()

        logger.warning("Deleted ALL feedback (%d items)", count)
        return DeleteResult(
            message=f"Deleted all feedback ({count} items)",
            deleted_count=count,
        )
