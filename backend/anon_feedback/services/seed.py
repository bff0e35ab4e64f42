"""Sample feedback for local demos of the admin dashboard."""

from __future__ import annotations

import logging

from .storage import FeedbackStorage

logger = logging.getLogger(__name__)

SAMPLE_FEEDBACK = [
    ("facilities", "The library study rooms need more power outlets.", "medium"),
    ("academics", "Lecture recordings for the stats course are often missing audio.", "high"),
    ("food", "Please add more vegetarian options at the main cafeteria.", "low"),
    ("facilities", "Heating in the east dorm stairwell has been broken for a week.", "high"),
    ("it", "Campus wifi drops out in the engineering building every afternoon.", "medium"),
    ("events", "Loved the career fair, more startups next time would be great.", "low"),
]


def seed_sample_feedback(storage: FeedbackStorage) -> int:
    """
    Insert the sample rows into an empty store.

    Returns:
        Number of rows inserted (0 when the store already has data).
    """
    if storage.count() > 0:
        logger.info("Feedback table not empty, skipping sample data")
        return 0

    for category, message, priority in SAMPLE_FEEDBACK:
        storage.insert(category, message, priority)

    logger.info("Database initialized with %d sample feedback items", len(SAMPLE_FEEDBACK))
    return len(SAMPLE_FEEDBACK)
