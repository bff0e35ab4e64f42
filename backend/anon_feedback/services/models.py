"""
Data models for feedback records and API results.

Uses Pydantic for validation and serialization.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

PRIORITIES = ("low", "medium", "high")
STATUSES = ("new", "reviewed", "resolved")

# Filter value meaning "no predicate" rather than a literal match.
ALL_FILTER = "all"

# Largest value a signed 64-bit SQL INTEGER column can hold.
SQL_INT_MAX = 2**63 - 1


class FeedbackRecord(BaseModel):
    """Complete feedback row as seen by administrators"""
    id: int
    category: str
    message: str
    priority: str
    status: str
    created_at: datetime


class RecentFeedback(BaseModel):
    """Feedback row as shown in the dashboard's recent list (no id, no status)"""
    category: str
    message: str
    priority: str
    created_at: datetime


class CategoryCount(BaseModel):
    category: str
    count: int = Field(..., ge=0)


class PriorityCount(BaseModel):
    priority: str
    count: int = Field(..., ge=0)


class FeedbackStats(BaseModel):
    """Aggregate statistics for the admin dashboard"""
    total: int = Field(..., ge=0)
    by_category: List[CategoryCount] = Field(default_factory=list, serialization_alias="byCategory")
    by_priority: List[PriorityCount] = Field(default_factory=list, serialization_alias="byPriority")
    recent: List[RecentFeedback] = Field(default_factory=list)
    generated_at: datetime = Field(..., serialization_alias="generatedAt")


class Pagination(BaseModel):
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    pages: int = Field(..., ge=0)


class PagedFeedback(BaseModel):
    """One page of the admin listing"""
    feedback: List[FeedbackRecord] = Field(default_factory=list)
    pagination: Pagination


class SubmissionResult(BaseModel):
    """Confirmation returned to the submitter. Never carries the row id."""
    success: bool = True
    message: str = "Feedback submitted anonymously"
    privacy: str = "No personal information was stored"


class StatusUpdateResult(BaseModel):
    success: bool = True
    message: str
    id: int


class DeleteResult(BaseModel):
    """Outcome of a single or bulk delete"""
    success: bool = True
    message: str
    deleted_id: Optional[int] = Field(None, serialization_alias="deletedId")
    deleted_count: Optional[int] = Field(None, ge=0, serialization_alias="deletedCount")
