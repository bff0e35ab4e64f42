"""
Tests for FeedbackService: validation, normalization and result shaping.
"""

from __future__ import annotations

import math

import pytest

from anon_feedback.services.errors import NotFoundError, StorageError, ValidationError
from anon_feedback.services.feedback_service import FeedbackService, FeedbackSettings
from anon_feedback.services.storage import FeedbackStorage


# ============================================================================
# TEST FAKES
# ============================================================================


class _BrokenStorage:
    """Store whose every call fails the way a dead database would."""

    def _fail(self, *args, **kwargs):  # noqa: ANN001 - test fake
        raise StorageError("Failed to insert feedback: sqlite3.OperationalError: disk I/O error")

    insert = _fail
    query_page = _fail
    update_status = _fail
    delete_by_id = _fail
    delete_by_status = _fail
    delete_all = _fail
    aggregate_stats = _fail


@pytest.fixture()
def storage():
    store = FeedbackStorage(database_url="sqlite://")
    yield store
    store.close()


@pytest.fixture()
def service(storage):
    return FeedbackService(storage, FeedbackSettings())


def _submit_many(service: FeedbackService, count: int, category: str = "general") -> None:
    for i in range(count):
        service.submit_feedback(category, f"feedback {i}", "low")


# ============================================================================
# SUBMISSION
# ============================================================================


def test_submit_returns_confirmation_without_id(service):
    result = service.submit_feedback("facilities", "The lights flicker", "high")
    payload = result.model_dump()

    assert payload == {
        "success": True,
        "message": "Feedback submitted anonymously",
        "privacy": "No personal information was stored",
    }
    assert "id" not in payload


@pytest.mark.parametrize(
    "category,message",
    [
        (None, "text"),
        ("food", None),
        (None, None),
        ("", "text"),
        ("food", ""),
        ("   ", "text"),
        ("food", "\n\t"),
        (42, "text"),
    ],
)
def test_submit_requires_category_and_message(service, storage, category, message):
    with pytest.raises(ValidationError, match="Category and message are required"):
        service.submit_feedback(category, message)

    assert storage.count() == 0


def test_submit_round_trip_and_default_priority(service):
    service.submit_feedback("food", "Longer opening hours", "high")
    service.submit_feedback("it", "Faster wifi")

    rows = {row.category: row for row in service.list_feedback().feedback}

    assert rows["food"].message == "Longer opening hours"
    assert rows["food"].priority == "high"
    assert rows["it"].message == "Faster wifi"
    assert rows["it"].priority == "medium"
    assert rows["it"].status == "new"


def test_submit_passes_unknown_priority_through_by_default(service):
    service.submit_feedback("food", "Anything", "urgent")

    assert service.list_feedback().feedback[0].priority == "urgent"


def test_submit_rejects_unknown_priority_when_enforced(storage):
    strict = FeedbackService(storage, FeedbackSettings(enforce_priority=True))

    with pytest.raises(ValidationError, match="Invalid priority"):
        strict.submit_feedback("food", "Anything", "urgent")

    strict.submit_feedback("food", "Anything", "low")
    assert storage.count() == 1


def test_configured_default_priority_is_applied(storage):
    svc = FeedbackService(storage, FeedbackSettings(default_priority="low"))
    svc.submit_feedback("food", "Anything")

    assert svc.list_feedback().feedback[0].priority == "low"


# ============================================================================
# LISTING
# ============================================================================


def test_list_without_filters_returns_everything(service):
    for i, category in enumerate(["a", "b", "c", "d"]):
        service.submit_feedback(category, f"message {i}")

    result = service.list_feedback()

    assert len(result.feedback) == 4
    assert result.pagination.model_dump() == {"page": 1, "limit": 20, "total": 4, "pages": 1}
    assert service.get_stats().total == 4


def test_list_filters_by_category(service):
    _submit_many(service, 3, "food")
    _submit_many(service, 2, "it")

    only_food = service.list_feedback(category="food")
    assert {row.category for row in only_food.feedback} == {"food"}
    assert only_food.pagination.total == 3

    everything = service.list_feedback(category="all", status="all")
    assert everything.pagination.total == 5


def test_list_filters_by_status(service):
    _submit_many(service, 3)
    target = service.list_feedback().feedback[0].id
    service.set_status(target, "reviewed")

    reviewed = service.list_feedback(status="reviewed")
    assert [row.id for row in reviewed.feedback] == [target]

    fresh = service.list_feedback(status="new")
    assert fresh.pagination.total == 2


@pytest.mark.parametrize("total,limit", [(0, 20), (1, 20), (20, 20), (21, 20), (7, 3), (9, 3)])
def test_pages_is_ceiling_of_total_over_limit(service, total, limit):
    _submit_many(service, total)

    pagination = service.list_feedback(limit=limit).pagination

    assert pagination.total == total
    assert pagination.pages == math.ceil(total / limit)


def test_page_beyond_last_is_empty_not_an_error(service):
    _submit_many(service, 5)

    result = service.list_feedback(page=4, limit=2)

    assert result.feedback == []
    assert result.pagination.model_dump() == {"page": 4, "limit": 2, "total": 5, "pages": 3}


@pytest.mark.parametrize(
    "page,limit,expected",
    [
        (None, None, (1, 20)),
        ("2", "5", (2, 5)),
        ("abc", "xyz", (1, 20)),
        ("0", "0", (1, 20)),
        ("-3", "-1", (1, 20)),
        ("1.5", "", (1, 20)),
        (3, 10, (3, 10)),
    ],
)
def test_page_and_limit_are_coerced_to_positive_ints(service, page, limit, expected):
    pagination = service.list_feedback(page=page, limit=limit).pagination

    assert (pagination.page, pagination.limit) == expected


# ============================================================================
# STATUS UPDATES
# ============================================================================


def test_set_status_updates_only_that_record(service):
    _submit_many(service, 3)
    before = service.list_feedback().feedback
    target = before[1]

    result = service.set_status(target.id, "reviewed")

    assert result.model_dump() == {"success": True, "message": "Status updated to reviewed", "id": target.id}
    after = {row.id: row for row in service.list_feedback().feedback}
    assert after[target.id].status == "reviewed"
    assert after[target.id].message == target.message
    assert after[target.id].created_at == target.created_at
    assert after[before[0].id] == before[0]
    assert after[before[2].id] == before[2]


def test_set_status_can_move_backwards(service):
    _submit_many(service, 1)
    feedback_id = service.list_feedback().feedback[0].id

    service.set_status(feedback_id, "resolved")
    service.set_status(feedback_id, "new")

    assert service.list_feedback().feedback[0].status == "new"


@pytest.mark.parametrize("status", ["done", "", None, "RESOLVED"])
def test_set_status_rejects_unknown_values(service, status):
    _submit_many(service, 1)
    feedback_id = service.list_feedback().feedback[0].id

    with pytest.raises(ValidationError, match="Invalid status"):
        service.set_status(feedback_id, status)


def test_set_status_missing_id_is_not_found(service):
    with pytest.raises(NotFoundError, match="Feedback not found"):
        service.set_status(12345, "reviewed")


# ============================================================================
# DELETES
# ============================================================================


def test_delete_one(service):
    _submit_many(service, 2)
    feedback_id = service.list_feedback().feedback[0].id

    result = service.delete_one(feedback_id)

    assert result.deleted_id == feedback_id
    assert result.message == f"Feedback #{feedback_id} deleted successfully"
    assert service.list_feedback().pagination.total == 1

    with pytest.raises(NotFoundError):
        service.delete_one(feedback_id)


def test_delete_resolved_removes_exactly_resolved(service):
    _submit_many(service, 4)
    rows = service.list_feedback().feedback
    service.set_status(rows[0].id, "resolved")
    service.set_status(rows[1].id, "resolved")
    service.set_status(rows[2].id, "reviewed")

    result = service.delete_resolved()

    assert result.deleted_count == 2
    assert result.message == "Deleted 2 resolved feedback items"
    remaining = {row.id for row in service.list_feedback().feedback}
    assert remaining == {rows[2].id, rows[3].id}


def test_delete_resolved_with_nothing_resolved_succeeds(service):
    _submit_many(service, 2)

    result = service.delete_resolved()

    assert result.success is True
    assert result.deleted_count == 0
    assert service.list_feedback().pagination.total == 2


def test_delete_all_empties_the_store(service):
    _submit_many(service, 3)

    result = service.delete_all()

    assert result.deleted_count == 3
    assert result.message == "Deleted all feedback (3 items)"
    assert service.get_stats().total == 0


# ============================================================================
# STATS
# ============================================================================


def test_get_stats_shape(service):
    service.submit_feedback("food", "a", "low")
    service.submit_feedback("food", "b", "high")
    service.submit_feedback("it", "c")
    for i in range(4):
        service.submit_feedback("sports", f"gym {i}", "low")

    stats = service.get_stats()

    assert stats.total == 7
    assert [(c.category, c.count) for c in stats.by_category] == [("sports", 4), ("food", 2), ("it", 1)]
    assert [(p.priority, p.count) for p in stats.by_priority] == [("low", 5), ("high", 1), ("medium", 1)]
    assert [r.message for r in stats.recent] == ["gym 3", "gym 2", "gym 1", "gym 0", "c"]
    assert "id" not in stats.recent[0].model_dump()
    assert stats.generated_at.tzinfo is not None


def test_recent_limit_setting(storage):
    svc = FeedbackService(storage, FeedbackSettings(recent_limit=2))
    _submit_many(svc, 4)

    assert len(svc.get_stats().recent) == 2


# ============================================================================
# STORAGE FAILURES
# ============================================================================


@pytest.mark.parametrize(
    "call,message",
    [
        (lambda s: s.submit_feedback("food", "x"), "Failed to submit feedback"),
        (lambda s: s.get_stats(), "Failed to get stats"),
        (lambda s: s.list_feedback(), "Failed to fetch feedback"),
        (lambda s: s.set_status(1, "new"), "Failed to update status"),
        (lambda s: s.delete_one(1), "Failed to delete feedback"),
        (lambda s: s.delete_resolved(), "Failed to delete resolved feedback"),
        (lambda s: s.delete_all(), "Failed to delete all feedback"),
    ],
)
def test_storage_failures_surface_generic_messages(call, message):
    svc = FeedbackService(_BrokenStorage())

    with pytest.raises(StorageError) as exc_info:
        call(svc)

    assert exc_info.value.message == message
    assert "sqlite" not in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, StorageError)


# ============================================================================
# OUT-OF-RANGE NUMBERS
# ============================================================================


@pytest.mark.parametrize(
    "page,limit,expected",
    [
        ("99999999999999999999", "5", (1, 5)),
        ("2", "99999999999999999999", (2, 20)),
        (str(2**63), None, (1, 20)),
    ],
)
def test_page_and_limit_too_large_for_sql_fall_back_to_defaults(service, page, limit, expected):
    _submit_many(service, 3)

    pagination = service.list_feedback(page=page, limit=limit).pagination

    assert (pagination.page, pagination.limit) == expected
    assert pagination.total == 3


def test_largest_page_whose_offset_overflows_is_empty(service):
    _submit_many(service, 3)

    result = service.list_feedback(page=9223372036854775807, limit=5)

    assert result.feedback == []
    assert result.pagination.page == 9223372036854775807
    assert result.pagination.total == 3
    assert result.pagination.pages == 1


@pytest.mark.parametrize("feedback_id", [2**63, 99999999999999999999, 0, -1])
def test_ids_outside_sql_range_are_not_found(service, feedback_id):
    _submit_many(service, 1)

    with pytest.raises(NotFoundError, match="Feedback not found"):
        service.set_status(feedback_id, "reviewed")
    with pytest.raises(NotFoundError, match="Feedback not found"):
        service.delete_one(feedback_id)

    assert service.list_feedback().pagination.total == 1
