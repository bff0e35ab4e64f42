"""
REST API routes for the anonymous feedback service.

Organized into logical groups:
- Public: feedback submission and dashboard stats
- Admin: listing, status updates and deletes

Admin routes are not authenticated; they are meant to sit behind the
deployment's own access controls.
"""

from datetime import UTC, datetime

from flask import Blueprint, request, jsonify

from .services.container import get_services
from .services.errors import FeedbackError

bp = Blueprint("api", __name__)


def _json_error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def _error_response(error: FeedbackError):
    return _json_error(error.message, error.status_code)


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================


@bp.post("/feedback")
def submit_feedback():
    """
    Submit anonymous feedback.

    Body:
        {"category": str, "message": str, "priority": "low"|"medium"|"high" (optional)}

    Returns:
        JSON: {"success": true, "message": str, "privacy": str} (no id)
    """
    body = _json_body()
    svc = get_services()

    try:
        result = svc.feedback.submit_feedback(
            body.get("category"), body.get("message"), body.get("priority")
        )
        return jsonify(result.model_dump(mode="json"))

    except FeedbackError as e:
        return _error_response(e)


@bp.get("/stats")
def get_stats():
    """
    Aggregate statistics for the admin dashboard.

    Returns:
        JSON: {"total", "byCategory", "byPriority", "recent", "generatedAt"}
    """
    svc = get_services()

    try:
        stats = svc.feedback.get_stats()
        return jsonify(stats.model_dump(mode="json", by_alias=True))

    except FeedbackError as e:
        return _error_response(e)


# ============================================================================
# ADMIN ENDPOINTS
# ============================================================================


@bp.get("/admin/feedback")
def list_feedback():
    """
    List feedback with optional filtering.

    Query params:
        - category: Filter by category ("all" for no filter)
        - status: Filter by status ("all" for no filter)
        - page: 1-based page number (default: 1)
        - limit: Page size (default: 20)

    Returns:
        JSON: {"feedback": [...], "pagination": {"page", "limit", "total", "pages"}}
    """
    svc = get_services()

    try:
        result = svc.feedback.list_feedback(
            category=request.args.get("category"),
            status=request.args.get("status"),
            page=request.args.get("page"),
            limit=request.args.get("limit"),
        )
        return jsonify(result.model_dump(mode="json"))

    except FeedbackError as e:
        return _error_response(e)


@bp.patch("/admin/feedback/<int:feedback_id>/status")
def update_feedback_status(feedback_id: int):
    """
    Set the status of one feedback entry.

    Body:
        {"status": "new"|"reviewed"|"resolved"}
    """
    body = _json_body()
    svc = get_services()

    try:
        result = svc.feedback.set_status(feedback_id, body.get("status"))
        return jsonify(result.model_dump(mode="json"))

    except FeedbackError as e:
        return _error_response(e)


# Registered before the <int:feedback_id> rule so "resolved" is never read as an id.
@bp.delete("/admin/feedback/resolved")
def delete_resolved_feedback():
    """Delete every resolved entry. Returns {"deletedCount": int}."""
    svc = get_services()

    try:
        result = svc.feedback.delete_resolved()
        return jsonify(result.model_dump(mode="json", by_alias=True, exclude_none=True))

    except FeedbackError as e:
        return _error_response(e)


@bp.delete("/admin/feedback/<int:feedback_id>")
def delete_feedback(feedback_id: int):
    """
    Delete a single feedback entry by ID.

    Returns:
        JSON: {"success": bool, "message": str, "deletedId": int} or 404 error
    """
    svc = get_services()

    try:
        result = svc.feedback.delete_one(feedback_id)
        return jsonify(result.model_dump(mode="json", by_alias=True, exclude_none=True))

    except FeedbackError as e:
        return _error_response(e)


@bp.delete("/admin/feedback")
def delete_all_feedback():
    """Delete all feedback. No confirmation step."""
    svc = get_services()

    try:
        result = svc.feedback.delete_all()
        return jsonify(result.model_dump(mode="json", by_alias=True, exclude_none=True))

    except FeedbackError as e:
        return _error_response(e)


# ============================================================================
# UTILITY ENDPOINTS
# ============================================================================


@bp.get("/health")
def health():
    """Health check endpoint."""
    svc = get_services()

    try:
        svc.storage.count()
    except FeedbackError:
        return _json_error("Database unavailable", 503)

    return jsonify(
        {
            "status": "OK",
            "message": "Feedback system is running",
            "timestamp": datetime.now(UTC).isoformat(),
        }
    )
