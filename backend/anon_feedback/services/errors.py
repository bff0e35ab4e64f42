"""
Error types raised by the feedback service and store.

Routes map each kind to an HTTP status; messages are safe to show to callers.
"""


class FeedbackError(Exception):
    """Base class for feedback failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FeedbackError):
    """Missing required field or value outside an allowed set."""

    status_code = 400


class NotFoundError(FeedbackError):
    """Update or delete target does not exist."""

    status_code = 404


class StorageError(FeedbackError):
    """Database failure. The driver exception is chained, not exposed."""

    status_code = 500
