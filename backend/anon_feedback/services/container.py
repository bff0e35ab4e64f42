"""
Dependency injection container for backend services.

We store a single Services instance on the Flask app (app.extensions["services"]).
Routes fetch dependencies via get_services(), so route tests can inject a
store of their own without touching module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import current_app

from ..config import Config
from .feedback_service import FeedbackService, FeedbackSettings
from .storage import FeedbackStorage


@dataclass(frozen=True)
class Services:
    storage: FeedbackStorage
    feedback: FeedbackService

    def close(self) -> None:
        self.storage.close()


def create_services(
    *,
    database_url: Optional[str] = None,
    settings: Optional[FeedbackSettings] = None,
) -> Services:
    """
    Build the production Services container.

    Args:
        database_url: Optional override for database URL (useful for tests).
        settings: Optional override for request defaults.
    """
    storage = FeedbackStorage(database_url=database_url)
    return Services(
        storage=storage,
        feedback=FeedbackService(storage, settings or Config.feedback_settings()),
    )


def get_services() -> Services:
    """
    Fetch the Services container from the current Flask app.

    Raises:
        RuntimeError if services have not been attached to the app.
    """
    services = current_app.extensions.get("services")
    if services is None:
        raise RuntimeError('Services not configured. Expected app.extensions["services"].')
    return services
