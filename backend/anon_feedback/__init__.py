import atexit
import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from .config import Config
from .services.container import Services, create_services
from .services.seed import seed_sample_feedback

logger = logging.getLogger(__name__)


def create_app(testing: bool = False, services: Optional[Services] = None):
    app = Flask(__name__)
    app.config["TESTING"] = testing

    # CORS configuration for development and production
    allowed_origins = [
        "http://localhost:3000",  # Bundled landing/admin pages
        "http://localhost:5173",  # Local Vite dev server
    ]

    # Add production frontend URL if set
    if Config.FRONTEND_URL:
        allowed_origins.append(Config.FRONTEND_URL)

    # In development, allow all origins for easier testing
    if Config.FLASK_ENV == "development":
        CORS(app)
    else:
        CORS(app, origins=allowed_origins)

    if services is None:
        services = create_services()
        # The app built this store, so the app tears it down.
        atexit.register(services.close)
        if Config.SEED_SAMPLE_DATA and not testing:
            seed_sample_feedback(services.storage)

    app.extensions["services"] = services

    from .routes import bp as api_bp
    app.register_blueprint(api_bp, url_prefix="/api")

    logger.info("Feedback API ready (database: %s)", services.storage.dialect)
    return app
