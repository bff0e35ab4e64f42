#!/usr/bin/env python3
"""
Development server entrypoint.

Builds the store once, serves the API until interrupted, then closes the
store before the process exits.
"""

import logging
import sys

from anon_feedback import create_app
from anon_feedback.config import Config
from anon_feedback.logging_config import configure_logging
from anon_feedback.services.container import create_services
from anon_feedback.services.seed import seed_sample_feedback

logger = logging.getLogger("anon_feedback.run")


def main() -> int:
    try:
        Config.validate()
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    configure_logging(Config.LOG_LEVEL, Config.LOG_FORMAT)

    services = create_services()
    if Config.SEED_SAMPLE_DATA:
        seed_sample_feedback(services.storage)

    app = create_app(services=services)
    port = int(Config.PORT)

    logger.info("Feedback system running on http://%s:%d", Config.HOST, port)
    logger.info("Health check: http://%s:%d/api/health", Config.HOST, port)

    try:
        app.run(host=Config.HOST, port=port, debug=False)
    except KeyboardInterrupt:
        pass
    finally:
        logger.info("Shutting down server...")
        services.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
