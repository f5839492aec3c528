"""Run the Request Envelope API with uvicorn."""

import os

import uvicorn
from loguru import logger

from request_envelope.api.main import app
from request_envelope.core.config import get_settings
from request_envelope.core.logging import UVICORN_LOGGERS, setup_logging

APP_IMPORT_STRING = "request_envelope.api.main:app"

# Keeps uvicorn from installing its own handlers over the Loguru bridge
UVICORN_LOG_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "default": {"class": "request_envelope.core.logging.InterceptHandler"},
    },
    "loggers": {
        name: {"handlers": ["default"], "level": "INFO", "propagate": False}
        for name in UVICORN_LOGGERS
    },
}


def main() -> None:
    """Serve the application, reloading on changes in debug mode."""
    settings = get_settings()
    setup_logging(settings)

    # Container platforms inject the port to listen on
    port = int(os.environ.get("PORT", settings.api_port))
    mode = "development mode with auto-reload" if settings.debug else "production mode"
    logger.info(f"Starting Uvicorn on http://{settings.api_host}:{port} ({mode})")

    uvicorn.run(
        # Reload needs an import string instead of the app object
        APP_IMPORT_STRING if settings.debug else app,
        host=settings.api_host,
        port=port,
        reload=settings.debug,
        log_config=UVICORN_LOG_CONFIG,
    )


if __name__ == "__main__":
    main()
