"""FastAPI application initialization and configuration module.

This module serves as the main entry point for the API application.
It handles:
- Logging setup
- Exception handler registration
- Router registration
"""

from fastapi import FastAPI

from request_envelope.api.middleware.error_handler import register_exception_handlers
from request_envelope.api.routes.users import router as users_router
from request_envelope.api.utils.responses import ORJSONResponse
from request_envelope.core.config import Settings, get_settings
from request_envelope.core.logging import setup_logging


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)

    # debug stays off: the debug traceback page would replace the 500 envelope
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
    )

    register_exception_handlers(application)

    application.include_router(users_router)

    return application


app = create_app()
