import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, get_prefix, settings as default_settings
from .errors import ConfigError, DispatchError, ValidationError
from .firebase import MessagingClientProvider
from .logging_config import setup_logging
from .notifications.responses import (
    format_config_error,
    format_dispatch_error,
    format_method_not_allowed,
    format_unexpected_error,
    format_validation_error,
)
from .notifications.router import router as notifications_router

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'POST, OPTIONS, GET',
    'Access-Control-Allow-Headers': 'Content-Type',
}


def create_app(settings: Optional[Settings] = None,
               provider: Optional[MessagingClientProvider] = None,
               configure_logging: bool = True) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings, defaults to the environment
        provider: Messaging client provider, defaults to one built from settings
        configure_logging: Install the JSON log formatter on the root logger
    """
    settings = settings or default_settings
    if configure_logging:
        setup_logging(settings)
    prefix = get_prefix(path_prefix=settings.path_prefix)
    logger.info(f"Start HTTP server with prefix: {prefix}")

    app = FastAPI(root_path=prefix, title="Push Gateway API", version="1.0.0")
    app.state.settings = settings
    # Firebase itself is initialized on first use
    app.state.messaging_provider = provider or MessagingClientProvider(settings.firebase_service_account)

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        for key, value in CORS_HEADERS.items():
            response.headers[key] = value
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return format_method_not_allowed()
        return await http_exception_handler(request, exc)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.warning(f"Rejected notification request: {exc.code}")
        return format_validation_error(exc)

    @app.exception_handler(ConfigError)
    async def config_error_handler(request: Request, exc: ConfigError):
        logger.error(f"Firebase configuration error: {str(exc)}")
        return format_config_error(exc)

    @app.exception_handler(DispatchError)
    async def dispatch_error_handler(request: Request, exc: DispatchError):
        return format_dispatch_error(exc)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error: {str(exc)}", exc_info=True)
        return format_unexpected_error(exc)

    app.include_router(notifications_router)

    return app


app = create_app()


def main():
    """Run the gateway with uvicorn."""
    logger.info(f"Starting push gateway in {default_settings.environment} environment")
    uvicorn.run("push_gateway.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
