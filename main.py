import uvicorn
from loguru import logger

from config.base import get_settings
from core.infrastructure.logging import RequestTrackingMiddleware, setup_logging


def create_app():
    """Create and configure FastAPI application instance

    Sets up application lifespan events, middleware, exception handlers,
    and API routers.

    Returns
    -------
    FastAPI
        Deployment-ready FastAPI instance.

    Raises
    ------
    Exception
        If exception occurs in lifespan.

    """
    from contextlib import asynccontextmanager

    from fastapi import FastAPI, HTTPException
    from fastapi.exceptions import RequestValidationError, ResponseValidationError
    from pydantic import ValidationError
    from starlette.exceptions import HTTPException as StarletteHTTPException

    from core.infrastructure.exceptions import global_exception_handler
    from core.presentation.health import router as health_router
    from notifications.infrastructure.factory import (
        close_push_gateway,
        get_push_gateway,
    )
    from notifications.presentation import router as notification_router

    @asynccontextmanager
    async def custom_lifespan(app):
        """Manage application startup and shutdown lifecycle.

        Handles application logging setup, push gateway initialization,
        and proper cleanup during shutdown to prevent resource leaks.

        Parameters
        ----------
        app : FastAPI
            FastAPI application instance.

        Yields
        ------
        None
            Control to application after startup, and before shutdown.

        Raises
        ------
        Exception
            If the push gateway cannot be initialized.
        """
        setup_logging()
        settings = get_settings()

        try:
            logger.debug("🔧 Initializing push gateway...")
            await get_push_gateway()
            mode = "dry-run" if settings.firebase_dry_run else "live"
            logger.info(f"🟢 Push gateway ready in {mode} mode.")

        except Exception as e:
            logger.error(f"🔴 Push gateway initialization failed: {e}")
            raise e

        logger.info("🟢 Application startup completed.")
        logger.info("🚀✨ Push Dispatch is now running!")

        yield

        logger.debug("🔧 Starting shutdown cleanup...")

        try:
            logger.debug("🔧 Closing push gateway...")
            await close_push_gateway()
        except Exception as e:
            logger.error(f"🟠 Error closing push gateway: {e}")

        logger.debug("👋 Application shutting down...")

    app = FastAPI(title="Push Dispatch", lifespan=custom_lifespan)

    app.add_middleware(RequestTrackingMiddleware)

    app.add_exception_handler(ValueError, global_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(ValidationError, global_exception_handler)
    app.add_exception_handler(RequestValidationError, global_exception_handler)
    app.add_exception_handler(ResponseValidationError, global_exception_handler)
    app.add_exception_handler(HTTPException, global_exception_handler)
    app.add_exception_handler(StarletteHTTPException, global_exception_handler)

    app.include_router(health_router)
    app.include_router(notification_router)

    return app


if __name__ == "__main__":
    """Application entry point for direct execution.

    Configures logging with Loguru and starts Uvicorn server with optional SSL support.
    """
    setup_logging()
    settings = get_settings()
    logger.debug(
        f"🟢 Starting Push Dispatch in '{settings.environment.upper()}' mode!"
    )
    uvicorn.run(
        "main:create_app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        factory=True,
        log_config=None,
        ssl_keyfile=settings.ssl_keyfile_path,
        ssl_certfile=settings.ssl_certfile_path,
    )
