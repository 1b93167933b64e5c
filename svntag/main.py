"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from svntag import __version__
from svntag.api.middleware import RequestContextMiddleware
from svntag.api.v1.router import router as v1_router
from svntag.config import settings
from svntag.core.exceptions import (
    ConfigurationError,
    PathResolutionError,
    SvnTagError,
    TemplateError,
)
from svntag.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

# 422 as a number: its status constant name differs across Starlette releases
_STATUS_BY_ERROR = {
    TemplateError: 422,
    PathResolutionError: 422,
    ConfigurationError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    configure_logging()
    logger.info(
        "application.starting",
        version=__version__,
        environment=settings.app_env,
        svn_binary=settings.svn_binary,
        config_db_path=settings.config_db_path,
    )

    yield

    logger.info("application.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="svntag API",
        description="Creates Subversion tags for finished builds",
        version=__version__,
        docs_url="/docs" if settings.app_debug else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.add_middleware(RequestContextMiddleware)

    @app.exception_handler(SvnTagError)
    async def svntag_error_handler(request: Request, exc: SvnTagError) -> JSONResponse:
        """Render tagging and configuration errors as JSON."""
        status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        logger.warning(
            "request.failed",
            path=request.url.path,
            error=exc.message,
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=status_code,
            content={
                "error": {
                    "code": type(exc).__name__.upper(),
                    "message": exc.message,
                    "details": exc.details,
                }
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors."""
        logger.error(
            "unhandled_exception",
            error=str(exc),
            path=request.url.path,
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                }
            },
        )

    app.include_router(v1_router)

    return app


app = create_app()
