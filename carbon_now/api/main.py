"""
FastAPI Application
==================

HTTP wrapper around the Carbon pipeline. Every failure is answered with
status 500 and a JSON ``ErrorResponse``; no partial image is ever sent.
"""

import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from carbon_now.api.routes.health import router as health_router
from carbon_now.api.routes.render import router as render_router
from carbon_now.config.logging import get_logger, setup_logging
from carbon_now.config.settings import get_settings
from carbon_now.core.exceptions import CarbonNowError
from carbon_now.models.schemas import ErrorResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    setup_logging(settings)
    settings.workspace_root.mkdir(parents=True, exist_ok=True)
    logger.info(
        "Starting carbon-now service",
        workspace_root=str(settings.workspace_root),
        carbon_url=settings.carbon_url,
    )
    try:
        yield
    finally:
        logger.info("Shutting down carbon-now service")


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    error_code: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    error_response = ErrorResponse(
        error=error,
        error_code=error_code,
        details=details,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(status_code=status_code, content=error_response.model_dump(mode="json"))


def create_app() -> FastAPI:
    """
    Application factory function for creating FastAPI app instance.

    Returns:
        FastAPI application instance
    """
    settings = get_settings()
    app = FastAPI(
        title="carbon-now",
        description="Turn source code into beautiful images with Carbon",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_hosts,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):  # type: ignore
        """Add request ID to all requests."""
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(CarbonNowError)
    async def carbon_now_exception_handler(request: Request, exc: CarbonNowError) -> JSONResponse:
        """All pipeline errors map to 500; the kind is only in the body."""
        logger.error(
            "Carbonize error",
            error_code=exc.error_code,
            error_message=str(exc),
            task=exc.task_title,
        )
        details = {"task": exc.task_title} if exc.task_title else None
        return _error_response(request, 500, str(exc), exc.error_code, details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(request, exc.status_code, str(exc.detail), str(exc.status_code))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """General exception handler for unexpected errors."""
        logger.error(
            "Unhandled exception",
            exception=str(exc),
            request_id=getattr(request.state, "request_id", None),
            exc_info=True,
        )
        details = {"exception": str(exc)} if settings.debug else None
        return _error_response(request, 500, "Internal server error", "INTERNAL_ERROR", details)

    app.include_router(render_router)
    app.include_router(health_router)
    return app


app = create_app()


def run_server() -> None:
    """Run the HTTP service with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "carbon_now.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    run_server()
