"""
Main FastAPI application module.

This is the main entry point for the Agent Registry service: registration,
discovery search and cached agent card retrieval.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import (
    cache_router,
    cards_router,
    health_router,
    registry_router,
    search_router,
    agents_router,
)
from .common.health_check_middleware import add_health_check_middleware, setup_health_check_suppression
from .common.logging_config import get_logger
from .common.secure_logging_utils import log_exception_safely
from .errors import CardUnavailable, InvalidInput, NotFound, RegistryError, StoreUnavailable
from .utils.dependencies import get_registry_service, get_settings

logger = get_logger(__name__)

ERROR_STATUS_CODES = {
    InvalidInput: 400,
    NotFound: 404,
    StoreUnavailable: 500,
    CardUnavailable: 503,
}


def _resolve(app: FastAPI, provider):
    # Honour dependency overrides so tests never build real clients
    return app.dependency_overrides.get(provider, provider)()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle application startup and shutdown events.

    Startup ensures the agents index exists and starts the card cache
    sweeper. An unreachable cluster does not stop the service; /health
    reports it as unhealthy until it recovers.
    """
    settings = _resolve(app, get_settings)
    logger.info(f"Agent registry starting up (index: {settings.index_name})")

    setup_health_check_suppression()

    registry = _resolve(app, get_registry_service)

    try:
        registry.store.ensure_index()
        logger.info("Search index ready")
    except RegistryError as e:
        log_exception_safely(logger, "Index initialization failed", e)
        logger.info("Continuing startup - index will be checked again on the next write")

    registry.cache.start_sweeper()
    logger.info("Ready to handle registry requests")

    yield

    logger.info("Agent registry shutting down")
    registry.cache.stop_sweeper()
    try:
        await registry.aclose()
    except Exception as e:
        log_exception_safely(logger, "Error releasing registry resources", e, level=logging.WARNING)
    logger.info("All resources cleaned up successfully")


def _error_body(exc: RegistryError) -> dict:
    body = {"error": exc.message}
    if isinstance(exc, CardUnavailable):
        body["agentId"] = exc.agent_id
        body["url"] = exc.url
    return body


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Agent Registry",
        description="Registration, discovery search and cached agent cards for networked agents",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    allowed_origins = list(settings.cors_allowed_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials="*" not in allowed_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "User-Agent"],
    )

    add_health_check_middleware(app)

    @app.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError):
        """Map registry errors to status codes with an ``{"error": ...}`` body."""
        status_code = ERROR_STATUS_CODES.get(type(exc), 500)
        if status_code >= 500:
            logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=status_code, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors as 400 with per-field messages."""
        errors = exc.errors()
        logger.warning(f"Validation error on {request.method} {request.url.path}: {len(errors)} error(s)")

        error_details = []
        for error in errors:
            loc = ".".join(str(x) for x in error["loc"] if x not in ("body", "query", "path"))
            msg = error["msg"]
            error_details.append(f"{loc}: {msg}" if loc else msg)

        return JSONResponse(status_code=400, content={"error": "; ".join(error_details)})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        log_exception_safely(logger, f"Unhandled error on {request.method} {request.url.path}", exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.include_router(health_router, tags=["Health"])
    app.include_router(registry_router, tags=["Registry"])
    app.include_router(agents_router, tags=["Agents"])
    app.include_router(search_router, tags=["Search"])
    app.include_router(cards_router, tags=["Agent Cards"])
    app.include_router(cache_router, tags=["Cache"])

    return app


# Create the application instance
app = create_application()


def main() -> None:
    """Run the registry with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "agent_registry.main:app",
        host=settings.host,
        port=settings.port,
        log_level="info",
    )


if __name__ == '__main__':
    main()
