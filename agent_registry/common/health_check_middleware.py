"""
Health check logging suppression for the registry's FastAPI application.
Prevents load balancer health probes from cluttering the access log.
"""

import logging
from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

DEFAULT_HEALTH_CHECK_PATHS = ('/health',)

logger = logging.getLogger(__name__)


class HealthCheckLoggingFilter(logging.Filter):
    """
    Logging filter to drop uvicorn access lines for successful health checks.
    Failed probes are kept so outages still show up in the log.
    """

    def __init__(self, health_check_paths: Optional[Iterable[str]] = None):
        super().__init__()
        self.health_check_paths = tuple(health_check_paths or DEFAULT_HEALTH_CHECK_PATHS)

    def filter(self, record: logging.LogRecord) -> bool:
        if 'uvicorn' not in record.name and 'access' not in record.name.lower():
            return True

        message = record.getMessage()
        for path in self.health_check_paths:
            if (f'GET {path} ' in message or f'"GET {path}' in message) and ' 200' in message:
                return False

        return True


class HealthCheckSuppressionMiddleware(BaseHTTPMiddleware):
    """Tags health check responses so proxies and log pipelines can skip them."""

    def __init__(self, app, health_check_paths: Optional[Iterable[str]] = None):
        super().__init__(app)
        self.health_check_paths = tuple(health_check_paths or DEFAULT_HEALTH_CHECK_PATHS)

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        if request.url.path in self.health_check_paths:
            response.headers["X-Health-Check"] = "true"
        return response


def setup_health_check_suppression() -> None:
    """
    Install the health check filter on the uvicorn access logger.
    Safe to call more than once.
    """
    uvicorn_access_logger = logging.getLogger('uvicorn.access')

    existing_filters = [f for f in uvicorn_access_logger.filters if isinstance(f, HealthCheckLoggingFilter)]
    if not existing_filters:
        uvicorn_access_logger.addFilter(HealthCheckLoggingFilter())
        logger.info("Health check logging suppression filter installed")


def add_health_check_middleware(app) -> None:
    """
    Add health check suppression middleware to a FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(HealthCheckSuppressionMiddleware)
