"""
Shared infrastructure helpers: logging setup, secure exception logging,
and health check log suppression.
"""

from .logging_config import get_logger, setup_logging
from .secure_logging_utils import log_exception_safely, sanitize_for_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "log_exception_safely",
    "sanitize_for_logging",
]
