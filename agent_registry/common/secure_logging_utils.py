"""
Secure Logging Utilities

Logging helpers that keep credentials out of log output. Store URLs may carry
basic-auth userinfo and error messages from the search engine client echo
them back, so every exception is sanitized before it is written.
"""

import hashlib
import json
import logging
import os
import re
import traceback
from typing import Any, Dict, Optional


class SecureLogger:
    """Secure logging utilities to prevent sensitive data exposure while maintaining debugging capability."""

    MAX_MESSAGE_LENGTH = 3000

    def __init__(self):
        self.debug_mode = os.environ.get('DEBUG_STACK_TRACES', 'false').lower() == 'true'

    @staticmethod
    def sanitize_message(message: Any) -> str:
        """Sanitize log message to remove sensitive data while preserving structure."""
        if not isinstance(message, str):
            message = str(message)

        sanitized = message

        sensitive_patterns = [
            (r'(password["\']?\s*[:=]\s*["\']?)([^\s"\',]+)', r'\1***MASKED***'),
            (r'(secret["\']?\s*[:=]\s*["\']?)([^\s"\',]+)', r'\1***MASKED***'),
            (r'(api_key["\']?\s*[:=]\s*["\']?)([^\s"\',]+)', r'\1***MASKED***'),
            (r'(token["\']?\s*[:=]\s*["\']?)([^\s"\',]+)', r'\1***MASKED***'),
            (r'(authorization["\']?\s*[:=]\s*["\']?)([^"\',]+)', r'\1***MASKED***'),
            # user:password@host in URLs
            (r'(https?://)([^/\s:@]+):([^/\s@]+)@', r'\1\2:***MASKED***@'),
        ]

        for pattern, replacement in sensitive_patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        # Strip control characters but keep newlines for stack traces
        sanitized = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]', '', sanitized)

        if len(sanitized) > SecureLogger.MAX_MESSAGE_LENGTH:
            sanitized = sanitized[:SecureLogger.MAX_MESSAGE_LENGTH] + "... [truncated for security]"

        return sanitized

    def log_exception_securely(self, logger_instance: logging.Logger, context: str, exception: BaseException,
                               level: int = logging.ERROR) -> None:
        """
        Log an exception with a sanitized message.

        In debug mode a sanitized stack trace goes to a child ``.debug`` logger.
        """
        error_message = self.sanitize_message(str(exception))
        logger_instance.log(level, f"{context}: {type(exception).__name__}: {error_message}")

        if self.debug_mode:
            debug_logger = logging.getLogger(f"{logger_instance.name}.debug")
            stack_trace = "".join(traceback.format_exception(type(exception), exception, exception.__traceback__))
            debug_logger.debug(f"Stack trace for {context}: {self.sanitize_message(stack_trace)}")

    @staticmethod
    def hash_sensitive_value(value: str) -> str:
        """Create a short hash of a sensitive value for log correlation (not for password storage)."""
        if not value:
            return ""
        return hashlib.sha256(value.encode('utf-8')).hexdigest()[:16]

    @staticmethod
    def create_safe_context_info(context_data: Dict[str, Any]) -> Dict[str, str]:
        """Create safe context information for debugging while protecting sensitive data."""
        safe_context = {}

        for key, value in context_data.items():
            if any(sensitive in key.lower() for sensitive in ['password', 'secret', 'key', 'token']):
                safe_context[key] = f"HASHED:{SecureLogger.hash_sensitive_value(str(value))}"
            elif isinstance(value, (dict, list)):
                safe_context[key] = f"{type(value).__name__}(size={len(value)})"
            else:
                str_val = str(value)
                if len(str_val) > 100:
                    safe_context[key] = f"{str_val[:50]}...{str_val[-10:]} (length={len(str_val)})"
                else:
                    safe_context[key] = str_val

        return safe_context


def sanitize_for_logging(data: Any) -> str:
    """Sanitize any data for safe logging."""
    return SecureLogger.sanitize_message(data)


def log_exception_safely(
    logger_instance: logging.Logger,
    context: str,
    exception: BaseException,
    extra_context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception securely with optional context.

    Use this instead of logger.exception() for errors that may carry
    connection strings or credentials.
    """
    secure_logger = SecureLogger()
    secure_logger.log_exception_securely(logger_instance, context, exception, level=level)

    if extra_context:
        safe_context = secure_logger.create_safe_context_info(extra_context)
        logger_instance.log(level, f"Context for {context}: {json.dumps(safe_context)}")
