"""
Centralized logging configuration for the agent registry.

This module provides a standardized logging setup so that every module
logs through the same handler and the same service-tagged format.
"""

import logging
import os
import sys
from typing import Optional

# Default log level
DEFAULT_LOG_LEVEL = "INFO"

# Environment variable for controlling log level
LOG_LEVEL_ENV_VAR = "LOG_LEVEL"

# Environment variable for service identification
SERVICE_NAME_ENV_VAR = "SERVICE_NAME"
DEFAULT_SERVICE_NAME = "agent-registry"


class ServiceNameFormatter(logging.Formatter):
    """
    Formatter that prepends the service name to every log message.

    Several registry instances usually ship to the same log group, so the
    service name (from the SERVICE_NAME environment variable) is stamped
    into each line.
    """

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None):
        self.service_name = os.environ.get(SERVICE_NAME_ENV_VAR, DEFAULT_SERVICE_NAME)
        self._custom_fmt = fmt is not None

        if fmt is None:
            fmt = self._default_format(self.service_name)

        super().__init__(fmt, datefmt)

    @staticmethod
    def _default_format(service_name: str) -> str:
        return f'%(asctime)s - [{service_name}] - %(name)s - %(levelname)s - %(message)s'

    def format(self, record: logging.LogRecord) -> str:
        # Pick up a renamed service without reinstalling handlers
        current_name = os.environ.get(SERVICE_NAME_ENV_VAR, self.service_name)
        if current_name != self.service_name and not self._custom_fmt:
            self.service_name = current_name
            self._style._fmt = self._default_format(current_name)

        return super().format(record)


# Module-specific log levels (can be overridden via environment variables)
MODULE_LOG_LEVELS = {
    "agent_registry.services.card_cache": "INFO",
    "agent_registry.services.document_store": "INFO",
    "elasticsearch": "WARNING",
    "elastic_transport": "WARNING",
    "httpx": "WARNING",
}


def get_log_level(module_name: Optional[str] = None) -> str:
    """
    Get the appropriate log level for a module.

    Args:
        module_name: Name of the module requesting log level

    Returns:
        Log level string (DEBUG, INFO, WARNING, ERROR)
    """
    global_level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if global_level:
        return global_level.upper()

    if module_name and module_name in MODULE_LOG_LEVELS:
        module_level_env = f"{LOG_LEVEL_ENV_VAR}_{module_name.replace('.', '_').upper()}"
        return os.environ.get(module_level_env, MODULE_LOG_LEVELS[module_name]).upper()

    return DEFAULT_LOG_LEVEL


def setup_logging(
    level: Optional[str] = None,
    module_name: Optional[str] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Set up logging for the process and return a logger for the module.

    Args:
        level: Log level override (DEBUG, INFO, WARNING, ERROR)
        module_name: Name of the calling module
        format_string: Custom format string for log messages

    Returns:
        Configured logger instance
    """
    if not level:
        level = get_log_level(module_name)

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ServiceNameFormatter(format_string))
        root_logger.setLevel(getattr(logging, level, logging.INFO))
        root_logger.addHandler(handler)

    # Quiet noisy client libraries unless explicitly overridden
    for noisy in ("elasticsearch", "elastic_transport", "httpx"):
        logging.getLogger(noisy).setLevel(getattr(logging, get_log_level(noisy), logging.WARNING))

    logger = logging.getLogger(module_name or __name__)
    logger.setLevel(getattr(logging, level, logging.INFO))
    return logger


def get_logger(module_name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a module, configuring logging on first use.

    Args:
        module_name: Name of the calling module

    Returns:
        Logger instance with service name formatting
    """
    if not module_name:
        import inspect
        frame = inspect.currentframe()
        if frame and frame.f_back:
            module_name = frame.f_back.f_globals.get('__name__', 'unknown')

    if not logging.getLogger().handlers:
        setup_logging(module_name=module_name)

    logger = logging.getLogger(module_name)
    level = get_log_level(module_name)
    logger.setLevel(getattr(logging, level, logging.INFO))
    return logger
