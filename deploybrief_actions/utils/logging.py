"""
Logging configuration and utilities
"""

import logging
import sys
from typing import Optional

from ..config import get_settings

WORKFLOW_COMMANDS = {
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


class WorkflowCommandFormatter(logging.Formatter):
    """Formatter that turns warnings and errors into runner annotations"""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = WORKFLOW_COMMANDS.get(record.levelno)
        if command is None:
            return message
        # Workflow commands are single-line; the runner decodes these escapes.
        escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        return f"::{command}::{escaped}"


def setup_logging(
    name: Optional[str] = None,
    level: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Setup logging configuration

    Args:
        name: Logger name
        level: Log level
        format_string: Log format string

    Returns:
        Configured logger instance
    """
    settings = get_settings()

    # Use provided parameters or fall back to settings
    log_level = level or settings.log_level
    log_format = format_string or settings.log_format

    logger = logging.getLogger(name or __name__)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # On a runner the timestamp prefix is noise; the log viewer adds its own
    if settings.github_actions and format_string is None:
        formatter = WorkflowCommandFormatter("%(message)s")
    else:
        formatter = logging.Formatter(log_format)
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return setup_logging(name)


class LoggerMixin:
    """Mixin class to add logging capability to other classes"""

    @property
    def logger(self) -> logging.Logger:
        """Get logger for this class"""
        return get_logger(self.__class__.__name__)
