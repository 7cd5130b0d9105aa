"""
Utility functions and helpers
"""

from .actions import append_summary, load_event, set_output, set_outputs
from .logging import LoggerMixin, WorkflowCommandFormatter, get_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "LoggerMixin",
    "WorkflowCommandFormatter",
    "set_output",
    "set_outputs",
    "append_summary",
    "load_event",
]
