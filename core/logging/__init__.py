"""Structured logging: JSON-lines file sink, console sink, context binding."""
from .config import bootstrap_logging, shutdown_logging
from .context import log_context
from .logger import StructuredLogger, get_logger, traceable

__all__ = [
    'bootstrap_logging',
    'shutdown_logging',
    'log_context',
    'StructuredLogger',
    'get_logger',
    'traceable',
]
