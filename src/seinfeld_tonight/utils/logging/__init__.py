# ABOUTME: Logging configuration and structured logger helpers
# ABOUTME: Provides loguru sinks and structlog-bound loggers for the pipeline

from .config import LoggingMode, configure_logging, detect_logging_mode, get_logging_status
from .utils import get_logger, log_api_call, with_pipeline_context

__all__ = [
    # Configuration
    "LoggingMode",
    "configure_logging",
    "detect_logging_mode",
    "get_logging_status",
    # Utilities
    "get_logger",
    "log_api_call",
    "with_pipeline_context",
]
