"""
Utility modules for Remote Bridge

Contains configuration management, logging setup, and error handling.
"""

from .config import Config, RemoteConfig, LoggingConfig
from .logging_setup import setup_logging, get_logger
from .error_handler import ErrorHandler, ErrorInfo, ErrorSeverity, ErrorCategory

__all__ = [
    "Config",
    "RemoteConfig",
    "LoggingConfig",
    "setup_logging",
    "get_logger",
    "ErrorHandler",
    "ErrorInfo",
    "ErrorSeverity",
    "ErrorCategory"
]
