"""
Utilities module - Common utility functions.
"""

from web_macro.utils.logging import setup_logging, setup_logging_from_settings, get_logger
from web_macro.utils.retry import retry_async, RetryConfig

__all__ = [
    "setup_logging",
    "setup_logging_from_settings",
    "get_logger",
    "retry_async",
    "RetryConfig",
]
