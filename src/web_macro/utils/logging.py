"""
Logging utilities for Web Macro.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from web_macro.config.settings import LoggingSettings

_PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_JSON_FORMAT = '{"time": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}'


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
    fmt: str = _PLAIN_FORMAT,
) -> None:
    """
    Configure logging for the application.
    
    Console output goes through Rich on stderr; an optional file handler
    receives plain or JSON-shaped lines.
    
    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        json_format: Use JSON format for the log file
        fmt: Format string for plain file output
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    
    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)
    
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(_JSON_FORMAT if json_format else fmt))
        root_logger.addHandler(file_handler)


def setup_logging_from_settings(settings: LoggingSettings, verbose: bool = False) -> None:
    """Configure logging from a LoggingSettings section; ``verbose`` forces DEBUG."""
    setup_logging(
        level="DEBUG" if verbose else settings.level,
        log_file=settings.file,
        json_format=settings.json_format,
        fmt=settings.format,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.
    
    Args:
        name: Logger name (usually __name__)
        
    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
