"""
Exceptions module - Custom exception hierarchy.

This module defines all custom exceptions used throughout Web Macro,
providing clear error types for different failure scenarios.
"""

from web_macro.exceptions.base import (
    WebMacroError,
    ConfigurationError,
    StorageError,
    InvalidStateError,
)
from web_macro.exceptions.browser import (
    BrowserError,
    SessionError,
    BrowserLaunchError,
    PageError,
    NavigationError,
    ElementNotFoundError,
)
from web_macro.exceptions.session import LoginFailedError
from web_macro.exceptions.action import (
    ActionError,
    ActionValidationError,
    ActionExecutionError,
)

__all__ = [
    # Base exceptions
    "WebMacroError",
    "ConfigurationError",
    "StorageError",
    "InvalidStateError",
    # Browser exceptions
    "BrowserError",
    "SessionError",
    "BrowserLaunchError",
    "PageError",
    "NavigationError",
    "ElementNotFoundError",
    # Authentication
    "LoginFailedError",
    # Action exceptions
    "ActionError",
    "ActionValidationError",
    "ActionExecutionError",
]
