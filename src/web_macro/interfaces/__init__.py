"""
Interfaces module - Abstract base classes for the browser driver.

This module defines the contract that browser engines must implement to be
driven by the recorder, the replayer and the session manager.
"""

from web_macro.interfaces.browser import (
    IBrowser,
    IBrowserContext,
    IPage,
    IElement,
    BrowserType,
)

__all__ = [
    "IBrowser",
    "IBrowserContext",
    "IPage",
    "IElement",
    "BrowserType",
]
