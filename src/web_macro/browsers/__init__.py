"""
Browsers module - Browser driver implementations.
"""

from web_macro.browsers.playwright_browser import (
    PlaywrightBrowser,
    PlaywrightContext,
    PlaywrightPage,
    PlaywrightElement,
)

__all__ = [
    "PlaywrightBrowser",
    "PlaywrightContext",
    "PlaywrightPage",
    "PlaywrightElement",
]
