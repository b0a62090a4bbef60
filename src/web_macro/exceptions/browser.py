"""
Browser-related exceptions.
"""

from typing import List, Optional

from web_macro.exceptions.base import WebMacroError


class BrowserError(WebMacroError):
    """Base exception for browser-related errors."""
    pass


class SessionError(BrowserError):
    """
    Driver-level failure opening or closing an isolated session.
    
    Raised when a browser context or page cannot be created, for example
    because the browser process died.
    """
    
    def __init__(self, message: str, session_id: str | None = None):
        super().__init__(message, {"session_id": session_id} if session_id else None)
        self.session_id = session_id


class BrowserLaunchError(SessionError):
    """
    Error launching the browser.
    
    Raised when the browser fails to start, which could be due to:
    - Missing browser binaries
    - Invalid browser options
    - Resource constraints
    """
    pass


class PageError(BrowserError):
    """Base exception for page-related errors."""
    pass


class NavigationError(PageError):
    """
    Error during page navigation.
    
    Raised when navigation fails, such as:
    - Invalid URL
    - Network error
    - Navigation or network-idle timeout
    """
    
    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(message, {"url": url, "status_code": status_code})
        self.url = url
        self.status_code = status_code


class ElementNotFoundError(PageError):
    """
    Element not found on the page.
    
    Raised when every addressing strategy of a selector has been tried
    without a match.
    
    Attributes:
        selector: Description of the selector that failed
        tried_strategies: Strategy names attempted, in order
    """
    
    def __init__(
        self,
        message: str,
        selector: str,
        tried_strategies: Optional[List[str]] = None,
    ):
        tried = list(tried_strategies or [])
        super().__init__(message, {"selector": selector, "tried_strategies": tried})
        self.selector = selector
        self.tried_strategies = tried
