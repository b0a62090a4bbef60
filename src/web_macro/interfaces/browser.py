"""
Browser Interface - Abstract base classes for the browser driver.

This module defines the capability surface the macro engine depends on.
The Playwright binding in ``web_macro.browsers`` implements it; tests
substitute lightweight fakes.

Example:
    >>> from web_macro.browsers import PlaywrightBrowser
    >>> browser = PlaywrightBrowser()
    >>> await browser.launch(headless=True)
    >>> context = await browser.new_context(viewport={"width": 1280, "height": 720})
    >>> page = await context.new_page()
    >>> await page.goto("https://example.com")
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, Optional


class BrowserType(Enum):
    """Supported browser types."""
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


class IElement(ABC):
    """
    Abstract interface for interacting with a resolved UI element.

    This interface wraps a live browser element reference, or any other
    addressable target such as a viewport point.
    """

    @abstractmethod
    async def click(self, **options: Any) -> None:
        """
        Click on this element.

        Args:
            **options: Browser-specific click options (e.g., button, modifiers)
        """
        ...

    @abstractmethod
    async def fill(self, value: str, **options: Any) -> None:
        """
        Replace the content of this element with text.

        Args:
            value: The text to fill
            **options: Browser-specific fill options
        """
        ...

    @abstractmethod
    async def text_content(self) -> Optional[str]:
        """Get the text content of this element."""
        ...

    @abstractmethod
    async def get_attribute(self, name: str) -> Optional[str]:
        """Get an attribute value, or None if not present."""
        ...

    @abstractmethod
    async def is_visible(self) -> bool:
        """Check if this element is visible."""
        ...


class IPage(ABC):
    """
    Abstract interface for browser page operations.

    Covers navigation, element lookup, point-based input and the hooks the
    recorder needs to observe the live page.
    """

    @property
    @abstractmethod
    def url(self) -> str:
        """Get the current page URL."""
        ...

    @abstractmethod
    async def goto(self, url: str, **options: Any) -> None:
        """
        Navigate to a URL.

        Args:
            url: The URL to navigate to
            **options: Browser-specific navigation options (e.g., wait_until, timeout)

        Raises:
            NavigationError: If the page cannot be loaded
        """
        ...

    @abstractmethod
    async def query_selector(self, selector: str) -> Optional[IElement]:
        """
        Find the first element matching a selector without waiting.

        Args:
            selector: CSS selector or engine-prefixed selector (xpath=, text=)

        Returns:
            The matching element, or None if not found
        """
        ...

    @abstractmethod
    async def wait_for_selector(
        self,
        selector: str,
        timeout: Optional[int] = None,
        state: str = "visible",
    ) -> Optional[IElement]:
        """
        Wait for an element matching the selector to appear.

        Args:
            selector: CSS selector or engine-prefixed selector (xpath=, text=)
            timeout: Maximum time to wait in milliseconds
            state: Expected element state ('attached', 'visible')

        Returns:
            The matching element, or None on timeout or no match
        """
        ...

    @abstractmethod
    async def mouse_click(self, x: float, y: float) -> None:
        """Click at a viewport point."""
        ...

    @abstractmethod
    async def keyboard_type(self, text: str) -> None:
        """Type text into the focused element."""
        ...

    @abstractmethod
    async def keyboard_press(self, key: str) -> None:
        """Press a key or chord, e.g. 'Control+A'."""
        ...

    @abstractmethod
    async def scroll_to(self, x: float, y: float) -> None:
        """Scroll the window to absolute coordinates."""
        ...

    @abstractmethod
    async def evaluate(self, expression: str, *args: Any) -> Any:
        """
        Execute JavaScript in the page context.

        Args:
            expression: JavaScript expression or function to execute
            *args: Arguments to pass to the function

        Returns:
            The result of the JavaScript execution
        """
        ...

    @abstractmethod
    async def expose_function(self, name: str, callback: Callable[..., Any]) -> None:
        """Expose a Python callable to page scripts as ``window[name]``."""
        ...

    @abstractmethod
    async def add_init_script(self, script: str) -> None:
        """Register a script to run in every document before page scripts."""
        ...

    @abstractmethod
    async def wait_for_load_state(self, state: str = "load", timeout: Optional[int] = None) -> None:
        """
        Wait for the page to reach a specific load state.

        Args:
            state: Load state to wait for ('load', 'domcontentloaded', 'networkidle')
            timeout: Maximum time to wait in milliseconds
        """
        ...

    @abstractmethod
    async def wait_for_timeout(self, timeout: float) -> None:
        """Wait for a specified amount of time in milliseconds."""
        ...

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """Whether the page has been closed."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close this page."""
        ...


class IBrowserContext(ABC):
    """
    Abstract interface for browser context (isolated session).

    A browser context provides an isolated environment with its own cookies,
    localStorage, and cache. One context is created per account execution.
    """

    @abstractmethod
    async def new_page(self) -> IPage:
        """Create a new page in this context."""
        ...

    @abstractmethod
    def set_default_timeout(self, timeout_ms: float) -> None:
        """Set the default timeout for operations on every page of this context."""
        ...

    @abstractmethod
    async def add_init_script(self, script: str) -> None:
        """Register a script to run in every document of this context."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close this context and all its pages."""
        ...


class IBrowser(ABC):
    """
    Abstract interface for browser management.

    This interface defines the contract for launching the browser process
    and creating isolated contexts from it.
    """

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Check if the browser is connected and running."""
        ...

    @abstractmethod
    async def launch(
        self,
        headless: bool = True,
        browser_type: BrowserType = BrowserType.CHROMIUM,
        **options: Any,
    ) -> None:
        """
        Launch a browser instance.

        Args:
            headless: Whether to run in headless mode
            browser_type: Type of browser to launch
            **options: Browser-specific launch options (args, slow_mo, ...)

        Raises:
            BrowserLaunchError: If the browser cannot be started
        """
        ...

    @abstractmethod
    async def new_context(
        self,
        viewport: Optional[Dict[str, int]] = None,
        user_agent: Optional[str] = None,
        **options: Any,
    ) -> IBrowserContext:
        """
        Create a new isolated browser context.

        Args:
            viewport: {"width": ..., "height": ...}
            user_agent: Optional user agent override
            **options: Browser-specific context options

        Returns:
            A new browser context
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the browser and cleanup resources."""
        ...
