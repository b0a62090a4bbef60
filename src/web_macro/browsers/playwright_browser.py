"""
Playwright Browser - Implementation of IBrowser using Playwright.

This module provides the Playwright-based driver behind the browser interface.
"""

from typing import Any, Callable, Dict, Optional
import logging

from web_macro.interfaces.browser import (
    IBrowser,
    IBrowserContext,
    IPage,
    IElement,
    BrowserType,
)
from web_macro.exceptions.browser import (
    BrowserLaunchError,
    NavigationError,
    SessionError,
)

logger = logging.getLogger(__name__)


class PlaywrightElement(IElement):
    """
    Playwright implementation of IElement.

    Wraps a Playwright ElementHandle for interaction and inspection.
    """

    def __init__(self, element: Any, selector: str):
        """
        Initialize the element wrapper.

        Args:
            element: Playwright ElementHandle or Locator
            selector: The selector used to find this element
        """
        self._element = element
        self._selector = selector

    @property
    def selector(self) -> str:
        """Selector this element was found with."""
        return self._selector

    async def click(self, **options: Any) -> None:
        """Click on this element."""
        await self._element.click(**options)

    async def fill(self, value: str, **options: Any) -> None:
        """Replace this element's content with text; dropdowns select the value."""
        tag = await self._element.evaluate("el => el.tagName.toLowerCase()")
        if tag == "select":
            await self._element.select_option(value, **options)
        else:
            await self._element.fill(value, **options)

    async def text_content(self) -> Optional[str]:
        """Get text content."""
        return await self._element.text_content()

    async def get_attribute(self, name: str) -> Optional[str]:
        """Get an attribute value."""
        return await self._element.get_attribute(name)

    async def is_visible(self) -> bool:
        """Check if visible."""
        return await self._element.is_visible()


class PlaywrightPage(IPage):
    """
    Playwright implementation of IPage.

    Wraps a Playwright Page for navigation and interaction.
    """

    def __init__(self, page: Any):
        """
        Initialize the page wrapper.

        Args:
            page: Playwright Page object
        """
        self._page = page

    @property
    def url(self) -> str:
        """Get current URL."""
        return self._page.url

    @property
    def is_closed(self) -> bool:
        """Whether the underlying page is closed."""
        return self._page.is_closed()

    async def goto(self, url: str, **options: Any) -> None:
        """Navigate to URL."""
        try:
            await self._page.goto(url, **options)
        except Exception as e:
            raise NavigationError(f"Failed to navigate to {url}: {e}", url=url)

    async def query_selector(self, selector: str) -> Optional[IElement]:
        """Find first matching element."""
        element = await self._page.query_selector(selector)
        if element:
            return PlaywrightElement(element, selector)
        return None

    async def wait_for_selector(
        self,
        selector: str,
        timeout: Optional[int] = None,
        state: str = "visible",
    ) -> Optional[IElement]:
        """Wait for element; timeouts and malformed selectors yield None."""
        try:
            element = await self._page.wait_for_selector(
                selector,
                timeout=timeout,
                state=state,
            )
        except Exception as e:
            logger.debug(f"wait_for_selector({selector!r}) gave up: {e}")
            return None
        if element:
            return PlaywrightElement(element, selector)
        return None

    async def mouse_click(self, x: float, y: float) -> None:
        """Click at a viewport point."""
        await self._page.mouse.click(x, y)

    async def keyboard_type(self, text: str) -> None:
        """Type into the focused element."""
        await self._page.keyboard.type(text)

    async def keyboard_press(self, key: str) -> None:
        """Press a key chord."""
        await self._page.keyboard.press(key)

    async def scroll_to(self, x: float, y: float) -> None:
        """Scroll the window to absolute coordinates."""
        await self._page.evaluate("([x, y]) => window.scrollTo(x, y)", [x, y])

    async def evaluate(self, expression: str, *args: Any) -> Any:
        """Execute JavaScript."""
        return await self._page.evaluate(expression, *args)

    async def expose_function(self, name: str, callback: Callable[..., Any]) -> None:
        """Expose a Python callable to the page."""
        await self._page.expose_function(name, callback)

    async def add_init_script(self, script: str) -> None:
        """Register a script for every new document."""
        await self._page.add_init_script(script=script)

    async def wait_for_load_state(self, state: str = "load", timeout: Optional[int] = None) -> None:
        """Wait for load state."""
        try:
            await self._page.wait_for_load_state(state, timeout=timeout)
        except Exception as e:
            raise NavigationError(f"Page did not reach '{state}': {e}", url=self._page.url)

    async def wait_for_timeout(self, timeout: float) -> None:
        """Wait for timeout."""
        await self._page.wait_for_timeout(timeout)

    async def close(self) -> None:
        """Close page."""
        await self._page.close()


class PlaywrightContext(IBrowserContext):
    """
    Playwright implementation of IBrowserContext.
    """

    def __init__(self, context: Any):
        self._context = context

    async def new_page(self) -> IPage:
        """Create new page."""
        page = await self._context.new_page()
        return PlaywrightPage(page)

    def set_default_timeout(self, timeout_ms: float) -> None:
        """Set the default timeout for every page in the context."""
        self._context.set_default_timeout(timeout_ms)

    async def add_init_script(self, script: str) -> None:
        """Register a script for every document in the context."""
        await self._context.add_init_script(script=script)

    async def close(self) -> None:
        """Close context."""
        await self._context.close()


class PlaywrightBrowser(IBrowser):
    """
    Playwright implementation of IBrowser.

    Uses Playwright's async API. Every call to ``new_context`` yields a
    fresh, isolated context; no default context is shared between sessions.

    Example:
        >>> browser = PlaywrightBrowser()
        >>> await browser.launch(headless=True)
        >>> context = await browser.new_context()
        >>> page = await context.new_page()
        >>> await page.goto("https://example.com")
        >>> await browser.close()
    """

    def __init__(self):
        """Initialize the browser (not launched yet)."""
        self._playwright: Any = None
        self._browser: Any = None

    @property
    def is_connected(self) -> bool:
        """Check if browser is connected."""
        return self._browser is not None and self._browser.is_connected()

    async def launch(
        self,
        headless: bool = True,
        browser_type: BrowserType = BrowserType.CHROMIUM,
        **options: Any,
    ) -> None:
        """
        Launch the browser.

        Args:
            headless: Whether to run headless
            browser_type: Type of browser to launch
            **options: Additional Playwright launch options
        """
        try:
            from playwright.async_api import async_playwright

            self._playwright = await async_playwright().start()

            browser_launchers = {
                BrowserType.CHROMIUM: self._playwright.chromium,
                BrowserType.FIREFOX: self._playwright.firefox,
                BrowserType.WEBKIT: self._playwright.webkit,
            }
            launcher = browser_launchers.get(browser_type, self._playwright.chromium)

            self._browser = await launcher.launch(
                headless=headless,
                **options,
            )

            logger.info(f"Launched {browser_type.value} browser (headless={headless})")

        except Exception as e:
            await self._stop_driver()
            raise BrowserLaunchError(f"Failed to launch browser: {e}")

    async def new_context(
        self,
        viewport: Optional[Dict[str, int]] = None,
        user_agent: Optional[str] = None,
        **options: Any,
    ) -> IBrowserContext:
        """
        Create a new isolated browser context.

        Args:
            viewport: Viewport size, or None for Playwright's default
            user_agent: Optional user agent override
            **options: Context options

        Returns:
            New context instance
        """
        if not self._browser:
            raise SessionError("Browser not launched. Call launch() first.")

        if viewport is not None:
            options["viewport"] = viewport
        if user_agent:
            options["user_agent"] = user_agent

        try:
            context = await self._browser.new_context(**options)
        except Exception as e:
            raise SessionError(f"Failed to create browser context: {e}")
        return PlaywrightContext(context)

    async def close(self) -> None:
        """Close the browser and cleanup."""
        try:
            if self._browser:
                browser, self._browser = self._browser, None
                await browser.close()
        finally:
            await self._stop_driver()
        logger.info("Browser closed")

    async def _stop_driver(self) -> None:
        """Stop the Playwright driver process, if one was started."""
        if self._playwright:
            playwright, self._playwright = self._playwright, None
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning(f"Playwright driver did not stop cleanly: {e}")
