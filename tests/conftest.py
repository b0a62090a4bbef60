"""
Pytest configuration and fixtures.
"""

from typing import Any, Callable, Dict, List, Optional

import pytest

from web_macro.config import (
    Settings,
    ExecutionSettings,
    LoginSettings,
    ReplaySettings,
    StorageSettings,
)
from web_macro.exceptions import PageError, SessionError
from web_macro.interfaces.browser import (
    BrowserType,
    IBrowser,
    IBrowserContext,
    IElement,
    IPage,
)


# =============================================================================
# FAKE BROWSER DRIVER
# =============================================================================

class FakeElement(IElement):
    """In-memory element that records interactions."""
    
    def __init__(self, text: str = "", visible: bool = True, fail: bool = False):
        self._text = text
        self._visible = visible
        self._fail = fail
        self.clicks = 0
        self.value: Optional[str] = None
    
    async def click(self, **options: Any) -> None:
        if self._fail:
            raise PageError("Element detached")
        self.clicks += 1
    
    async def fill(self, value: str, **options: Any) -> None:
        if self._fail:
            raise PageError("Element detached")
        self.value = value
    
    async def text_content(self) -> Optional[str]:
        return self._text
    
    async def get_attribute(self, name: str) -> Optional[str]:
        return None
    
    async def is_visible(self) -> bool:
        return self._visible


class FakePage(IPage):
    """
    In-memory page.
    
    ``elements`` maps exact selector strings (including ``xpath=`` and
    ``text=`` forms) to elements. Every call is appended to ``calls``.
    """
    
    def __init__(self, elements: Optional[Dict[str, FakeElement]] = None, url: str = "about:blank"):
        self.elements = dict(elements or {})
        self._url = url
        self.calls: List[tuple] = []
        self.queried: List[str] = []
        self.init_scripts: List[str] = []
        self.exposed: Dict[str, Callable] = {}
        self.evaluated: List[str] = []
        self.closed = False
        self.goto_error: Optional[Exception] = None
    
    @property
    def url(self) -> str:
        return self._url
    
    @property
    def is_closed(self) -> bool:
        return self.closed
    
    async def goto(self, url: str, **options: Any) -> None:
        self.calls.append(("goto", url))
        if self.goto_error:
            raise self.goto_error
        self._url = url
    
    async def query_selector(self, selector: str) -> Optional[IElement]:
        self.queried.append(selector)
        return self.elements.get(selector)
    
    async def wait_for_selector(
        self,
        selector: str,
        timeout: Optional[int] = None,
        state: str = "visible",
    ) -> Optional[IElement]:
        self.queried.append(selector)
        return self.elements.get(selector)
    
    async def mouse_click(self, x: float, y: float) -> None:
        self.calls.append(("mouse_click", x, y))
    
    async def keyboard_type(self, text: str) -> None:
        self.calls.append(("keyboard_type", text))
    
    async def keyboard_press(self, key: str) -> None:
        self.calls.append(("keyboard_press", key))
    
    async def scroll_to(self, x: float, y: float) -> None:
        self.calls.append(("scroll_to", x, y))
    
    async def evaluate(self, expression: str, *args: Any) -> Any:
        self.evaluated.append(expression)
        return None
    
    async def expose_function(self, name: str, callback: Callable[..., Any]) -> None:
        self.exposed[name] = callback
    
    async def add_init_script(self, script: str) -> None:
        self.init_scripts.append(script)
    
    async def wait_for_load_state(self, state: str = "load", timeout: Optional[int] = None) -> None:
        self.calls.append(("wait_for_load_state", state))
    
    async def wait_for_timeout(self, timeout: float) -> None:
        self.calls.append(("wait_for_timeout", timeout))
    
    async def close(self) -> None:
        self.closed = True


class FakeContext(IBrowserContext):
    """Context that hands out pages from a factory."""
    
    def __init__(self, page_factory: Callable[[], FakePage], options: Dict[str, Any]):
        self._page_factory = page_factory
        self.options = options
        self.pages: List[FakePage] = []
        self.init_scripts: List[str] = []
        self.default_timeout: Optional[float] = None
        self.closed = False

    def set_default_timeout(self, timeout_ms: float) -> None:
        self.default_timeout = timeout_ms

    async def new_page(self) -> IPage:
        page = self._page_factory()
        self.pages.append(page)
        return page
    
    async def add_init_script(self, script: str) -> None:
        self.init_scripts.append(script)
    
    async def close(self) -> None:
        self.closed = True


class FakeBrowser(IBrowser):
    """
    Browser that creates fake contexts.
    
    Args:
        page_factory: Builds the page for each new context
        fail_contexts: Number of leading ``new_context`` calls that raise SessionError
    """
    
    def __init__(self, page_factory: Optional[Callable[[], FakePage]] = None, fail_contexts: int = 0):
        self._page_factory = page_factory or FakePage
        self._fail_contexts = fail_contexts
        self._connected = False
        self.launches: List[Dict[str, Any]] = []
        self.contexts: List[FakeContext] = []
        self.closed = False
    
    @property
    def is_connected(self) -> bool:
        return self._connected
    
    async def launch(
        self,
        headless: bool = True,
        browser_type: BrowserType = BrowserType.CHROMIUM,
        **options: Any,
    ) -> None:
        self.launches.append({"headless": headless, "browser_type": browser_type, **options})
        self._connected = True
    
    async def new_context(
        self,
        viewport: Optional[Dict[str, int]] = None,
        user_agent: Optional[str] = None,
        **options: Any,
    ) -> IBrowserContext:
        if self._fail_contexts > 0:
            self._fail_contexts -= 1
            raise SessionError("Browser crashed")
        context = FakeContext(self._page_factory, {"viewport": viewport, "user_agent": user_agent, **options})
        self.contexts.append(context)
        return context
    
    async def close(self) -> None:
        self._connected = False
        self.closed = True


def login_page(rejected: bool = False, **extra: FakeElement) -> FakePage:
    """A page with a working login form; ``rejected`` shows an error banner."""
    elements: Dict[str, FakeElement] = {
        'input[type="email"]': FakeElement(),
        'input[type="password"]': FakeElement(),
        'button[type="submit"]': FakeElement("Login"),
    }
    if rejected:
        elements[".error"] = FakeElement("Invalid password")
    elements.update(extra)
    return FakePage(elements)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def settings(tmp_path) -> Settings:
    """Provide fast test settings: no pauses, no jitter, temporary storage."""
    return Settings(
        replay=ReplaySettings(
            resolve_timeout_ms=100,
            action_delay_min_ms=0,
            action_delay_max_ms=0,
        ),
        login=LoginSettings(password="secret", settle_ms=0),
        execution=ExecutionSettings(delay_between_accounts_s=0, randomize_delay=False),
        storage=StorageSettings(path=str(tmp_path / "store.json")),
    )


@pytest.fixture
def fake_page() -> FakePage:
    """Provide an empty fake page."""
    return FakePage(url="https://example.com")


@pytest.fixture
def fake_browser() -> FakeBrowser:
    """Provide a fake browser whose pages are empty."""
    return FakeBrowser()


@pytest.fixture
def fakes():
    """Expose the fake driver classes to test modules."""
    class Fakes:
        Element = FakeElement
        Page = FakePage
        Context = FakeContext
        Browser = FakeBrowser
        login_page = staticmethod(login_page)
    return Fakes
