"""
Selector Resolver - Ranked fallback resolution of a recorded selector.

Strategies (tried in order, first match wins):
1. CSS - the recorded CSS selector
2. XPATH - the recorded XPath through the ``xpath=`` engine
3. TEXT - visible text through the ``text=`` engine
4. COORDINATES - a point handle at the recorded element center

Each strategy waits at most ``timeout_ms``. A strategy that times out or
does not match leaves the page untouched and resolution moves on.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence, TYPE_CHECKING
import logging

from web_macro.exceptions.browser import ElementNotFoundError
from web_macro.interfaces.browser import IElement
from web_macro.models.selector import Selector

if TYPE_CHECKING:
    from web_macro.interfaces.browser import IPage

logger = logging.getLogger(__name__)

DEFAULT_RESOLVE_TIMEOUT_MS = 2000


class ResolutionStrategy(Enum):
    """Which strategy resolved the target."""
    CSS = "css"
    XPATH = "xpath"
    TEXT = "text"
    COORDINATES = "coordinates"


@dataclass
class ResolvedTarget:
    """A resolved target element."""
    element: IElement
    strategy: ResolutionStrategy
    query: str
    tried: List[str] = field(default_factory=list)


class CoordinateElement(IElement):
    """
    A viewport point that behaves like an element.
    
    Clicking sends a mouse click at the point; filling clicks to focus,
    selects the current content and types over it.
    """
    
    def __init__(self, page: "IPage", x: float, y: float):
        self._page = page
        self.x = x
        self.y = y
    
    async def click(self, **options: Any) -> None:
        await self._page.mouse_click(self.x, self.y)
    
    async def fill(self, value: str, **options: Any) -> None:
        await self._page.mouse_click(self.x, self.y)
        await self._page.keyboard_press("Control+A")
        await self._page.keyboard_type(value)
    
    async def text_content(self) -> Optional[str]:
        return None
    
    async def get_attribute(self, name: str) -> Optional[str]:
        return None
    
    async def is_visible(self) -> bool:
        return True


class SelectorResolver:
    """
    Resolve a ``Selector`` against a live page.
    
    Example:
        >>> resolver = SelectorResolver(timeout_ms=2000)
        >>> target = await resolver.resolve(Selector(css="#login"), page)
        >>> await target.element.click()
    """
    
    def __init__(self, timeout_ms: int = DEFAULT_RESOLVE_TIMEOUT_MS):
        self.timeout_ms = timeout_ms
    
    async def resolve(self, selector: Selector, page: "IPage") -> ResolvedTarget:
        """
        Resolve the selector, trying strategies strictly in order.
        
        Args:
            selector: Recorded selector
            page: Page to search
            
        Returns:
            ResolvedTarget naming the strategy that matched
            
        Raises:
            ElementNotFoundError: If no strategy matched, or the selector has none
        """
        tried: List[str] = []
        
        if not selector.is_valid:
            raise ElementNotFoundError(
                "Selector has no addressing strategy",
                selector=selector.describe(),
                tried_strategies=tried,
            )
        
        if selector.css:
            tried.append(ResolutionStrategy.CSS.value)
            element = await page.wait_for_selector(selector.css, timeout=self.timeout_ms)
            if element:
                return ResolvedTarget(element, ResolutionStrategy.CSS, selector.css, tried)
            logger.debug(f"CSS {selector.css!r} did not match, falling back")
        
        if selector.xpath:
            tried.append(ResolutionStrategy.XPATH.value)
            query = f"xpath={selector.xpath}"
            element = await page.wait_for_selector(query, timeout=self.timeout_ms)
            if element:
                return ResolvedTarget(element, ResolutionStrategy.XPATH, query, tried)
            logger.debug(f"XPath {selector.xpath!r} did not match, falling back")
        
        if selector.text:
            tried.append(ResolutionStrategy.TEXT.value)
            # Unquoted text= matches case-insensitively on a substring
            query = f"text={selector.text}"
            element = await page.wait_for_selector(query, timeout=self.timeout_ms)
            if element:
                return ResolvedTarget(element, ResolutionStrategy.TEXT, query, tried)
            logger.debug(f"Text {selector.text!r} did not match, falling back")
        
        if selector.coordinates is not None:
            tried.append(ResolutionStrategy.COORDINATES.value)
            point = selector.coordinates
            return ResolvedTarget(
                CoordinateElement(page, point.x, point.y),
                ResolutionStrategy.COORDINATES,
                f"{point.x:g},{point.y:g}",
                tried,
            )
        
        raise ElementNotFoundError(
            f"No strategy matched {selector.describe()}",
            selector=selector.describe(),
            tried_strategies=tried,
        )
    
    async def first_match(
        self,
        page: "IPage",
        candidates: Sequence[str],
        timeout_ms: Optional[int] = None,
    ) -> Optional[IElement]:
        """
        Return the element for the first candidate selector that matches.
        
        Candidates are tried in order, each bounded by ``timeout_ms``.
        """
        timeout = self.timeout_ms if timeout_ms is None else timeout_ms
        for candidate in candidates:
            element = await page.wait_for_selector(candidate, timeout=timeout)
            if element:
                logger.debug(f"Matched {candidate!r}")
                return element
        return None
