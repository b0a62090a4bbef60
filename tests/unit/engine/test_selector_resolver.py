"""
Tests for SelectorResolver - ranked fallback resolution.
"""

import pytest

from web_macro.engine.selector_resolver import (
    CoordinateElement,
    ResolutionStrategy,
    SelectorResolver,
)
from web_macro.exceptions import ElementNotFoundError
from web_macro.models import Coordinates, Selector


@pytest.fixture
def resolver():
    """Create a resolver with a short timeout."""
    return SelectorResolver(timeout_ms=100)


FULL_SELECTOR = Selector(
    css="#vote",
    xpath="//button[1]",
    text="Vote now",
    coordinates=Coordinates(120, 48),
)


class TestResolutionOrder:
    """Strategies are tried strictly in order."""
    
    @pytest.mark.asyncio
    async def test_css_match_short_circuits(self, resolver, fakes):
        """When css matches, nothing else is attempted."""
        button = fakes.Element("Vote now")
        page = fakes.Page({
            "#vote": button,
            "xpath=//button[1]": fakes.Element(),
            "text=Vote now": fakes.Element(),
        })
        
        target = await resolver.resolve(FULL_SELECTOR, page)
        
        assert target.element is button
        assert target.strategy is ResolutionStrategy.CSS
        assert target.tried == ["css"]
        assert page.queried == ["#vote"]
        assert page.calls == []
    
    @pytest.mark.asyncio
    async def test_falls_back_to_xpath(self, resolver, fakes):
        """A css miss moves on to xpath."""
        button = fakes.Element()
        page = fakes.Page({"xpath=//button[1]": button})
        
        target = await resolver.resolve(FULL_SELECTOR, page)
        
        assert target.element is button
        assert target.strategy is ResolutionStrategy.XPATH
        assert target.tried == ["css", "xpath"]
        assert page.queried == ["#vote", "xpath=//button[1]"]
    
    @pytest.mark.asyncio
    async def test_falls_back_to_text(self, resolver, fakes):
        """Text is tried after css and xpath."""
        button = fakes.Element("Vote now")
        page = fakes.Page({"text=Vote now": button})
        
        target = await resolver.resolve(FULL_SELECTOR, page)
        
        assert target.element is button
        assert target.strategy is ResolutionStrategy.TEXT
        assert target.tried == ["css", "xpath", "text"]
    
    @pytest.mark.asyncio
    async def test_falls_back_to_coordinates(self, resolver, fakes):
        """Coordinates are the last resort."""
        page = fakes.Page()
        
        target = await resolver.resolve(FULL_SELECTOR, page)
        
        assert target.strategy is ResolutionStrategy.COORDINATES
        assert isinstance(target.element, CoordinateElement)
        assert target.tried == ["css", "xpath", "text", "coordinates"]
        assert page.calls == []
    
    @pytest.mark.asyncio
    async def test_absent_strategies_are_skipped(self, resolver, fakes):
        """Only present strategies are tried."""
        page = fakes.Page({"text=Submit": fakes.Element("Submit")})
        
        target = await resolver.resolve(Selector(text="Submit"), page)
        
        assert target.tried == ["text"]
        assert page.queried == ["text=Submit"]


class TestResolutionFailure:
    """Exhausted or empty selectors raise."""
    
    @pytest.mark.asyncio
    async def test_all_strategies_exhausted(self, resolver, fakes):
        """No match and no coordinates raises with the tried list."""
        page = fakes.Page()
        selector = Selector(css="#missing", xpath="//missing", text="Missing")
        
        with pytest.raises(ElementNotFoundError) as exc:
            await resolver.resolve(selector, page)
        
        assert exc.value.tried_strategies == ["css", "xpath", "text"]
        assert exc.value.selector == "#missing"
    
    @pytest.mark.asyncio
    async def test_empty_selector_fails_without_querying(self, resolver, fakes):
        """An empty selector never touches the page."""
        page = fakes.Page()
        
        with pytest.raises(ElementNotFoundError) as exc:
            await resolver.resolve(Selector(), page)
        
        assert exc.value.tried_strategies == []
        assert page.queried == []


class TestCoordinateElement:
    """Point handles act at the recorded position."""
    
    @pytest.mark.asyncio
    async def test_click(self, fakes):
        """Click sends a mouse click at the point."""
        page = fakes.Page()
        await CoordinateElement(page, 10, 20).click()
        assert page.calls == [("mouse_click", 10, 20)]
    
    @pytest.mark.asyncio
    async def test_fill_replaces_content(self, fakes):
        """Fill focuses, selects all and types."""
        page = fakes.Page()
        await CoordinateElement(page, 10, 20).fill("hello")
        assert page.calls == [
            ("mouse_click", 10, 20),
            ("keyboard_press", "Control+A"),
            ("keyboard_type", "hello"),
        ]


class TestFirstMatch:
    """First match over plain selector candidates."""
    
    @pytest.mark.asyncio
    async def test_returns_first_matching_candidate(self, resolver, fakes):
        """Later candidates are not queried once one matches."""
        field = fakes.Element()
        page = fakes.Page({'input[name="email"]': field, 'input[id="email"]': fakes.Element()})
        
        result = await resolver.first_match(
            page,
            ['input[type="email"]', 'input[name="email"]', 'input[id="email"]'],
        )
        
        assert result is field
        assert page.queried == ['input[type="email"]', 'input[name="email"]']
    
    @pytest.mark.asyncio
    async def test_no_match(self, resolver, fakes):
        """None when every candidate misses."""
        assert await resolver.first_match(fakes.Page(), ["#a", "#b"]) is None
