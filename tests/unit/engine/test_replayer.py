"""
Tests for MacroReplayer - ordered, fail-fast action replay.
"""

from unittest.mock import patch

import pytest

from web_macro.config import ReplaySettings
from web_macro.engine.replayer import MacroReplayer
from web_macro.models import (
    ClickAction,
    Coordinates,
    NavigateAction,
    ScrollAction,
    Selector,
    TypeAction,
    WaitAction,
)


def click(n: int, css: str) -> ClickAction:
    return ClickAction(id=f"action_{n}", timestamp=n, description=f"Click {css}", selector=Selector(css=css))


@pytest.fixture
def replayer():
    """Create a replayer without pauses."""
    return MacroReplayer(ReplaySettings(resolve_timeout_ms=100, action_delay_min_ms=0, action_delay_max_ms=0))


class TestReplaySuccess:
    """Happy-path replay."""
    
    @pytest.mark.asyncio
    async def test_click_type_wait(self, replayer, fakes):
        """Click, type and wait all run in order."""
        vote = fakes.Element()
        comment = fakes.Element()
        page = fakes.Page({"#vote": vote, "#comment": comment})
        actions = [
            click(1, "#vote"),
            TypeAction(id="action_2", timestamp=2, description="Type", selector=Selector(css="#comment"), text="hello"),
            WaitAction(id="action_3", timestamp=3, description="Wait", duration_ms=1000),
        ]
        
        result = await replayer.replay(actions, page)
        
        assert result.success
        assert result.actions_executed == 3
        assert result.failed_index is None
        assert vote.clicks == 1
        assert comment.value == "hello"
        assert page.calls == [("wait_for_timeout", 1000)]
    
    @pytest.mark.asyncio
    async def test_scroll(self, replayer, fakes):
        """Scroll goes to the stored window position."""
        page = fakes.Page()
        await replayer.execute([ScrollAction(id="action_1", timestamp=1, description="Scroll", x=0, y=640)], page)
        assert page.calls == [("scroll_to", 0, 640)]
    
    @pytest.mark.asyncio
    async def test_navigate_waits_for_network_idle(self, replayer, fakes):
        """Navigate loads the url then waits for networkidle."""
        page = fakes.Page()
        ok = await replayer.execute(
            [NavigateAction(id="action_1", timestamp=1, description="Go", url="https://example.com/poll")],
            page,
        )
        assert ok
        assert page.calls == [
            ("goto", "https://example.com/poll"),
            ("wait_for_load_state", "networkidle"),
        ]
    
    @pytest.mark.asyncio
    async def test_type_via_coordinates(self, replayer, fakes):
        """Typing falls back to a point when no element matches."""
        page = fakes.Page()
        action = TypeAction(
            id="action_1",
            timestamp=1,
            description="Type",
            selector=Selector(css="#gone", coordinates=Coordinates(5, 6)),
            text="hi",
        )
        assert await replayer.execute([action], page)
        assert ("keyboard_type", "hi") in page.calls
    
    @pytest.mark.asyncio
    async def test_empty_sequence_succeeds(self, replayer, fakes):
        """Nothing to do is a success."""
        result = await replayer.replay([], fakes.Page())
        assert result.success
        assert result.actions_executed == 0


class TestReplayFailure:
    """The first failure aborts the rest."""
    
    @pytest.mark.asyncio
    async def test_halts_at_first_failing_action(self, replayer, fakes):
        """No action after the failing index runs."""
        first = fakes.Element()
        third = fakes.Element()
        page = fakes.Page({"#first": first, "#third": third})
        
        result = await replayer.replay([click(1, "#first"), click(2, "#missing"), click(3, "#third")], page)
        
        assert not result.success
        assert result.failed_index == 1
        assert result.actions_executed == 1
        assert first.clicks == 1
        assert third.clicks == 0
        assert "#third" not in page.queried
    
    @pytest.mark.asyncio
    async def test_error_describes_failing_action(self, replayer, fakes):
        """The error carries the index and the action type."""
        result = await replayer.replay([click(1, "#missing")], fakes.Page())
        
        assert result.error is not None
        assert result.error.index == 0
        assert result.error.action_type == "click"
        assert "Action 0 (click) failed" in result.error_message
    
    @pytest.mark.asyncio
    async def test_driver_error_fails_action(self, replayer, fakes):
        """An element that errors on click fails the replay."""
        page = fakes.Page({"#vote": fakes.Element(fail=True)})
        assert await replayer.execute([click(1, "#vote")], page) is False
    
    @pytest.mark.asyncio
    async def test_unexpected_error_is_contained(self, replayer, fakes):
        """Non-library exceptions become a failed result."""
        page = fakes.Page()
        page.goto_error = RuntimeError("boom")
        
        result = await replayer.replay(
            [NavigateAction(id="action_1", timestamp=1, description="Go", url="https://x")],
            page,
        )
        
        assert not result.success
        assert isinstance(result.error.cause, RuntimeError)
    
    @pytest.mark.asyncio
    async def test_unknown_action_kind(self, replayer, fakes):
        """Objects that are not actions are rejected."""
        result = await replayer.replay([object()], fakes.Page())
        assert not result.success
        assert result.failed_index == 0


class TestPacing:
    """Randomized pause between actions."""
    
    @pytest.mark.asyncio
    async def test_pause_within_bounds(self, fakes):
        """Each action is followed by a pause in the configured range."""
        replayer = MacroReplayer(ReplaySettings(action_delay_min_ms=500, action_delay_max_ms=2000))
        page = fakes.Page({"#a": fakes.Element(), "#b": fakes.Element()})
        
        with patch("web_macro.engine.replayer.asyncio.sleep") as sleep:
            await replayer.execute([click(1, "#a"), click(2, "#b")], page)
        
        assert sleep.call_count == 2
        for call in sleep.call_args_list:
            assert 0.5 <= call.args[0] <= 2.0
    
    @pytest.mark.asyncio
    async def test_no_pause_after_failure(self, fakes):
        """A failed action is not followed by a pause."""
        replayer = MacroReplayer(ReplaySettings(action_delay_min_ms=500, action_delay_max_ms=2000))
        
        with patch("web_macro.engine.replayer.asyncio.sleep") as sleep:
            await replayer.execute([click(1, "#missing")], fakes.Page())
        
        sleep.assert_not_called()
