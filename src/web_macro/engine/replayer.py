"""
Macro Replayer - Executes recorded actions against a page.

Actions run strictly in recorded order with a randomized pause after each
one. The first failing action aborts the rest of the sequence.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, TYPE_CHECKING
import asyncio
import logging
import random

from web_macro.config.settings import ReplaySettings
from web_macro.engine.selector_resolver import SelectorResolver
from web_macro.exceptions.action import ActionExecutionError, ActionValidationError
from web_macro.exceptions.base import WebMacroError
from web_macro.models.actions import (
    Action,
    ClickAction,
    NavigateAction,
    ScrollAction,
    TypeAction,
    WaitAction,
)

if TYPE_CHECKING:
    from web_macro.interfaces.browser import IPage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplayResult:
    """Outcome of replaying one action sequence."""
    success: bool
    actions_executed: int
    failed_index: Optional[int] = None
    error: Optional[ActionExecutionError] = None
    
    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None


class MacroReplayer:
    """
    Replay an action sequence on a page.
    
    Example:
        >>> replayer = MacroReplayer(ReplaySettings())
        >>> ok = await replayer.execute(macro.actions, page)
    """
    
    def __init__(
        self,
        settings: Optional[ReplaySettings] = None,
        resolver: Optional[SelectorResolver] = None,
    ):
        self.settings = settings or ReplaySettings()
        self.resolver = resolver or SelectorResolver(self.settings.resolve_timeout_ms)
    
    async def execute(self, actions: Sequence[Action], page: "IPage") -> bool:
        """Replay ``actions``; True only if every action succeeded."""
        return (await self.replay(actions, page)).success
    
    async def replay(self, actions: Sequence[Action], page: "IPage") -> ReplayResult:
        """
        Replay ``actions`` and describe where it stopped.
        
        Args:
            actions: Actions in recorded order
            page: Page to act on
            
        Returns:
            ReplayResult; on failure ``failed_index`` is the first failing action
        """
        executed = 0
        for index, action in enumerate(actions):
            try:
                await self.perform(action, page)
            except WebMacroError as e:
                return self._failure(index, action, e, executed)
            except Exception as e:
                logger.exception(f"Unexpected error in action {index}")
                return self._failure(index, action, e, executed)
            
            executed += 1
            await self._pause()
        
        return ReplayResult(success=True, actions_executed=executed)
    
    async def perform(self, action: Action, page: "IPage") -> None:
        """Perform a single action."""
        logger.debug(f"Replaying {getattr(action, 'description', action)!r}")
        
        match action:
            case ClickAction(selector=selector):
                target = await self.resolver.resolve(selector, page)
                await target.element.click()
            case TypeAction(selector=selector, text=text):
                target = await self.resolver.resolve(selector, page)
                await target.element.fill(text)
            case ScrollAction(x=x, y=y):
                await page.scroll_to(x, y)
            case WaitAction(duration_ms=duration_ms):
                await page.wait_for_timeout(duration_ms)
            case NavigateAction(url=url):
                timeout = self.settings.navigation_timeout_ms
                await page.goto(url, timeout=timeout)
                await page.wait_for_load_state("networkidle", timeout=timeout)
            case _:
                raise ActionValidationError(
                    f"Cannot replay {type(action).__name__}",
                    action_type=type(action).__name__,
                )
    
    def _failure(
        self,
        index: int,
        action: Action,
        cause: Exception,
        executed: int,
    ) -> ReplayResult:
        action_type = getattr(getattr(action, "action_type", None), "value", type(action).__name__)
        message = getattr(cause, "message", None) or str(cause) or type(cause).__name__
        error = ActionExecutionError(
            f"Action {index} ({action_type}) failed: {message}",
            index=index,
            action_type=action_type,
            cause=cause,
        )
        logger.warning(error.message)
        return ReplayResult(
            success=False,
            actions_executed=executed,
            failed_index=index,
            error=error,
        )
    
    async def _pause(self) -> None:
        low = self.settings.action_delay_min_ms
        high = self.settings.action_delay_max_ms
        if high <= 0:
            return
        await asyncio.sleep(random.uniform(low, high) / 1000)
