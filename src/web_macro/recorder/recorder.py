"""
Macro Recorder - Captures user actions on a live page.

An injected script listens for clicks, committed value changes and
scrolls, and forwards each one to Python through an exposed function.
Python turns every event into one action and assigns its id.
"""

import json
import logging
import time
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from web_macro.exceptions.action import ActionValidationError
from web_macro.exceptions.base import InvalidStateError
from web_macro.models.actions import (
    Action,
    ClickAction,
    NavigateAction,
    ScrollAction,
    TypeAction,
    WaitAction,
)
from web_macro.models.macro import Macro
from web_macro.models.selector import Selector

if TYPE_CHECKING:
    from web_macro.interfaces.browser import IPage

logger = logging.getLogger(__name__)

BINDING_NAME = "_webMacroRecord"
MAX_TEXT_LENGTH = 100
SCROLL_DEBOUNCE_MS = 500

CAPTURE_JS = r"""
(() => {
    if (window.__webMacroInstalled) {
        window.__webMacroActive = true;
        return;
    }
    window.__webMacroInstalled = true;
    window.__webMacroActive = true;

    const send = (data) => {
        if (window.__webMacroActive && window.%(binding)s) {
            window.%(binding)s(JSON.stringify(data));
        }
    };

    const cssSelector = (el) => {
        if (el.id) return '#' + CSS.escape(el.id);
        if (typeof el.className === 'string') {
            const classes = el.className.split(/\s+/).filter(c => c).map(c => CSS.escape(c));
            if (classes.length) return '.' + classes.join('.');
        }
        return el.tagName.toLowerCase();
    };

    const xpath = (el) => {
        if (el.id) return '//*[@id="' + el.id + '"]';
        let path = '';
        let current = el;
        while (current && current.nodeType === Node.ELEMENT_NODE) {
            const tag = current.nodeName.toLowerCase();
            if (current.id) {
                path = '//' + tag + '[@id="' + current.id + '"]' + path;
                return path;
            }
            let nth = 1;
            let sibling = current.previousElementSibling;
            while (sibling) {
                if (sibling.nodeName.toLowerCase() === tag) nth++;
                sibling = sibling.previousElementSibling;
            }
            path = '/' + tag + (nth > 1 ? '[' + nth + ']' : '') + path;
            current = current.parentElement;
        }
        return path;
    };

    const describe = (el) => {
        const tag = el.tagName.toLowerCase();
        const id = el.id ? '#' + el.id : '';
        const cls = (typeof el.className === 'string' && el.className.trim())
            ? '.' + el.className.trim().split(/\s+/).join('.') : '';
        return tag + id + cls;
    };

    const selectorFor = (el) => {
        const rect = el.getBoundingClientRect();
        return {
            css: cssSelector(el),
            xpath: xpath(el),
            text: (el.textContent || '').trim().slice(0, %(max_text)d),
            coordinates: {x: rect.left + rect.width / 2, y: rect.top + rect.height / 2},
        };
    };

    document.addEventListener('click', (event) => {
        const el = event.target;
        if (!(el instanceof Element)) return;
        send({type: 'click', selector: selectorFor(el), label: describe(el)});
    }, true);

    document.addEventListener('change', (event) => {
        const el = event.target;
        if (!(el instanceof HTMLInputElement || el instanceof HTMLTextAreaElement || el instanceof HTMLSelectElement)) return;
        if (el instanceof HTMLInputElement && ['checkbox', 'radio', 'file'].includes(el.type)) return;
        send({type: 'type', selector: selectorFor(el), value: el.value, label: el.tagName.toLowerCase()});
    }, true);

    let scrollTimer = null;
    document.addEventListener('scroll', () => {
        if (scrollTimer) clearTimeout(scrollTimer);
        scrollTimer = setTimeout(() => {
            send({type: 'scroll', x: window.scrollX, y: window.scrollY});
        }, %(debounce)d);
    }, true);
})();
""" % {"binding": BINDING_NAME, "max_text": MAX_TEXT_LENGTH, "debounce": SCROLL_DEBOUNCE_MS}

HALT_JS = "window.__webMacroActive = false"


def _trim_text(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    text = " ".join(text.split())
    return text[:MAX_TEXT_LENGTH] or None


def _event_selector(event: Dict[str, Any], action_type: str) -> Selector:
    try:
        selector = Selector.from_dict(event.get("selector"))
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ActionValidationError(f"Malformed selector: {e}", action_type=action_type, invalid_params=event)
    return Selector(selector.css, selector.xpath, _trim_text(selector.text), selector.coordinates)


def action_from_event(event: Dict[str, Any], action_id: str, timestamp: int) -> Action:
    """
    Convert one captured page event into an action.
    
    Args:
        event: Decoded event payload from the page
        action_id: Id to assign
        timestamp: Epoch milliseconds
        
    Returns:
        The corresponding action
        
    Raises:
        ActionValidationError: If the event type is unknown or the payload is incomplete
    """
    if not isinstance(event, dict):
        raise ActionValidationError("Event payload must be an object", action_type="unknown")
    event_type = event.get("type")
    
    if event_type == "click":
        selector = _event_selector(event, "click")
        label = event.get("label") or selector.describe()
        return ClickAction(
            id=action_id,
            timestamp=timestamp,
            description=f"Click on {label}",
            selector=selector,
        )
    
    if event_type == "type":
        selector = _event_selector(event, "type")
        value = str(event.get("value", ""))
        label = event.get("label") or "input"
        return TypeAction(
            id=action_id,
            timestamp=timestamp,
            description=f'Type "{value}" into {label}',
            selector=selector,
            text=value,
        )
    
    if event_type == "scroll":
        try:
            x = float(event.get("x", 0))
            y = float(event.get("y", 0))
        except (TypeError, ValueError):
            raise ActionValidationError("Scroll event without a position", action_type="scroll", invalid_params=event)
        return ScrollAction(
            id=action_id,
            timestamp=timestamp,
            description=f"Scroll to position {x:g}, {y:g}",
            x=x,
            y=y,
        )
    
    raise ActionValidationError(f"Unknown event type: {event_type!r}", action_type=str(event_type), invalid_params=event)


class MacroRecorder:
    """
    Records user actions on a page as a macro.
    
    Example:
        >>> recorder = MacroRecorder()
        >>> await recorder.start(page)
        >>> # User performs actions...
        >>> actions = await recorder.stop()
        >>> macro = recorder.to_macro("Vote", website="https://example.com/poll")
    """
    
    def __init__(self):
        self._page: Optional["IPage"] = None
        self._actions: List[Action] = []
        self._counter = 0
        self._is_recording = False
        self._stopped: Optional[List[Action]] = None
        self._on_action_callbacks: List[Callable[[Action], None]] = []
        self._bound_pages: set = set()
    
    @property
    def is_recording(self) -> bool:
        """Check if currently recording."""
        return self._is_recording
    
    @property
    def actions(self) -> List[Action]:
        """Actions captured so far."""
        return list(self._actions)
    
    def on_action(self, callback: Callable[[Action], None]) -> None:
        """Register a callback for when an action is recorded."""
        self._on_action_callbacks.append(callback)
    
    async def start(self, page: "IPage") -> None:
        """
        Start recording actions on the page.
        
        Capture is installed in the current document and in every document
        the page loads afterwards.
        
        Args:
            page: Page to record
        """
        if self._is_recording:
            raise InvalidStateError("Already recording", current="recording", requested="start")
        
        self._page = page
        self._actions = []
        self._counter = 0
        self._stopped = None
        
        if id(page) not in self._bound_pages:
            await page.expose_function(BINDING_NAME, self._handle_js_event)
            await page.add_init_script(CAPTURE_JS)
            self._bound_pages.add(id(page))
        await page.evaluate(CAPTURE_JS)
        
        self._is_recording = True
        logger.info(f"Started recording on {page.url}")
    
    async def stop(self) -> List[Action]:
        """
        Stop recording and return the captured actions.
        
        Calling stop again returns the same list.
        """
        if self._stopped is not None:
            return list(self._stopped)
        
        self._is_recording = False
        if self._page is not None and not self._page.is_closed:
            try:
                await self._page.evaluate(HALT_JS)
            except Exception as e:
                logger.debug(f"Could not halt in-page capture: {e}")
        
        self._stopped = list(self._actions)
        logger.info(f"Stopped recording. Captured {len(self._stopped)} actions.")
        return list(self._stopped)
    
    def add_wait(self, duration_ms: int) -> WaitAction:
        """Append a manual pause."""
        if duration_ms < 0:
            raise ActionValidationError("Wait duration must be non-negative", action_type="wait")
        action = WaitAction(
            id=self._next_id(),
            timestamp=self._now_ms(),
            description=f"Wait {duration_ms} ms",
            duration_ms=duration_ms,
        )
        self._record_action(action)
        return action
    
    def add_navigate(self, url: str) -> NavigateAction:
        """Append a manual navigation."""
        action = NavigateAction(
            id=self._next_id(),
            timestamp=self._now_ms(),
            description=f"Navigate to {url}",
            url=url,
        )
        self._record_action(action)
        return action
    
    def undo_last_action(self) -> Optional[Action]:
        """Remove and return the last recorded action."""
        if self._stopped is None and self._actions:
            return self._actions.pop()
        return None
    
    def to_macro(self, name: str, website: str = "", description: str = "") -> Macro:
        """Build a macro from the captured actions."""
        actions = self._stopped if self._stopped is not None else self._actions
        return Macro.create(name=name, website=website, actions=actions, description=description)
    
    def _handle_js_event(self, event_json: str) -> None:
        """Handle an event from JavaScript."""
        if not self._is_recording:
            return
        
        try:
            event = json.loads(event_json)
            action = action_from_event(event, "", self._now_ms())
        except (ValueError, KeyError, TypeError, ActionValidationError) as e:
            logger.warning(f"Error handling page event: {e}")
            return
        
        # Ids are only consumed by events that became actions
        self._record_action(replace(action, id=self._next_id()))
    
    def _record_action(self, action: Action) -> None:
        if self._stopped is not None:
            raise InvalidStateError("Recording already stopped", current="stopped", requested="record")
        
        self._actions.append(action)
        logger.debug(f"Recorded: {action.action_type.value} -> {action.description}")
        
        for callback in self._on_action_callbacks:
            try:
                callback(action)
            except Exception as e:
                logger.warning(f"Action callback error: {e}")
    
    def _next_id(self) -> str:
        self._counter += 1
        return f"action_{self._counter}"
    
    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)
