"""
Action model - one recorded interaction, as a tagged variant.

Each action kind is its own frozen dataclass sharing ``id``, ``timestamp``
(epoch milliseconds) and ``description``. ``Action`` is the union of the
five kinds; ``ActionType`` is the serialization tag.

Example:
    >>> action = ClickAction(id="action_1", timestamp=0, description="Click",
    ...                      selector=Selector(css="#submit"))
    >>> action_from_dict(action.to_dict()) == action
    True
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Union

from web_macro.exceptions.action import ActionValidationError
from web_macro.models.selector import Selector


class ActionType(str, Enum):
    """Types of recordable actions."""
    CLICK = "click"
    TYPE = "type"
    SCROLL = "scroll"
    WAIT = "wait"
    NAVIGATE = "navigate"


@dataclass(frozen=True)
class BaseAction:
    """Fields common to every action kind."""
    id: str
    timestamp: int
    description: str
    
    action_type: ClassVar[ActionType]
    
    def _base_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.action_type.value,
            "timestamp": self.timestamp,
            "description": self.description,
        }
    
    def to_dict(self) -> Dict[str, Any]:
        return self._base_dict()


@dataclass(frozen=True)
class ClickAction(BaseAction):
    """Click the element addressed by ``selector``."""
    selector: Selector
    
    action_type: ClassVar[ActionType] = ActionType.CLICK
    
    def to_dict(self) -> Dict[str, Any]:
        return {**self._base_dict(), "selector": self.selector.to_dict()}


@dataclass(frozen=True)
class TypeAction(BaseAction):
    """Replace the content of the element addressed by ``selector`` with ``text``."""
    selector: Selector
    text: str
    
    action_type: ClassVar[ActionType] = ActionType.TYPE
    
    def to_dict(self) -> Dict[str, Any]:
        return {**self._base_dict(), "selector": self.selector.to_dict(), "text": self.text}


@dataclass(frozen=True)
class ScrollAction(BaseAction):
    """Scroll the window to absolute coordinates."""
    x: float
    y: float
    
    action_type: ClassVar[ActionType] = ActionType.SCROLL
    
    def to_dict(self) -> Dict[str, Any]:
        return {**self._base_dict(), "x": self.x, "y": self.y}


@dataclass(frozen=True)
class WaitAction(BaseAction):
    """Pause replay for ``duration_ms``."""
    duration_ms: int
    
    action_type: ClassVar[ActionType] = ActionType.WAIT
    
    def to_dict(self) -> Dict[str, Any]:
        return {**self._base_dict(), "duration_ms": self.duration_ms}


@dataclass(frozen=True)
class NavigateAction(BaseAction):
    """Load ``url`` and wait for the network to go idle."""
    url: str
    
    action_type: ClassVar[ActionType] = ActionType.NAVIGATE
    
    def to_dict(self) -> Dict[str, Any]:
        return {**self._base_dict(), "url": self.url}


Action = Union[ClickAction, TypeAction, ScrollAction, WaitAction, NavigateAction]


def action_from_dict(data: Dict[str, Any]) -> Action:
    """
    Decode one serialized action.
    
    Args:
        data: Dictionary produced by ``to_dict``
        
    Returns:
        The matching action variant
        
    Raises:
        ActionValidationError: If the type tag is unknown or a field is missing
    """
    raw_type = data.get("type", "")
    try:
        action_type = ActionType(raw_type)
    except ValueError:
        raise ActionValidationError(f"Unknown action type: {raw_type!r}", action_type=str(raw_type))
    
    common = {
        "id": str(data.get("id", "")),
        "timestamp": int(data.get("timestamp", 0)),
        "description": data.get("description", ""),
    }
    
    try:
        match action_type:
            case ActionType.CLICK:
                return ClickAction(**common, selector=Selector.from_dict(data.get("selector")))
            case ActionType.TYPE:
                return TypeAction(
                    **common,
                    selector=Selector.from_dict(data.get("selector")),
                    text=str(data.get("text", "")),
                )
            case ActionType.SCROLL:
                return ScrollAction(**common, x=float(data.get("x", 0)), y=float(data.get("y", 0)))
            case ActionType.WAIT:
                return WaitAction(**common, duration_ms=int(data["duration_ms"]))
            case ActionType.NAVIGATE:
                return NavigateAction(**common, url=str(data["url"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ActionValidationError(
            f"Malformed {action_type.value} action: {e}",
            action_type=action_type.value,
            invalid_params=data,
        )
    raise ActionValidationError(f"Unhandled action type: {action_type}", action_type=action_type.value)
