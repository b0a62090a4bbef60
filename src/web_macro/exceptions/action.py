"""
Action-related exceptions.
"""

from typing import Optional

from web_macro.exceptions.base import WebMacroError


class ActionError(WebMacroError):
    """Base exception for action-related errors."""
    pass


class ActionValidationError(ActionError):
    """
    Action data is invalid.
    
    Raised when a serialized action cannot be decoded or names an
    unknown action kind.
    """
    
    def __init__(self, message: str, action_type: str, invalid_params: dict | None = None):
        super().__init__(message, {"action_type": action_type, "invalid_params": invalid_params})
        self.action_type = action_type
        self.invalid_params = invalid_params


class ActionExecutionError(ActionError):
    """
    The first failing action of a replayed sequence.
    
    Attributes:
        index: Zero-based position of the action in the sequence
        action_type: Kind of the failing action
        cause: Underlying exception, if any
    """
    
    def __init__(
        self,
        message: str,
        index: int,
        action_type: str,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, {"index": index, "action_type": action_type})
        self.index = index
        self.action_type = action_type
        self.cause = cause
