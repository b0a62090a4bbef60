"""
Models module - Data types for accounts, macros, actions and results.
"""

from web_macro.models.selector import Selector, Coordinates
from web_macro.models.actions import (
    Action,
    ActionType,
    BaseAction,
    ClickAction,
    TypeAction,
    ScrollAction,
    WaitAction,
    NavigateAction,
    action_from_dict,
)
from web_macro.models.account import Account, AccountStatus, email_number
from web_macro.models.macro import Macro
from web_macro.models.result import ExecutionResult

__all__ = [
    "Selector",
    "Coordinates",
    "Action",
    "ActionType",
    "BaseAction",
    "ClickAction",
    "TypeAction",
    "ScrollAction",
    "WaitAction",
    "NavigateAction",
    "action_from_dict",
    "Account",
    "AccountStatus",
    "email_number",
    "Macro",
    "ExecutionResult",
]
