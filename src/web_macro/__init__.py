"""
Web Macro - Record browser interactions once, replay them across many accounts.

This package captures clicks, typed values and scrolls on a live page as a
portable macro, then replays that macro in a fresh, isolated browser session
for each account in turn.

Example:
    >>> from web_macro import ExecutionManager, SessionManager, get_settings
    >>> settings = get_settings()
    >>> async with SessionManager(settings) as sessions:
    ...     manager = ExecutionManager(sessions, settings=settings)
    ...     results = await manager.start(macro, accounts)
"""

__version__ = "0.1.0"
__author__ = "Suhaib Bin Younis"

# Public API exports
from web_macro.config import Settings, get_settings
from web_macro.engine.orchestrator import ExecutionManager
from web_macro.engine.session_manager import SessionManager
from web_macro.models import Account, Macro, ExecutionResult

__all__ = [
    "Settings",
    "get_settings",
    "ExecutionManager",
    "SessionManager",
    "Account",
    "Macro",
    "ExecutionResult",
    "__version__",
]
