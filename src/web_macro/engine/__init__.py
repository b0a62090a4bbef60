"""
Engine module - Selector resolution, replay, sessions and orchestration.
"""

from web_macro.engine.selector_resolver import (
    SelectorResolver,
    ResolvedTarget,
    ResolutionStrategy,
    CoordinateElement,
)
from web_macro.engine.replayer import MacroReplayer, ReplayResult
from web_macro.engine.session_manager import Credentials, Session, SessionManager
from web_macro.engine.orchestrator import (
    ExecutionManager,
    ExecutionMode,
    ExecutionSnapshot,
    ExecutionState,
    order_accounts,
)

__all__ = [
    "SelectorResolver",
    "ResolvedTarget",
    "ResolutionStrategy",
    "CoordinateElement",
    "MacroReplayer",
    "ReplayResult",
    "Credentials",
    "Session",
    "SessionManager",
    "ExecutionManager",
    "ExecutionMode",
    "ExecutionSnapshot",
    "ExecutionState",
    "order_accounts",
]
