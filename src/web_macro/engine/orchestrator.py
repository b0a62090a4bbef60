"""
Execution Manager - Runs one macro across many accounts, one at a time.

This module drives the per-account loop:
- Order accounts (numerically by email, or by explicit selection)
- Open an isolated session and log in for each account
- Replay the macro and record exactly one result per account
- Pause between accounts, observing stop requests between accounts only
"""

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

from web_macro.config.settings import Settings
from web_macro.engine.replayer import MacroReplayer
from web_macro.engine.session_manager import Credentials, Session, SessionManager
from web_macro.exceptions.base import StorageError, WebMacroError
from web_macro.exceptions.browser import SessionError
from web_macro.models.account import Account, AccountStatus, email_number
from web_macro.models.macro import Macro
from web_macro.models.result import ExecutionResult
from web_macro.utils.retry import RetryConfig, retry_async

if TYPE_CHECKING:
    from web_macro.storage.repository import JsonRepository

logger = logging.getLogger(__name__)


class ExecutionState(str, Enum):
    """Execution manager states."""
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"
    COMPLETED = "completed"


class ExecutionMode(str, Enum):
    """How accounts are chosen and ordered."""
    SEQUENTIAL = "sequential"
    SELECTED = "selected"


@dataclass(frozen=True)
class ExecutionSnapshot:
    """Point-in-time view of a run for readers outside the loop."""
    state: ExecutionState
    current_account_id: Optional[str]
    processed: int
    total: int
    results: Tuple[ExecutionResult, ...]
    
    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)
    
    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)


def order_accounts(
    accounts: Iterable[Account],
    mode: ExecutionMode = ExecutionMode.SEQUENTIAL,
    selected_ids: Optional[Sequence[str]] = None,
) -> List[Account]:
    """
    Order accounts for a run.
    
    Sequential mode sorts by the first number in the email (stable; emails
    without digits sort first). Selected mode keeps the order of
    ``selected_ids`` and ignores ids that match no account.
    """
    accounts = list(accounts)
    if mode is ExecutionMode.SELECTED:
        by_id = {a.id: a for a in accounts}
        ordered: List[Account] = []
        seen = set()
        for account_id in selected_ids or []:
            if account_id in by_id and account_id not in seen:
                ordered.append(by_id[account_id])
                seen.add(account_id)
        return ordered
    return sorted(accounts, key=lambda a: email_number(a.email))


ResultCallback = Callable[[ExecutionResult], None]


class ExecutionManager:
    """
    Run a macro for each account in turn.
    
    The manager is the only writer of account state during a run; other
    code should read through ``snapshot()``.
    
    Example:
        >>> manager = ExecutionManager(sessions, settings=settings, repository=repo)
        >>> results = await manager.start(macro, repo.accounts())
    """
    
    def __init__(
        self,
        sessions: SessionManager,
        settings: Optional[Settings] = None,
        replayer: Optional[MacroReplayer] = None,
        repository: Optional["JsonRepository"] = None,
    ):
        self.settings = settings or sessions.settings
        self._sessions = sessions
        self._replayer = replayer or MacroReplayer(self.settings.replay)
        self._repository = repository
        
        self._state = ExecutionState.IDLE
        self._stop_event = asyncio.Event()
        self._done = asyncio.Event()
        self._results: List[ExecutionResult] = []
        self._current_account_id: Optional[str] = None
        self._processed = 0
        self._total = 0
        self._callbacks: List[ResultCallback] = []
    
    @property
    def state(self) -> ExecutionState:
        return self._state
    
    @property
    def is_running(self) -> bool:
        return self._state is ExecutionState.RUNNING
    
    def on_result(self, callback: ResultCallback) -> None:
        """Register a callback invoked after each account finishes."""
        self._callbacks.append(callback)
    
    def snapshot(self) -> ExecutionSnapshot:
        """Immutable view of the current run."""
        return ExecutionSnapshot(
            state=self._state,
            current_account_id=self._current_account_id,
            processed=self._processed,
            total=self._total,
            results=tuple(self._results),
        )
    
    async def start(
        self,
        macro: Macro,
        accounts: Iterable[Account],
        mode: Optional[ExecutionMode] = None,
        selected_ids: Optional[Sequence[str]] = None,
    ) -> List[ExecutionResult]:
        """
        Run ``macro`` for every account.
        
        Args:
            macro: Macro to replay
            accounts: Candidate accounts
            mode: Ordering mode (defaults to ``execution.mode``)
            selected_ids: Account ids for selected mode, in run order
            
        Returns:
            One result per processed account, in processing order. Empty if
            a run was already in progress.
        """
        if self._state is ExecutionState.RUNNING:
            logger.warning("Execution already running, ignoring start request")
            return []
        
        mode = ExecutionMode(mode or self.settings.execution.mode)
        ordered = order_accounts(accounts, mode, selected_ids)
        
        self._state = ExecutionState.RUNNING
        self._stop_event.clear()
        self._done.clear()
        self._results = []
        self._processed = 0
        self._total = len(ordered)
        
        logger.info(f"Starting macro '{macro.name}' for {len(ordered)} account(s) ({mode.value})")
        
        try:
            for index, account in enumerate(ordered):
                if self._state is not ExecutionState.RUNNING:
                    break
                
                self._current_account_id = account.id
                result = await self._run_account(macro, account)
                self._results.append(result)
                self._processed += 1
                self._persist(account, result)
                self._notify(result)
                
                if index < len(ordered) - 1 and self._state is ExecutionState.RUNNING:
                    await self._sleep_between_accounts()
            
            if self._state is ExecutionState.RUNNING:
                self._state = ExecutionState.COMPLETED
                logger.info(
                    f"Run complete: {sum(1 for r in self._results if r.success)}"
                    f"/{len(self._results)} succeeded"
                )
            else:
                logger.info(f"Run stopped after {self._processed}/{self._total} account(s)")
        finally:
            self._current_account_id = None
            for account in ordered:
                if account.status is AccountStatus.RUNNING:
                    account.reset()
                    self._persist(account)
            self._refresh_macro(macro)
            self._done.set()
        
        return list(self._results)
    
    async def stop(self) -> None:
        """Stop after the current account finishes and wait for the loop to halt."""
        if self._state is not ExecutionState.RUNNING:
            return
        self.request_stop()
        await self._done.wait()
    
    def request_stop(self) -> None:
        """Signal the loop to stop without waiting."""
        if self._state is not ExecutionState.RUNNING:
            return
        logger.info("Stop requested")
        self._state = ExecutionState.STOPPED
        self._stop_event.set()
    
    async def _run_account(self, macro: Macro, account: Account) -> ExecutionResult:
        if account.status is not AccountStatus.IDLE:
            account.reset()
        account.mark_running()
        logger.info(f"Account {account.email}: starting")
        
        started = time.monotonic()
        session: Optional[Session] = None
        success = False
        error: Optional[str] = None
        
        try:
            session = await self._open_session(account)
            if not session.is_authenticated:
                error = session.login_error or "Login failed"
            else:
                if macro.website:
                    await self._sessions.navigate(session, macro.website)
                outcome = await self._replayer.replay(macro.actions, session.page)
                success = outcome.success
                error = outcome.error_message
        except WebMacroError as e:
            error = e.message
            logger.warning(f"Account {account.email}: {e.message}")
        except Exception as e:
            error = str(e) or type(e).__name__
            logger.exception(f"Account {account.email}: unexpected error")
        finally:
            if session is not None:
                await self._sessions.close(session)
        
        finished = datetime.now()
        if success:
            account.mark_completed(finished)
        else:
            account.mark_failed(finished)
        logger.info(f"Account {account.email}: {'completed' if success else 'failed'}")
        
        return ExecutionResult(
            account_id=account.id,
            macro_id=macro.id,
            success=success,
            error=error,
            timestamp=finished,
            duration_ms=round((time.monotonic() - started) * 1000, 1),
        )
    
    async def _open_session(self, account: Account) -> Session:
        config = RetryConfig(
            max_attempts=1 + self.settings.execution.session_retry_attempts,
            retry_on=(SessionError,),
        )
        return await retry_async(self._sessions.open, config, Credentials(account.email))
    
    async def _sleep_between_accounts(self) -> None:
        execution = self.settings.execution
        delay = execution.delay_between_accounts_s
        if execution.randomize_delay:
            delay += random.random() * execution.max_jitter_s
        if delay <= 0:
            return
        
        logger.debug(f"Waiting {delay:.1f}s before next account")
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass
    
    def _notify(self, result: ExecutionResult) -> None:
        for callback in self._callbacks:
            try:
                callback(result)
            except Exception as e:
                logger.warning(f"Result callback failed: {e}")
    
    def _persist(self, account: Account, result: Optional[ExecutionResult] = None) -> None:
        if self._repository is None:
            return
        try:
            self._repository.update_account(account)
            if result is not None:
                self._repository.append_result(result)
            self._repository.save()
        except StorageError as e:
            logger.error(f"Could not persist {account.email}: {e}")
    
    def _refresh_macro(self, macro: Macro) -> None:
        if self._repository is not None:
            history = self._repository.results(macro_id=macro.id)
        else:
            history = self._results
        macro.update_stats(history)
        
        if self._repository is None:
            return
        try:
            self._repository.update_macro(macro)
            self._repository.save()
        except StorageError as e:
            logger.error(f"Could not persist macro {macro.id}: {e}")
