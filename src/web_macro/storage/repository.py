"""
JSON Repository - Accounts, macros and the result log in one document.

The file is read on ``load()`` and written on ``save()``; every read
returns copies, so callers never hold references into the store.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from web_macro.exceptions.base import StorageError, WebMacroError
from web_macro.models.account import Account, AccountStatus
from web_macro.models.macro import Macro
from web_macro.models.result import ExecutionResult

logger = logging.getLogger(__name__)


class JsonRepository:
    """
    Keyed store persisted as ``{"accounts": [...], "macros": [...], "results": [...]}``.
    
    Example:
        >>> repo = JsonRepository("./data/web_macro.json").load()
        >>> repo.add_accounts([Account.create("user1@example.com")])
        >>> repo.save()
    """
    
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()
        self._accounts: Dict[str, Account] = {}
        self._macros: Dict[str, Macro] = {}
        self._results: List[ExecutionResult] = []
    
    def load(self) -> "JsonRepository":
        """
        Load the repository from disk. A missing file loads as empty.
        
        Raises:
            StorageError: If the file exists but cannot be parsed
        """
        self._accounts = {}
        self._macros = {}
        self._results = []
        
        if not self.path.exists():
            logger.debug(f"No repository at {self.path}, starting empty")
            return self
        
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Could not read repository: {e}", path=str(self.path))
        
        if not isinstance(data, dict):
            raise StorageError("Repository root must be an object", path=str(self.path))
        
        try:
            for item in data.get("accounts", []):
                account = Account.from_dict(item)
                self._accounts[account.id] = account
            for item in data.get("macros", []):
                macro = Macro.from_dict(item)
                self._macros[macro.id] = macro
            self._results = [ExecutionResult.from_dict(item) for item in data.get("results", [])]
        except (KeyError, TypeError, ValueError, WebMacroError) as e:
            raise StorageError(f"Corrupt repository entry: {e}", path=str(self.path))
        
        logger.debug(
            f"Loaded {len(self._accounts)} accounts, {len(self._macros)} macros, "
            f"{len(self._results)} results from {self.path}"
        )
        return self
    
    def save(self) -> None:
        """
        Write the repository to disk atomically.
        
        Raises:
            StorageError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Could not write repository: {e}", path=str(self.path))
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "accounts": [a.to_dict() for a in self._accounts.values()],
            "macros": [m.to_dict() for m in self._macros.values()],
            "results": [r.to_dict() for r in self._results],
        }
    
    # Accounts
    
    def accounts(self) -> List[Account]:
        """All accounts, as copies, in insertion order."""
        return [copy.deepcopy(a) for a in self._accounts.values()]
    
    def get_account(self, account_id: str) -> Optional[Account]:
        account = self._accounts.get(account_id)
        return copy.deepcopy(account) if account else None
    
    def add_accounts(self, accounts: Iterable[Account]) -> int:
        """Add accounts; returns how many were added."""
        added = 0
        for account in accounts:
            self._accounts[account.id] = copy.deepcopy(account)
            added += 1
        return added
    
    def update_account(self, account: Account) -> None:
        """Insert or replace an account by id."""
        self._accounts[account.id] = copy.deepcopy(account)
    
    def remove_account(self, account_id: str) -> bool:
        return self._accounts.pop(account_id, None) is not None
    
    def clear_accounts(self) -> int:
        count = len(self._accounts)
        self._accounts = {}
        return count
    
    def reset_accounts(self, account_ids: Optional[Iterable[str]] = None) -> int:
        """Reset accounts (all, or the given ids) to idle; returns how many changed."""
        ids = set(account_ids) if account_ids is not None else set(self._accounts)
        changed = 0
        for account_id in ids:
            account = self._accounts.get(account_id)
            if account is None or account.status is AccountStatus.IDLE:
                continue
            account.reset()
            changed += 1
        return changed
    
    # Macros
    
    def macros(self) -> List[Macro]:
        """All macros, as copies."""
        return [copy.deepcopy(m) for m in self._macros.values()]
    
    def get_macro(self, macro_id: str) -> Optional[Macro]:
        macro = self._macros.get(macro_id)
        return copy.deepcopy(macro) if macro else None
    
    def add_macro(self, macro: Macro) -> None:
        if macro.id in self._macros:
            raise StorageError(f"Macro {macro.id} already exists", path=str(self.path))
        self._macros[macro.id] = copy.deepcopy(macro)
    
    def update_macro(self, macro: Macro) -> None:
        """Insert or replace a macro by id."""
        self._macros[macro.id] = copy.deepcopy(macro)
    
    def remove_macro(self, macro_id: str) -> bool:
        return self._macros.pop(macro_id, None) is not None
    
    # Results
    
    def append_result(self, result: ExecutionResult) -> None:
        self._results.append(result)
    
    def results(self, macro_id: Optional[str] = None, account_id: Optional[str] = None) -> List[ExecutionResult]:
        """Result log, optionally filtered. Results are immutable."""
        return [
            r for r in self._results
            if (macro_id is None or r.macro_id == macro_id)
            and (account_id is None or r.account_id == account_id)
        ]
