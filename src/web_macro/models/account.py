"""
Account model and its status state machine.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
import re
import uuid

from web_macro.exceptions.base import InvalidStateError


class AccountStatus(str, Enum):
    """Per-account execution status."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    
    @property
    def is_terminal(self) -> bool:
        return self in (AccountStatus.COMPLETED, AccountStatus.FAILED)


def new_account_id() -> str:
    return f"acc_{uuid.uuid4().hex[:12]}"


@dataclass
class Account:
    """
    One login identity that macros are replayed for.
    
    Status moves idle -> running -> completed|failed, and back to idle
    only through ``reset()``. Counters are incremented only when a running
    account finishes, so they never exceed the number of attempts.
    
    Attributes:
        id: Unique identifier
        email: Login email
        status: Current status
        success_count: Successful executions
        failure_count: Failed executions
        last_used: When the account last finished an execution
    """
    id: str
    email: str
    status: AccountStatus = AccountStatus.IDLE
    success_count: int = 0
    failure_count: int = 0
    last_used: Optional[datetime] = None
    
    @classmethod
    def create(cls, email: str) -> "Account":
        """Create a fresh idle account with a new id."""
        return cls(id=new_account_id(), email=email)
    
    @property
    def attempts(self) -> int:
        return self.success_count + self.failure_count
    
    def mark_running(self) -> None:
        """idle -> running."""
        if self.status is not AccountStatus.IDLE:
            raise InvalidStateError(
                f"Account {self.email} cannot start from {self.status.value}",
                current=self.status.value,
                requested=AccountStatus.RUNNING.value,
            )
        self.status = AccountStatus.RUNNING
    
    def mark_completed(self, when: Optional[datetime] = None) -> None:
        """running -> completed, counting one success."""
        self._finish(AccountStatus.COMPLETED, when)
        self.success_count += 1
    
    def mark_failed(self, when: Optional[datetime] = None) -> None:
        """running -> failed, counting one failure."""
        self._finish(AccountStatus.FAILED, when)
        self.failure_count += 1
    
    def reset(self) -> None:
        """Explicit reset back to idle. Counters are kept."""
        if self.status is AccountStatus.IDLE:
            return
        self.status = AccountStatus.IDLE
    
    def _finish(self, status: AccountStatus, when: Optional[datetime]) -> None:
        if self.status is not AccountStatus.RUNNING:
            raise InvalidStateError(
                f"Account {self.email} is not running (status={self.status.value})",
                current=self.status.value,
                requested=status.value,
            )
        self.status = status
        self.last_used = when or datetime.now()
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "email": self.email,
            "status": self.status.value,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "last_used": self.last_used.isoformat() if self.last_used else None,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        """Create from dictionary."""
        last_used = data.get("last_used")
        return cls(
            id=data["id"],
            email=data["email"],
            status=AccountStatus(data.get("status", AccountStatus.IDLE.value)),
            success_count=int(data.get("success_count", 0)),
            failure_count=int(data.get("failure_count", 0)),
            last_used=datetime.fromisoformat(last_used) if last_used else None,
        )


_EMAIL_NUMBER = re.compile(r"(\d+)")


def email_number(email: str) -> int:
    """
    Numeric sort key for an email: the first run of digits, or 0.
    
    >>> email_number("user10@x.com")
    10
    """
    match = _EMAIL_NUMBER.search(email)
    return int(match.group(1)) if match else 0
