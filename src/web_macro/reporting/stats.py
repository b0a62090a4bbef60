"""
Account statistics for the monitor view.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from web_macro.models.account import Account, AccountStatus

RECENT_ACTIVITY_LIMIT = 10


@dataclass
class AccountStats:
    """
    Aggregate account counters.
    
    Attributes:
        total_accounts: Number of accounts
        active_accounts: Accounts currently running
        completed_accounts: Accounts whose last run succeeded
        failed_accounts: Accounts whose last run failed
        total_success: Sum of success counters
        total_failures: Sum of failure counters
        success_rate: total_success as a percentage of all attempts
        recent_activity: Most recently used accounts, newest first
    """
    total_accounts: int = 0
    active_accounts: int = 0
    completed_accounts: int = 0
    failed_accounts: int = 0
    total_success: int = 0
    total_failures: int = 0
    success_rate: float = 0.0
    recent_activity: List[Account] = field(default_factory=list)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_accounts": self.total_accounts,
            "active_accounts": self.active_accounts,
            "completed_accounts": self.completed_accounts,
            "failed_accounts": self.failed_accounts,
            "total_success": self.total_success,
            "total_failures": self.total_failures,
            "success_rate": self.success_rate,
            "recent_activity": [a.to_dict() for a in self.recent_activity],
        }


def compute_stats(accounts: Iterable[Account], recent_limit: int = RECENT_ACTIVITY_LIMIT) -> AccountStats:
    """Summarize account counters and recent activity."""
    accounts = list(accounts)
    total_success = sum(a.success_count for a in accounts)
    total_failures = sum(a.failure_count for a in accounts)
    attempts = total_success + total_failures
    
    recent = sorted(
        (a for a in accounts if a.last_used is not None),
        key=lambda a: a.last_used,
        reverse=True,
    )[:recent_limit]
    
    return AccountStats(
        total_accounts=len(accounts),
        active_accounts=sum(1 for a in accounts if a.status is AccountStatus.RUNNING),
        completed_accounts=sum(1 for a in accounts if a.status is AccountStatus.COMPLETED),
        failed_accounts=sum(1 for a in accounts if a.status is AccountStatus.FAILED),
        total_success=total_success,
        total_failures=total_failures,
        success_rate=round(total_success * 100.0 / attempts, 1) if attempts else 0.0,
        recent_activity=recent,
    )
