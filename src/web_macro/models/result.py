"""
Execution result - one entry in the append-only run log.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one macro execution for one account."""
    account_id: str
    macro_id: str
    success: bool
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
    duration_ms: float = 0.0
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "account_id": self.account_id,
            "macro_id": self.macro_id,
            "success": self.success,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
            "duration_ms": self.duration_ms,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecutionResult":
        return cls(
            account_id=data["account_id"],
            macro_id=data["macro_id"],
            success=bool(data["success"]),
            error=data.get("error"),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            duration_ms=float(data.get("duration_ms", 0.0)),
        )
