"""
Run Report - Summary of one multi-account execution.

Provides a JSON export of the results a run produced.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
import json

from web_macro.engine.orchestrator import ExecutionSnapshot, ExecutionState
from web_macro.models.result import ExecutionResult


@dataclass
class RunSummary:
    """
    Summary of a macro run.
    
    Attributes:
        macro_id: Macro that was replayed
        macro_name: Its display name
        state: Final execution state
        started_at: When the run started
        completed_at: When the run ended
        total_accounts: Accounts scheduled
        processed: Accounts that were processed
        results: One result per processed account
    """
    macro_id: str
    macro_name: str
    state: ExecutionState
    started_at: datetime
    completed_at: Optional[datetime] = None
    total_accounts: int = 0
    processed: int = 0
    results: List[ExecutionResult] = field(default_factory=list)
    
    @classmethod
    def from_snapshot(
        cls,
        macro_id: str,
        macro_name: str,
        snapshot: ExecutionSnapshot,
        started_at: datetime,
        completed_at: Optional[datetime] = None,
    ) -> "RunSummary":
        return cls(
            macro_id=macro_id,
            macro_name=macro_name,
            state=snapshot.state,
            started_at=started_at,
            completed_at=completed_at or datetime.now(),
            total_accounts=snapshot.total,
            processed=snapshot.processed,
            results=list(snapshot.results),
        )
    
    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)
    
    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)
    
    @property
    def duration_seconds(self) -> float:
        if not self.completed_at:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "macro_id": self.macro_id,
            "macro_name": self.macro_name,
            "state": self.state.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "total_accounts": self.total_accounts,
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "results": [r.to_dict() for r in self.results],
        }
    
    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
    
    def export_json(self, path: Path | str) -> None:
        """
        Export report as JSON.
        
        Args:
            path: Output file path
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            f.write(self.to_json())
