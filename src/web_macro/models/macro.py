"""
Macro model - a named, ordered sequence of recorded actions.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple
import uuid

from web_macro.models.actions import Action, action_from_dict
from web_macro.models.result import ExecutionResult


def new_macro_id() -> str:
    return f"macro_{uuid.uuid4().hex[:12]}"


@dataclass
class Macro:
    """
    A saved recording plus its target-site metadata.
    
    ``actions`` is a tuple and never changes after the macro is created;
    only ``success_rate`` and ``last_used`` are updated by later runs.
    
    Attributes:
        id: Unique identifier
        name: Display name
        website: URL the macro is replayed against (may be empty)
        actions: Ordered recorded actions
        description: Free-form notes
        created_at: Creation time
        success_rate: Percentage (0-100) of successful executions
        last_used: When the macro last finished a run
    """
    id: str
    name: str
    website: str
    actions: Tuple[Action, ...] = ()
    description: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    success_rate: float = 0.0
    last_used: Optional[datetime] = None
    
    def __post_init__(self) -> None:
        self.actions = tuple(self.actions)
    
    @classmethod
    def create(
        cls,
        name: str,
        website: str,
        actions: Iterable[Action],
        description: str = "",
    ) -> "Macro":
        """Create a new macro with a fresh id."""
        return cls(
            id=new_macro_id(),
            name=name,
            website=website,
            actions=tuple(actions),
            description=description,
        )
    
    @property
    def action_count(self) -> int:
        return len(self.actions)
    
    def update_stats(
        self,
        results: Iterable[ExecutionResult],
        when: Optional[datetime] = None,
    ) -> None:
        """
        Recompute ``success_rate`` from the result log.
        
        Only results for this macro are counted. With no results the rate
        is left unchanged and ``last_used`` is not touched.
        """
        own = [r for r in results if r.macro_id == self.id]
        if not own:
            return
        succeeded = sum(1 for r in own if r.success)
        self.success_rate = round(succeeded * 100.0 / len(own), 1)
        self.last_used = when or datetime.now()
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "website": self.website,
            "actions": [a.to_dict() for a in self.actions],
            "created_at": self.created_at.isoformat(),
            "success_rate": self.success_rate,
            "last_used": self.last_used.isoformat() if self.last_used else None,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Macro":
        """Create from dictionary."""
        created_at = data.get("created_at")
        last_used = data.get("last_used")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            website=data.get("website", ""),
            actions=tuple(action_from_dict(a) for a in data.get("actions", [])),
            description=data.get("description", ""),
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.now(),
            success_rate=float(data.get("success_rate", 0.0)),
            last_used=datetime.fromisoformat(last_used) if last_used else None,
        )
