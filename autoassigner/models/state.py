"""State management data models."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class AssignmentLogEntry(BaseModel):
    """A single committed assignment, written as one line of the audit log."""

    timestamp: datetime = Field(..., description="Commit time")
    group: str
    user: str
    strategy: str
    last_index: int = Field(..., description="Position before the assignment (-1 if unset)")
    next_index: int = Field(..., description="Index of the assigned member")
    total_count: int = Field(..., description="Number of members in the group")
    user_count: int = Field(..., description="Assignment count of the user after this assignment")

    model_config = {"frozen": True}


class AssignmentResult(BaseModel):
    """Outcome of an assignment run."""

    group: str
    user: str
    index: int = Field(..., description="Index of the chosen member")
    last_index: int = Field(..., description="Position read before selection")
    strategy: str
    dry_run: bool = False
    user_count: Optional[int] = Field(None, description="Updated count (real runs only)")
    skipped: List[str] = Field(default_factory=list, description="Candidates found unavailable")


class GroupCounts(BaseModel):
    """Assignment counts of a group, with members in configured order."""

    group: str
    users: List[str] = Field(default_factory=list)
    counts: Dict[str, int] = Field(default_factory=dict)

    def ordered(self) -> List[tuple]:
        """Return ``(user, count)`` pairs in configured order, duplicates listed once."""
        seen = set()
        items = []
        for user in self.users:
            if user in seen:
                continue
            seen.add(user)
            items.append((user, self.counts.get(user, 0)))
        return items
