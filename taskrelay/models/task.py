"""
TaskRelay Backend — Domain Records
===================================

What:  Plain records for the data this relay reshapes: tasks, projects and
       expense rows.
Why:   Upstream payloads are loose dicts. Converting them once at the adapter
       boundary gives the aggregator typed fields and one place that knows the
       wire format.
How:   Dataclasses with `from_api` constructors for the Todoist REST v2 shape.
Who:   Built by TodoistService; consumed by the aggregator and the renderers.
When:  Per request. Nothing here is persisted; every request re-fetches.

Ranks:
    `order` is assigned upstream and is only ever read for sorting. Nothing in
    this package writes to it.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Task:
    """A task as returned by the task service."""

    id: str
    content: str
    is_completed: bool = False
    project_id: Optional[str] = None
    order: int = 0
    due: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Task":
        """
        Create a Task from a Todoist REST v2 task payload.

        `due` is `{"string": "tomorrow", "date": "2024-01-16", ...}` or null.
        The human-readable string wins; the ISO date is the fallback.
        """
        due = data.get("due") or {}
        due_text = due.get("string") or due.get("date") or None
        project_id = data.get("project_id")
        return cls(
            id=str(data["id"]),
            content=data.get("content", ""),
            is_completed=bool(data.get("is_completed", False)),
            project_id=str(project_id) if project_id else None,
            order=data.get("order") or 0,
            due=due_text,
        )


@dataclass(frozen=True)
class Project:
    """A project as returned by the task service."""

    id: Optional[str]
    name: str
    order: int = 0

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Project":
        """Create a Project from a Todoist REST v2 project payload."""
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            order=data.get("order") or 0,
        )


@dataclass(frozen=True)
class ExpenseRecord:
    """
    One row of the expense ledger.

    Column order in the spreadsheet matches `as_row()`: timestamp, category,
    item, amount, payment method, note. Rows are appended, never read back.
    """

    timestamp: datetime
    category: str
    item: str
    amount: float
    payment_method: str = ""
    note: str = ""

    def as_row(self) -> List[Any]:
        return [
            self.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            self.category,
            self.item,
            self.amount,
            self.payment_method,
            self.note,
        ]
