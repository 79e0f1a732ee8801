"""Domain records shared by services and routes."""

from taskrelay.models.task import ExpenseRecord, Project, Task

__all__ = ["ExpenseRecord", "Project", "Task"]
