"""
TaskRelay Backend — Task Service
=================================

What:  The task-side operations the routes expose: create from free text,
       grouped listing, close, reopen.
How:   Composes TodoistService with the due-date extractor and the aggregator.
Who:   Called by routes/tasks.py.
"""

import logging
from typing import Optional

from taskrelay.exceptions import ValidationError
from taskrelay.models.task import Task
from taskrelay.services.aggregator import TaskGrouping, aggregate
from taskrelay.services.due_date import extract_due_date
from taskrelay.services.todoist_service import TodoistService

logger = logging.getLogger(__name__)


class TaskService:
    """Task operations over a Todoist adapter."""

    def __init__(self, todoist: TodoistService):
        self.todoist = todoist

    async def create_from_text(self, text: str, project_id: Optional[str] = None) -> Task:
        """
        Create a task from one line of free text.

        A date phrase in the text ("tomorrow at 9") is lifted out and sent as
        the due string; the rest becomes the task content.

        Raises:
            ValidationError: text is blank
        """
        text = (text or "").strip()
        if not text:
            raise ValidationError(
                message="Field 'text' is required and must not be blank",
                field="text",
            )
        content, due_string = extract_due_date(text)
        return await self.todoist.create_task(content, due_string=due_string, project_id=project_id)

    async def grouped(self, exclude_completed: bool = False) -> TaskGrouping:
        """Fetch tasks and projects in parallel and group them by project."""
        tasks, projects = await self.todoist.fetch_tasks_and_projects()
        return aggregate(tasks, projects, exclude_completed=exclude_completed)

    async def close(self, task_id: str) -> None:
        await self.todoist.close_task(_task_id(task_id))

    async def reopen(self, task_id: str) -> None:
        await self.todoist.reopen_task(_task_id(task_id))


def _task_id(task_id: str) -> str:
    cleaned = (task_id or "").strip()
    if not cleaned:
        raise ValidationError(message="A task id is required", field="task_id")
    return cleaned
