"""
TaskRelay Backend — Task Request/Response Schemas
==================================================

What:  API contract for the task routes.
Why:   FastAPI validates the incoming body and documents the response shape
       in OpenAPI from these models.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class TaskCreate(BaseModel):
    """
    What:  Body of POST /api/tasks.

    `text` is free-form; a date phrase inside it becomes the due date.
    Example: {"text": "Call the plumber tomorrow at 10am"}
    """
    text: str = Field(description="Free-form task text, may contain a date phrase")
    project_id: Optional[str] = Field(
        default=None,
        description="Project to file the task under (task service default when omitted)",
    )


class TaskOut(BaseModel):
    """A task reduced to what the frontend displays."""
    id: str
    content: str
    is_completed: bool
    due: Optional[str] = Field(default=None, description="Human-readable due string")
    project_id: Optional[str] = None


class ProjectTasksOut(BaseModel):
    """One project with its tasks, sorted by rank."""
    id: Optional[str] = Field(description="Project id; null for the Ungrouped bucket")
    name: str
    tasks: List[TaskOut] = Field(default_factory=list)


class GroupedTasksResponse(BaseModel):
    """
    What:  JSON rendering of GET /api/tasks.
    Projects appear in rank order; a project with no tasks has an empty list.
    """
    projects: List[ProjectTasksOut]


class TaskActionResponse(BaseModel):
    """Result of a close/reopen call."""
    id: str
    status: str = Field(description="closed or reopened")


class TaskFormat(str, Enum):
    json = "json"
    markdown = "markdown"
