"""
TaskRelay Backend — Task Route Handlers
========================================

What:  Create tasks from free text, list tasks grouped by project, close and
       reopen tasks.
How:   Extracts request data, delegates to TaskService, shapes the response.
Who:   Called by the frontend task views.

Routes:
    POST /api/tasks                    create from free text (201)
    GET  /api/tasks                    grouped listing, JSON or markdown
    POST /api/tasks/{task_id}/close    mark complete
    POST /api/tasks/{task_id}/reopen   mark incomplete again
"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from taskrelay.dependencies import get_task_service, require_internal_secret
from taskrelay.schemas.common import ErrorResponse
from taskrelay.schemas.tasks import (
    GroupedTasksResponse,
    TaskActionResponse,
    TaskCreate,
    TaskFormat,
    TaskOut,
)
from taskrelay.services.aggregator import render_json, render_markdown
from taskrelay.services.task_service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Tasks"],
    dependencies=[Depends(require_internal_secret)],
    responses={
        401: {"description": "Missing or invalid internal secret", "model": ErrorResponse},
        502: {"description": "Task service failed", "model": ErrorResponse},
    },
)


@router.post(
    "/tasks",
    status_code=201,
    response_model=TaskOut,
    responses={400: {"description": "Blank task text", "model": ErrorResponse}},
    summary="Create a task from free text",
    description=(
        "Creates a task in the task service. A date phrase in the text "
        "(\"tomorrow\", \"next monday at 9\") is removed from the content and sent "
        "as the task's due date."
    ),
)
async def create_task(
    body: TaskCreate,
    service: TaskService = Depends(get_task_service),
) -> TaskOut:
    task = await service.create_from_text(body.text, project_id=body.project_id)
    return TaskOut(
        id=task.id,
        content=task.content,
        is_completed=task.is_completed,
        due=task.due,
        project_id=task.project_id,
    )


@router.get(
    "/tasks",
    response_model=GroupedTasksResponse,
    responses={
        200: {
            "description": "Tasks grouped by project",
            "content": {"text/markdown": {"schema": {"type": "string"}}},
        },
    },
    summary="List tasks grouped by project",
    description=(
        "Fetches tasks and projects, groups tasks under their project and sorts both "
        "by their rank. `format=markdown` returns a checklist document instead of JSON."
    ),
)
async def list_tasks(
    format: TaskFormat = Query(default=TaskFormat.json, description="json or markdown"),
    exclude_completed: bool = Query(default=False, description="Drop completed tasks"),
    service: TaskService = Depends(get_task_service),
):
    grouping = await service.grouped(exclude_completed=exclude_completed)
    if format is TaskFormat.markdown:
        return PlainTextResponse(render_markdown(grouping), media_type="text/markdown")
    return GroupedTasksResponse(projects=render_json(grouping))


@router.post(
    "/tasks/{task_id}/close",
    response_model=TaskActionResponse,
    summary="Mark a task complete",
)
async def close_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
) -> TaskActionResponse:
    await service.close(task_id)
    return TaskActionResponse(id=task_id, status="closed")


@router.post(
    "/tasks/{task_id}/reopen",
    response_model=TaskActionResponse,
    summary="Reopen a completed task",
)
async def reopen_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
) -> TaskActionResponse:
    await service.reopen(task_id)
    return TaskActionResponse(id=task_id, status="reopened")
