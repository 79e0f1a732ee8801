"""
TaskRelay Backend — Todoist Task Source Adapter
================================================

What:  HTTP client for the Todoist REST v2 API: list tasks and projects,
       create, close and reopen tasks.
Why:   Keeps every detail of the task service's wire format and auth in one
       place. Routes and the aggregator only see Task and Project records.
How:   One httpx.AsyncClient per operation, bearer-token auth, no retries.
       Upstream failures become UpstreamServiceError with the upstream's
       response body attached.
Who:   Constructed by create_app() from Settings; used by the task routes.

Concurrency:
    fetch_tasks_and_projects() issues both list calls at once with
    asyncio.gather. If either fails the whole call fails; nothing partial is
    returned.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from taskrelay.exceptions import ConfigurationError, UpstreamServiceError
from taskrelay.models.task import Project, Task

logger = logging.getLogger(__name__)

SERVICE_NAME = "todoist"
DEFAULT_BASE_URL = "https://api.todoist.com/rest/v2"


def _error_payload(response: httpx.Response) -> Any:
    """Todoist answers errors with JSON or with a plain-text body."""
    try:
        return response.json()
    except ValueError:
        return response.text


class TodoistService:
    """
    Todoist REST v2 adapter. No business logic, just I/O and payload mapping.

    Args:
        api_token: Todoist API token. Empty means unconfigured; every call
                   then raises ConfigurationError.
        base_url: API root, overridable for tests and proxies.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_token)

    def _client(self) -> httpx.AsyncClient:
        if not self.api_token:
            raise ConfigurationError("TODOIST_API_TOKEN")
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {self.api_token}"},
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Make one request and translate failures into UpstreamServiceError."""
        try:
            response = await client.request(method, path, json=json)
        except httpx.RequestError as e:
            logger.error("Todoist %s %s unreachable: %s", method, path, e)
            raise UpstreamServiceError(
                SERVICE_NAME,
                message=f"Could not reach {SERVICE_NAME}: {type(e).__name__}",
                payload=str(e),
            ) from e

        if response.is_error:
            payload = _error_payload(response)
            logger.warning(
                "Todoist %s %s returned %d: %s", method, path, response.status_code, payload
            )
            raise UpstreamServiceError(
                SERVICE_NAME, status_code=response.status_code, payload=payload
            )

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ── Reads ─────────────────────────────────────────────────────────────

    async def fetch_tasks_and_projects(self) -> Tuple[List[Task], List[Project]]:
        """Fetch both collections concurrently over one client."""
        async with self._client() as client:
            task_data, project_data = await asyncio.gather(
                self._request(client, "GET", "/tasks"),
                self._request(client, "GET", "/projects"),
            )
        tasks = [Task.from_api(item) for item in task_data or []]
        projects = [Project.from_api(item) for item in project_data or []]
        logger.info("Fetched %d tasks across %d projects", len(tasks), len(projects))
        return tasks, projects

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_task(
        self,
        content: str,
        due_string: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> Task:
        """Create a task. `due_string` is passed through for Todoist to parse."""
        payload: Dict[str, Any] = {"content": content}
        if due_string:
            payload["due_string"] = due_string
        if project_id:
            payload["project_id"] = project_id

        async with self._client() as client:
            data = await self._request(client, "POST", "/tasks", json=payload)
        task = Task.from_api(data)
        logger.info("Created task %s (due=%s)", task.id, task.due)
        return task

    async def close_task(self, task_id: str) -> None:
        async with self._client() as client:
            await self._request(client, "POST", f"/tasks/{task_id}/close")
        logger.info("Closed task %s", task_id)

    async def reopen_task(self, task_id: str) -> None:
        async with self._client() as client:
            await self._request(client, "POST", f"/tasks/{task_id}/reopen")
        logger.info("Reopened task %s", task_id)
