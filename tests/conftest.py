"""
TaskRelay Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Tests never call Todoist, Google Sheets or Gemini. Upstreams are
       replaced with httpx.MockTransport handlers and in-memory fakes.

Fixtures:
    ├── settings: Settings with fake credentials and no secret
    ├── fake_todoist: mutable Todoist fake state + request log
    ├── todoist_service: TodoistService wired to a MockTransport
    ├── fake_ocr / fake_sheets: in-memory OCR and ledger
    ├── app: create_app(settings) with fakes installed on app.state
    ├── test_client: HTTPX AsyncClient for endpoint testing
    └── sample_image_bytes: tiny JPEG for upload tests
"""

import json
import os
from typing import Any, Dict, List

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Keep the module-level app in taskrelay.main from picking up real credentials.
os.environ["TODOIST_API_TOKEN"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["INTERNAL_API_SECRET"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from taskrelay.config import Settings  # noqa: E402
from taskrelay.services.expense_service import ExpenseService  # noqa: E402
from taskrelay.services.ocr_base import OcrService  # noqa: E402
from taskrelay.services.task_service import TaskService  # noqa: E402
from taskrelay.services.todoist_service import TodoistService  # noqa: E402
from taskrelay.services.upload_service import UploadService  # noqa: E402


class FakeOcr(OcrService):
    """Returns a canned transcription and records what it was given."""

    def __init__(self, text: str = ""):
        self.text = text
        self.calls: List[Dict[str, Any]] = []

    @property
    def configured(self) -> bool:
        return True

    async def recognize_text(self, content: bytes, mime_type: str) -> str:
        self.calls.append({"size": len(content), "mime_type": mime_type})
        return self.text


class FakeSheets:
    """Collects appended rows instead of calling Google."""

    configured = True

    def __init__(self):
        self.rows: List[List[Any]] = []

    async def append_row(self, row: List[Any]) -> Dict[str, Any]:
        self.rows.append(row)
        return {"updates": {"updatedRange": f"Expenses!A{len(self.rows)}:F{len(self.rows)}"}}


class FakeTodoist:
    """
    In-memory stand-in for the Todoist REST v2 API, served through
    httpx.MockTransport so TodoistService runs its real HTTP code.
    """

    def __init__(self):
        self.tasks: List[Dict[str, Any]] = []
        self.projects: List[Dict[str, Any]] = []
        self.requests: List[httpx.Request] = []
        self.fail: Dict[str, httpx.Response] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.replace("/rest/v2", "")
        key = f"{request.method} {path}"
        if key in self.fail:
            return self.fail[key]

        if key == "GET /tasks":
            return httpx.Response(200, json=self.tasks)
        if key == "GET /projects":
            return httpx.Response(200, json=self.projects)
        if key == "POST /tasks":
            body = json.loads(request.content)
            task = {
                "id": str(1000 + len(self.tasks)),
                "content": body["content"],
                "is_completed": False,
                "project_id": body.get("project_id", "inbox"),
                "order": len(self.tasks) + 1,
                "due": {"string": body["due_string"], "date": "2030-01-01"}
                if body.get("due_string")
                else None,
            }
            self.tasks.append(task)
            return httpx.Response(200, json=task)
        if request.method == "POST" and path.endswith(("/close", "/reopen")):
            task_id = path.split("/")[2]
            if not any(t["id"] == task_id for t in self.tasks):
                return httpx.Response(404, text="Task not found")
            return httpx.Response(204)
        return httpx.Response(404, text="Not found")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings():
    return Settings(
        todoist_api_token="test-token",
        google_sheet_id="sheet-123",
        google_service_account_json="{}",
        gemini_api_key="test-key-not-real",
        internal_api_secret="",
        log_level="WARNING",
    )


@pytest.fixture
def fake_todoist():
    return FakeTodoist()


@pytest.fixture
def todoist_service(fake_todoist):
    return TodoistService(
        api_token="test-token",
        transport=fake_todoist.transport(),
    )


@pytest.fixture
def fake_ocr():
    return FakeOcr()


@pytest.fixture
def fake_sheets():
    return FakeSheets()


@pytest.fixture
def expense_service(fake_sheets, fake_ocr):
    return ExpenseService(sheets=fake_sheets, ocr=fake_ocr, uploads=UploadService())


@pytest.fixture
def app(settings, todoist_service, expense_service):
    """A fresh app per test, with every upstream replaced by a fake."""
    from taskrelay.main import create_app

    application = create_app(settings)
    application.state.task_service = TaskService(todoist_service)
    application.state.expense_service = expense_service
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )
