"""
TaskRelay Backend — Route Dependencies
=======================================

What:  FastAPI dependency functions that hand routes their services and
       enforce the internal shared secret.
Why:   Services are built once per app by create_app() and stored on
       app.state. Reading them through dependencies keeps routes free of
       globals and lets tests swap any service on a fresh app.
"""

import hmac
import logging
from typing import Optional

from fastapi import Header, Request

from taskrelay.config import Settings
from taskrelay.exceptions import AuthenticationError
from taskrelay.services.expense_service import ExpenseService
from taskrelay.services.task_service import TaskService

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Internal-Secret"


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_task_service(request: Request) -> TaskService:
    return request.app.state.task_service


def get_expense_service(request: Request) -> ExpenseService:
    return request.app.state.expense_service


async def require_internal_secret(
    request: Request,
    x_internal_secret: Optional[str] = Header(default=None, alias=SECRET_HEADER),
) -> None:
    """
    Reject the request unless X-Internal-Secret matches the configured secret.

    Applied to every /api router. With no secret configured the check passes;
    create_app() logs a warning at startup in that case.
    """
    expected = request.app.state.settings.internal_api_secret
    if not expected:
        return
    if not x_internal_secret or not hmac.compare_digest(x_internal_secret, expected):
        logger.warning("Rejected %s %s: bad internal secret", request.method, request.url.path)
        raise AuthenticationError()
