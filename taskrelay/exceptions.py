"""
TaskRelay Backend — Custom Exception Hierarchy
===============================================

What:  Defines application-specific exceptions for the three failure kinds a
       relay can hit: bad client input, missing server configuration, and a
       failing upstream service.
Why:   Services raise these instead of returning error dicts; global handlers
       (registered in main.py) turn them into structured JSON responses with
       the right HTTP status code.
How:   Each exception carries a message and an optional context dict.
Who:   Raised by services and dependencies; caught by global handlers.
When:  During request processing. Nothing is retried and no partial result is
       ever returned, so every raise ends the request.

Exception Hierarchy:
    TaskRelayError (base)
    ├── ValidationError           → 400 Bad Request (client can fix)
    │   └── AmountNotFoundError   → 400 (OCR text had no plausible amount)
    ├── AuthenticationError       → 401 Unauthorized (shared secret mismatch)
    ├── ConfigurationError        → 500 Internal Server Error (missing credential)
    └── UpstreamServiceError      → 502 Bad Gateway (Todoist, Sheets or OCR failed)
"""

from typing import Any, Dict, Optional


class TaskRelayError(Exception):
    """
    Base exception for all TaskRelay application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TaskRelayError):
    """
    Raised when client input fails validation.

    When:    Missing or blank required fields, unsupported upload type or size.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Field 'text' is required and must not be blank",
            "details": {"field": "text"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AmountNotFoundError(ValidationError):
    """
    Raised when recognized receipt text contains no plausible amount.

    The image was readable but nothing in it survived the amount heuristic,
    so the client has to supply the amount through the structured route.
    """

    def __init__(self, recognized_text: str = ""):
        super().__init__(
            message=(
                "Could not find an amount in the uploaded image. "
                "Log the expense with explicit fields instead."
            ),
            field="file",
            context={"recognized_chars": len(recognized_text)},
        )


class AuthenticationError(TaskRelayError):
    """
    Raised when the X-Internal-Secret header is missing or wrong.

    HTTP:    401 Unauthorized
    Only raised when an internal secret is configured.
    """

    def __init__(self, message: str = "Missing or invalid internal secret"):
        super().__init__(message=message)


class ConfigurationError(TaskRelayError):
    """
    Raised when a route needs a credential that is not configured.

    HTTP:    500 Internal Server Error
    The setting name is logged server-side; the client sees a generic message.
    """

    def __init__(self, setting: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["setting"] = setting
        super().__init__(
            message=f"Server is not configured: {setting} is missing",
            context=ctx,
        )
        self.setting = setting


class UpstreamServiceError(TaskRelayError):
    """
    Raised when a call to a third-party service fails.

    When:    Todoist answers with a non-2xx status or cannot be reached, the
             Sheets append fails, or the OCR call errors out.
    HTTP:    502 Bad Gateway

    The upstream's own error payload is attached so the frontend can show it
    for diagnostics:
        {
            "error": "upstream_error",
            "message": "todoist request failed with status 404",
            "details": {"service": "todoist", "status_code": 404, "upstream": "Task not found"}
        }
    """

    def __init__(
        self,
        service: str,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        if message is None:
            message = f"{service} request failed"
            if status_code is not None:
                message += f" with status {status_code}"
        super().__init__(
            message=message,
            context={"service": service, "status_code": status_code, "upstream": payload},
        )
        self.service = service
        self.status_code = status_code
        self.payload = payload
