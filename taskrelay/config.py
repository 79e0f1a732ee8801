"""
TaskRelay Backend — Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file) and
       validates types/ranges. A Settings value is built once by the app
       factory and handed to every service explicitly.
Who:   Consumed by create_app() and the services it constructs.
When:  Loaded when the application is created; tests build their own instances.

Design Decision:
    There is no module-level `settings` singleton. Credentials are passed into
    the services that need them, so tests and alternative deployments can build
    a fresh Settings without patching global state.
"""

from functools import lru_cache
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Credentials default to empty and
    are checked lazily: a route that needs a missing credential fails with a
    configuration error, the rest of the service keeps working.
    """

    # ── Todoist (task service) ────────────────────────────────────────────
    todoist_api_token: str = Field(default="", description="Todoist REST API token")
    todoist_base_url: str = Field(default="https://api.todoist.com/rest/v2")

    # What: Timeout applied to every outbound HTTP call, in seconds
    # No retries are made; a timeout surfaces as an upstream error.
    http_timeout: float = Field(default=15.0, gt=0, le=120)

    # ── Google Sheets (expense ledger) ────────────────────────────────────
    google_sheet_id: str = Field(default="", description="Spreadsheet ID for expenses")
    google_service_account_json: str = Field(
        default="",
        description="Service-account credential JSON blob (the full key file contents)",
    )
    expense_sheet_range: str = Field(default="Expenses!A:F")

    # ── Google Gemini (OCR) ───────────────────────────────────────────────
    gemini_api_key: str = Field(default="", description="Gemini key for receipt OCR")
    gemini_model: str = Field(default="gemini-1.5-flash")

    # ── Access control ────────────────────────────────────────────────────
    # When set, every /api route requires X-Internal-Secret to match.
    internal_api_secret: str = Field(default="")

    # ── Uploads & amount heuristic ────────────────────────────────────────
    max_upload_size: int = Field(default=10_485_760, ge=1_048_576, le=52_428_800)
    amount_min_length: int = Field(default=1, ge=1, le=20)
    amount_max_length: int = Field(default=10, ge=1, le=30)

    # ── Expense rows ──────────────────────────────────────────────────────
    timezone: str = Field(default="UTC")

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1024, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Expense timestamps need a zone the tz database knows."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Invalid timezone '{v}': not an IANA zone name") from e
        return v

    @field_validator("amount_max_length")
    @classmethod
    def validate_amount_bounds(cls, v: int, info) -> int:
        """The upper token-length bound may not fall below the lower one."""
        lower = info.data.get("amount_min_length", 1)
        if v < lower:
            raise ValueError(
                f"amount_max_length ({v}) must be >= amount_min_length ({lower})"
            )
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def missing_credentials(self) -> List[str]:
        """
        What:  Lists the upstream integrations that are not configured.
        When:  Logged at startup and reported by /health.
        Why:   A relay with one missing key is still useful for the other routes,
               so this reports instead of raising.
        """
        missing = []
        if not self.todoist_api_token:
            missing.append("TODOIST_API_TOKEN")
        if not self.google_sheet_id:
            missing.append("GOOGLE_SHEET_ID")
        if not self.google_service_account_json:
            missing.append("GOOGLE_SERVICE_ACCOUNT_JSON")
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        return missing


@lru_cache
def get_settings() -> Settings:
    """Settings read from the process environment, built on first use."""
    return Settings()
