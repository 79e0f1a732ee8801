"""
TaskRelay Backend — Google Sheets Expense Ledger
=================================================

What:  Appends expense rows to a Google spreadsheet.
Why:   The spreadsheet is the expense ledger; this relay only ever writes to it.
How:   Service-account credentials from a JSON blob, googleapiclient's
       `spreadsheets().values().append()`. The Google client is synchronous,
       so the call runs in Starlette's threadpool to keep the event loop free.
Who:   Constructed by create_app() from Settings; used by ExpenseService.

One append per expense. No retry; an HttpError is surfaced as
UpstreamServiceError with Google's error body attached.
"""

import json
import logging
from typing import Any, Dict, List

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from starlette.concurrency import run_in_threadpool

from taskrelay.exceptions import ConfigurationError, UpstreamServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "google_sheets"
SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class SheetsService:
    """Append-only writer for the expense spreadsheet."""

    def __init__(
        self,
        spreadsheet_id: str,
        credentials_json: str,
        sheet_range: str = "Expenses!A:F",
    ):
        self.spreadsheet_id = spreadsheet_id
        self.credentials_json = credentials_json
        self.sheet_range = sheet_range

    @property
    def configured(self) -> bool:
        return bool(self.spreadsheet_id and self.credentials_json)

    def _credentials(self):
        if not self.spreadsheet_id:
            raise ConfigurationError("GOOGLE_SHEET_ID")
        if not self.credentials_json:
            raise ConfigurationError("GOOGLE_SERVICE_ACCOUNT_JSON")
        try:
            info = json.loads(self.credentials_json)
            return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
        except (ValueError, KeyError) as e:
            logger.error("Service-account credentials are unreadable: %s", e)
            raise ConfigurationError(
                "GOOGLE_SERVICE_ACCOUNT_JSON", context={"error": type(e).__name__}
            ) from e

    def _append_sync(self, row: List[Any]) -> Dict[str, Any]:
        credentials = self._credentials()
        sheets = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        try:
            return (
                sheets.spreadsheets()
                .values()
                .append(
                    spreadsheetId=self.spreadsheet_id,
                    range=self.sheet_range,
                    valueInputOption="USER_ENTERED",
                    insertDataOption="INSERT_ROWS",
                    body={"values": [row]},
                )
                .execute()
            )
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            payload = e.content.decode("utf-8", errors="replace") if e.content else str(e)
            logger.error("Sheets append failed (%s): %s", status, payload)
            raise UpstreamServiceError(
                SERVICE_NAME,
                status_code=int(status) if status is not None else None,
                payload=payload,
            ) from e
        except GoogleAuthError as e:
            logger.error("Sheets authentication failed: %s", e)
            raise UpstreamServiceError(
                SERVICE_NAME,
                message=f"Could not authenticate with {SERVICE_NAME}",
                payload=str(e),
            ) from e

    async def append_row(self, row: List[Any]) -> Dict[str, Any]:
        """Append one row to the configured range. Returns Google's update summary."""
        result = await run_in_threadpool(self._append_sync, row)
        updates = (result or {}).get("updates", {})
        logger.info("Appended expense row at %s", updates.get("updatedRange", self.sheet_range))
        return result or {}
