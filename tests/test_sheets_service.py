"""
TaskRelay Backend — Sheets Ledger Tests (Mocked)
=================================================

What:  SheetsService with the Google client and credentials patched out.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from googleapiclient.errors import HttpError

from taskrelay.exceptions import ConfigurationError, UpstreamServiceError
from taskrelay.services.sheets_service import SheetsService

CREDENTIALS = json.dumps({"type": "service_account", "client_email": "bot@example.iam"})


def make_service():
    return SheetsService(spreadsheet_id="sheet-123", credentials_json=CREDENTIALS)


class TestAppendRow:
    @pytest.mark.asyncio
    async def test_append_calls_values_append(self):
        with patch("taskrelay.services.sheets_service.service_account") as mock_sa, \
             patch("taskrelay.services.sheets_service.build") as mock_build:
            append = mock_build.return_value.spreadsheets.return_value.values.return_value.append
            append.return_value.execute.return_value = {
                "updates": {"updatedRange": "Expenses!A7:F7"}
            }

            result = await make_service().append_row(["2030-01-01 10:00:00", "Food", "Lunch", 12.5, "", ""])

            assert result["updates"]["updatedRange"] == "Expenses!A7:F7"
            mock_sa.Credentials.from_service_account_info.assert_called_once()
            info = mock_sa.Credentials.from_service_account_info.call_args.args[0]
            assert info["client_email"] == "bot@example.iam"
            kwargs = append.call_args.kwargs
            assert kwargs["spreadsheetId"] == "sheet-123"
            assert kwargs["range"] == "Expenses!A:F"
            assert kwargs["valueInputOption"] == "USER_ENTERED"
            assert kwargs["body"] == {"values": [["2030-01-01 10:00:00", "Food", "Lunch", 12.5, "", ""]]}

    @pytest.mark.asyncio
    async def test_http_error_becomes_upstream_error(self):
        content = json.dumps({"error": {"code": 403, "message": "denied"}}).encode()
        error = HttpError(MagicMock(status=403, reason="Forbidden"), content)

        with patch("taskrelay.services.sheets_service.service_account"), \
             patch("taskrelay.services.sheets_service.build") as mock_build:
            append = mock_build.return_value.spreadsheets.return_value.values.return_value.append
            append.return_value.execute.side_effect = error

            with pytest.raises(UpstreamServiceError) as exc_info:
                await make_service().append_row(["x"])

        assert exc_info.value.status_code == 403
        assert "denied" in exc_info.value.payload
        assert exc_info.value.service == "google_sheets"


class TestConfiguration:
    @pytest.mark.asyncio
    async def test_missing_sheet_id(self):
        service = SheetsService(spreadsheet_id="", credentials_json=CREDENTIALS)
        with pytest.raises(ConfigurationError, match="GOOGLE_SHEET_ID"):
            await service.append_row(["x"])

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        service = SheetsService(spreadsheet_id="sheet-123", credentials_json="")
        with pytest.raises(ConfigurationError, match="GOOGLE_SERVICE_ACCOUNT_JSON"):
            await service.append_row(["x"])

    @pytest.mark.asyncio
    async def test_unreadable_credentials(self):
        service = SheetsService(spreadsheet_id="sheet-123", credentials_json="{not json")
        with pytest.raises(ConfigurationError):
            await service.append_row(["x"])

    def test_configured_flag(self):
        assert make_service().configured
        assert not SheetsService("", "").configured
