"""
TaskRelay Backend — Expense Service (Business Logic Orchestrator)
==================================================================

What:  Turns an expense request into one spreadsheet row.
Why:   Both inbound shapes (explicit fields, receipt photo) end in the same
       append; the route handlers stay thin.
How:   Composes UploadService, an OcrService and SheetsService.

Orchestration Flow (POST /api/expenses/receipt):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌─────────────┐    ┌──────────┐
    │  Upload  │───▶│  Validate   │───▶│  OCR         │───▶│  Amount     │───▶│  Append  │
    │  (Route) │    │  (Upload)   │    │  (Gemini)    │    │  heuristic  │    │  (Sheets)│
    └──────────┘    └─────────────┘    └──────────────┘    └─────────────┘    └──────────┘

    Any failing step ends the request; nothing is appended on failure and
    nothing is retried.
"""

import logging
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from taskrelay.exceptions import AmountNotFoundError, ValidationError
from taskrelay.models.task import ExpenseRecord
from taskrelay.schemas.expenses import ExpenseCreate, ExpenseResponse
from taskrelay.services.amount import extract_amount
from taskrelay.services.ocr_base import OcrService
from taskrelay.services.sheets_service import SheetsService
from taskrelay.services.upload_service import UploadService

logger = logging.getLogger(__name__)

RECEIPT_DEFAULT_CATEGORY = "Uncategorized"
RECEIPT_DEFAULT_ITEM = "Receipt"
# Recognized text is kept in the note column, bounded so one row stays readable.
RECEIPT_NOTE_LIMIT = 200


def _required(value: Optional[str], field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(
            message=f"Field '{field}' is required and must not be blank",
            field=field,
        )
    return cleaned


class ExpenseService:
    """
    Logs expenses to the spreadsheet ledger.

    Args:
        sheets: Spreadsheet writer.
        ocr: Image text recognizer for the receipt path.
        uploads: Upload validator for the receipt path.
        timezone: IANA zone used for the row timestamp.
        amount_min_length / amount_max_length: Token length bounds for the
            amount heuristic.
    """

    def __init__(
        self,
        sheets: SheetsService,
        ocr: OcrService,
        uploads: UploadService,
        timezone: str = "UTC",
        amount_min_length: int = 1,
        amount_max_length: int = 10,
    ):
        self.sheets = sheets
        self.ocr = ocr
        self.uploads = uploads
        self.timezone = ZoneInfo(timezone)
        self.amount_min_length = amount_min_length
        self.amount_max_length = amount_max_length

    def _now(self) -> datetime:
        return datetime.now(self.timezone)

    async def _append(self, record: ExpenseRecord, source: str) -> ExpenseResponse:
        await self.sheets.append_row(record.as_row())
        logger.info(
            "Logged %s expense: category=%s amount=%.2f", source, record.category, record.amount
        )
        return ExpenseResponse(
            timestamp=record.timestamp,
            category=record.category,
            item=record.item,
            amount=record.amount,
            payment_method=record.payment_method,
            note=record.note,
            source=source,
        )

    async def log_expense(self, expense: ExpenseCreate) -> ExpenseResponse:
        """
        Append an expense given as explicit fields.

        Raises:
            ValidationError: category or item blank
            ConfigurationError / UpstreamServiceError: from SheetsService
        """
        record = ExpenseRecord(
            timestamp=self._now(),
            category=_required(expense.category, "category"),
            item=_required(expense.item, "item"),
            amount=expense.amount,
            payment_method=(expense.payment_method or "").strip(),
            note=(expense.note or "").strip(),
        )
        return await self._append(record, source="manual")

    async def log_from_image(
        self,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
        category: Optional[str] = None,
        item: Optional[str] = None,
        payment_method: Optional[str] = None,
        note: Optional[str] = None,
    ) -> ExpenseResponse:
        """
        Append an expense whose amount is read from a receipt image.

        Workflow Steps:
            1. Validate the upload (extension, content type, size)
            2. Recognize text with the OCR service
            3. Pick the amount with the largest-plausible-number heuristic
            4. Append the row; the note defaults to the recognized text

        Raises:
            ValidationError: bad upload
            AmountNotFoundError: no plausible amount in the recognized text
            ConfigurationError / UpstreamServiceError: from OCR or Sheets
        """
        mime_type = self.uploads.validate(
            filename=filename,
            content=content,
            content_type=content_type,
            content_length=content_length,
        )

        text = await self.ocr.recognize_text(content, mime_type)
        amount = extract_amount(text, self.amount_min_length, self.amount_max_length)
        if amount is None:
            logger.warning("No amount found in %d chars of recognized text", len(text))
            raise AmountNotFoundError(text)

        record = ExpenseRecord(
            timestamp=self._now(),
            category=(category or "").strip() or RECEIPT_DEFAULT_CATEGORY,
            item=(item or "").strip() or RECEIPT_DEFAULT_ITEM,
            amount=amount,
            payment_method=(payment_method or "").strip(),
            note=(note or "").strip() or " ".join(text.split())[:RECEIPT_NOTE_LIMIT],
        )
        return await self._append(record, source="receipt")
