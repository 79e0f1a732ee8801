"""
TaskRelay Backend — Expense Service Unit Tests
===============================================

What:  Tests for ExpenseService (manual fields and receipt image paths).
How:   In-memory OCR and ledger fakes from conftest; no Google calls.

What we test:
    ✅ Manual expense appends one row in ledger column order
    ✅ Blank required fields are rejected before anything is appended
    ✅ Receipt path: validate → OCR → largest amount → append
    ✅ No amount in the receipt text → AmountNotFoundError, nothing appended
    ✅ Upstream failures propagate unchanged
"""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from taskrelay.exceptions import AmountNotFoundError, UpstreamServiceError, ValidationError
from taskrelay.schemas.expenses import ExpenseCreate


class TestManualExpense:
    @pytest.mark.asyncio
    async def test_appends_row(self, expense_service, fake_sheets):
        result = await expense_service.log_expense(
            ExpenseCreate(
                category=" Groceries ",
                item="Weekly shop",
                amount=84.2,
                payment_method="Visa",
                note="market",
            )
        )

        assert result.source == "manual"
        assert result.category == "Groceries"
        assert len(fake_sheets.rows) == 1
        row = fake_sheets.rows[0]
        datetime.strptime(row[0], "%Y-%m-%d %H:%M:%S")
        assert row[1:] == ["Groceries", "Weekly shop", 84.2, "Visa", "market"]

    @pytest.mark.asyncio
    async def test_blank_category_rejected(self, expense_service, fake_sheets):
        with pytest.raises(ValidationError) as exc_info:
            await expense_service.log_expense(ExpenseCreate(category="  ", item="x", amount=1))

        assert exc_info.value.field == "category"
        assert fake_sheets.rows == []

    @pytest.mark.asyncio
    async def test_optional_fields_default_to_empty(self, expense_service, fake_sheets):
        await expense_service.log_expense(
            ExpenseCreate(category="Food", item="Lunch", amount=9.5, payment_method=None, note=None)
        )
        assert fake_sheets.rows[0][4:] == ["", ""]


class TestReceiptExpense:
    @pytest.mark.asyncio
    async def test_amount_from_recognized_text(
        self, expense_service, fake_ocr, fake_sheets, sample_image_bytes
    ):
        fake_ocr.text = "CORNER SHOP\nItem#88812340001\nSubtotal 1,100.00\nTotal 1,234.50"

        result = await expense_service.log_from_image(
            filename="receipt.jpg",
            content=sample_image_bytes,
            content_type="image/jpeg",
            category="Household",
        )

        assert result.amount == pytest.approx(1234.50)
        assert result.source == "receipt"
        assert fake_ocr.calls == [{"size": len(sample_image_bytes), "mime_type": "image/jpeg"}]
        row = fake_sheets.rows[0]
        assert row[1] == "Household"
        assert row[2] == "Receipt"
        assert row[3] == pytest.approx(1234.50)
        assert row[5].startswith("CORNER SHOP")

    @pytest.mark.asyncio
    async def test_explicit_note_wins_over_recognized_text(
        self, expense_service, fake_ocr, fake_sheets, sample_image_bytes
    ):
        fake_ocr.text = "TOTAL 7.00"
        await expense_service.log_from_image(
            filename="r.jpg", content=sample_image_bytes, note="team lunch"
        )
        assert fake_sheets.rows[0][1] == "Uncategorized"
        assert fake_sheets.rows[0][5] == "team lunch"

    @pytest.mark.asyncio
    async def test_no_amount_found(self, expense_service, fake_ocr, fake_sheets, sample_image_bytes):
        fake_ocr.text = "THANK YOU"

        with pytest.raises(AmountNotFoundError):
            await expense_service.log_from_image(filename="r.jpg", content=sample_image_bytes)

        assert fake_sheets.rows == []

    @pytest.mark.asyncio
    async def test_invalid_upload_never_reaches_ocr(self, expense_service, fake_ocr):
        with pytest.raises(ValidationError):
            await expense_service.log_from_image(filename="r.pdf", content=b"%PDF")
        assert fake_ocr.calls == []

    @pytest.mark.asyncio
    async def test_sheets_failure_propagates(
        self, expense_service, fake_ocr, fake_sheets, sample_image_bytes
    ):
        fake_ocr.text = "TOTAL 3.00"
        fake_sheets.append_row = AsyncMock(
            side_effect=UpstreamServiceError("google_sheets", status_code=500, payload="boom")
        )

        with pytest.raises(UpstreamServiceError):
            await expense_service.log_from_image(filename="r.jpg", content=sample_image_bytes)
