"""
TaskRelay Backend — Expense Route Handlers
===========================================

What:  Log an expense from explicit fields or from a receipt photo.
How:   Receives JSON or a multipart upload, delegates to ExpenseService.
Who:   Called by the frontend expense form and its camera upload.

Request Flow (receipt):
    1. Client sends multipart/form-data with a 'file' field and optional
       category / item / payment_method / note fields
    2. The upload is read into memory (bounded by the size check)
    3. ExpenseService: validate → OCR → amount heuristic → append row
    4. Return 201 Created with the appended row
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from taskrelay.dependencies import get_expense_service, require_internal_secret
from taskrelay.schemas.common import ErrorResponse
from taskrelay.schemas.expenses import ExpenseCreate, ExpenseResponse
from taskrelay.services.expense_service import ExpenseService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Expenses"],
    dependencies=[Depends(require_internal_secret)],
    responses={
        400: {"description": "Missing field or invalid upload", "model": ErrorResponse},
        401: {"description": "Missing or invalid internal secret", "model": ErrorResponse},
        500: {"description": "Spreadsheet or OCR not configured", "model": ErrorResponse},
        502: {"description": "Spreadsheet or OCR service failed", "model": ErrorResponse},
    },
)


@router.post(
    "/expenses",
    status_code=201,
    response_model=ExpenseResponse,
    summary="Log an expense from explicit fields",
)
async def log_expense(
    body: ExpenseCreate,
    service: ExpenseService = Depends(get_expense_service),
) -> ExpenseResponse:
    return await service.log_expense(body)


@router.post(
    "/expenses/receipt",
    status_code=201,
    response_model=ExpenseResponse,
    summary="Log an expense from a receipt image",
    description=(
        "Upload a receipt photo (PNG, JPEG or WebP). The text is recognized and the "
        "largest plausible number is taken as the amount. This is best-effort; use "
        "POST /api/expenses when the amount is known."
    ),
)
async def log_receipt(
    file: UploadFile = File(..., description="Receipt image"),
    category: Optional[str] = Form(default=None),
    item: Optional[str] = Form(default=None),
    payment_method: Optional[str] = Form(default=None),
    note: Optional[str] = Form(default=None),
    service: ExpenseService = Depends(get_expense_service),
) -> ExpenseResponse:
    content = await file.read()

    logger.info(
        "Received receipt upload: filename=%s, size=%d bytes",
        file.filename or "unknown",
        len(content),
    )

    try:
        return await service.log_from_image(
            filename=file.filename or "receipt.jpg",
            content=content,
            content_type=file.content_type,
            content_length=file.size,
            category=category,
            item=item,
            payment_method=payment_method,
            note=note,
        )
    finally:
        await file.close()
