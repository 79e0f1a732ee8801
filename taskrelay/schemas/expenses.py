"""
TaskRelay Backend — Expense Request/Response Schemas
=====================================================

What:  API contract for the expense routes.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ExpenseCreate(BaseModel):
    """
    What:  Body of POST /api/expenses.

    Example:
        {"category": "Groceries", "item": "Weekly shop", "amount": 84.2,
         "payment_method": "Visa", "note": "Farmers market"}
    """
    category: str = Field(description="Expense category")
    item: str = Field(description="What was bought")
    amount: float = Field(gt=0, description="Amount spent; must be positive")
    payment_method: Optional[str] = Field(default="", description="Card, cash, ...")
    note: Optional[str] = Field(default="", description="Free-text note")


class ExpenseResponse(BaseModel):
    """
    What:  The row that was appended to the ledger.
    `source` is "manual" for explicit fields and "receipt" for the image path.
    """
    message: str = Field(default="Expense logged")
    timestamp: datetime
    category: str
    item: str
    amount: float
    payment_method: str = ""
    note: str = ""
    source: str
