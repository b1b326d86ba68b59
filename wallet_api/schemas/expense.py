# wallet_api/schemas/expense.py
from typing import List, Optional
from pydantic import BaseModel, Field
import datetime as dt
import uuid

from wallet_api.schemas.ledger import Cents, FundingSource, Movement


class ExpenseBase(BaseModel):
    description: str = Field(..., min_length=1, description="E.g. Groceries, Fuel, Restaurant")
    amount: Cents = Field(..., gt=0)
    date: dt.date
    category: str = Field(..., min_length=1)
    notes: Optional[str] = None
    payment_method: Optional[str] = None


class ExpenseCreate(ExpenseBase):
    # Drained in this order: the first source pays first
    sources: List[FundingSource] = Field(..., min_length=1)
    # Account paid from; sources are looked up in its wallet set
    bank_account_id: Optional[uuid.UUID] = None


class ExpenseUpdate(BaseModel):
    description: Optional[str] = Field(None, min_length=1)
    amount: Optional[Cents] = Field(None, gt=0)
    date: Optional[dt.date] = None
    category: Optional[str] = Field(None, min_length=1)
    notes: Optional[str] = None
    payment_method: Optional[str] = None
    # Defaults to the order of the current deductions
    sources: Optional[List[FundingSource]] = None


class ExpenseRead(ExpenseBase):
    id: uuid.UUID
    user_id: uuid.UUID
    bank_account_id: Optional[uuid.UUID] = None
    deductions: List[Movement]

    class Config:
        from_attributes = True
