# wallet_api/schemas/income.py
from typing import List, Optional
from pydantic import BaseModel, Field
import datetime as dt
import uuid

from wallet_api.schemas.ledger import Cents, Distribution, Movement


class IncomeBase(BaseModel):
    source: str = Field(..., min_length=1, description="E.g. Salary, Freelance")
    amount: Cents = Field(..., gt=0)
    date: dt.date
    category: str = Field(..., min_length=1)
    notes: Optional[str] = None
    payment_method: Optional[str] = None


class IncomeCreate(IncomeBase):
    # Account the money arrived in; its own wallet set receives the allocation
    bank_account_id: Optional[uuid.UUID] = None
    # One-off override of the saved distribution settings
    distribution: Optional[Distribution] = None


class IncomeUpdate(BaseModel):
    source: Optional[str] = Field(None, min_length=1)
    amount: Optional[Cents] = Field(None, gt=0)
    date: Optional[dt.date] = None
    category: Optional[str] = Field(None, min_length=1)
    notes: Optional[str] = None
    payment_method: Optional[str] = None
    distribution: Optional[Distribution] = None


class IncomeRead(IncomeBase):
    id: uuid.UUID
    user_id: uuid.UUID
    bank_account_id: Optional[uuid.UUID] = None
    allocations: Optional[List[Movement]] = None

    class Config:
        from_attributes = True
