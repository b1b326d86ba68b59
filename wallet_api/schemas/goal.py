# wallet_api/schemas/goal.py
from typing import Literal, Optional
from pydantic import BaseModel, Field
import datetime as dt
import uuid

from wallet_api.models.wallet import WalletCategory
from wallet_api.schemas.ledger import Cents


class GoalCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None
    target_amount: Cents = Field(..., gt=0)
    target_date: Optional[dt.date] = None
    wallet_category: WalletCategory = WalletCategory.saving


class GoalUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    target_amount: Optional[Cents] = Field(None, gt=0)
    target_date: Optional[dt.date] = None
    wallet_category: Optional[WalletCategory] = None


class GoalContribution(BaseModel):
    amount: Cents = Field(..., gt=0)


class GoalRead(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    target_amount: float
    saved_amount: float
    target_date: Optional[dt.date] = None
    wallet_category: WalletCategory
    status: Literal["active", "completed", "overdue"]
    progress_percentage: float = 0.0
    remaining_amount: float = 0.0
    days_left: Optional[int] = None

    class Config:
        from_attributes = True
