# wallet_api/schemas/udaar.py
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from datetime import datetime
import uuid

from wallet_api.models.udaar import HistoryAction, UdaarStatus, UdaarType
from wallet_api.schemas.ledger import Cents


class UdaarCreate(BaseModel):
    person_name: str = Field(..., min_length=1, max_length=150)
    amount: Cents = Field(..., gt=0)
    type: UdaarType
    description: str = ""
    date: Optional[datetime] = None


class UdaarUpdate(BaseModel):
    person_name: Optional[str] = Field(None, min_length=1, max_length=150)
    amount: Optional[Cents] = Field(None, gt=0)
    type: Optional[UdaarType] = None
    description: Optional[str] = None


class UdaarRead(BaseModel):
    id: uuid.UUID
    person_name: str
    description: str
    amount: float
    original_amount: Optional[float] = None
    type: UdaarType
    date: datetime
    status: UdaarStatus
    parent_transaction_id: Optional[uuid.UUID] = None

    class Config:
        from_attributes = True


class PartialPaymentRequest(BaseModel):
    amount: Cents = Field(..., gt=0)
    description: str = ""


class PaymentHistoryRead(BaseModel):
    id: uuid.UUID
    transaction_id: Optional[uuid.UUID] = None
    person_name: str
    action: HistoryAction
    description: str
    amount: Optional[float] = None
    date: datetime
    details: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class PersonBalance(BaseModel):
    person_name: str
    total_given: float
    total_received: float
    net_balance: float
    pending_receivable: float
    pending_payable: float
