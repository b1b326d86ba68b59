# wallet_api/schemas/account.py
from typing import Optional
from pydantic import BaseModel, Field, model_validator
import datetime as dt
import uuid

from wallet_api.schemas.ledger import Cents


class BankAccountCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="E.g. Salary Account")
    bank_name: str = Field(..., min_length=1, max_length=100)
    account_type: str = Field("savings", min_length=1, max_length=30)
    # Opening balance
    balance: Cents = Field(0.0, ge=0)


class BankAccountUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    bank_name: Optional[str] = Field(None, min_length=1, max_length=100)
    account_type: Optional[str] = Field(None, min_length=1, max_length=30)


class BankAccountRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    bank_name: str
    account_type: str
    balance: float
    is_primary: bool
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class BankTransferCreate(BaseModel):
    from_account_id: uuid.UUID
    to_account_id: uuid.UUID
    amount: Cents = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=255)
    transfer_date: Optional[dt.date] = None

    @model_validator(mode="after")
    def check_accounts_differ(self):
        if self.from_account_id == self.to_account_id:
            raise ValueError("Source and destination accounts must be different")
        return self


class BankTransferRead(BaseModel):
    id: uuid.UUID
    from_account_id: uuid.UUID
    to_account_id: uuid.UUID
    amount: float
    description: Optional[str] = None
    transfer_date: dt.date

    class Config:
        from_attributes = True
