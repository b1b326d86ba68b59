# wallet_api/schemas/wallet.py
from typing import List, Optional
from pydantic import BaseModel, Field
import uuid

from wallet_api.models.wallet import WalletCategory


class SubWalletGoal(BaseModel):
    enabled: bool = False
    target_amount: Optional[float] = Field(None, gt=0)


class SubWalletGoalProgress(BaseModel):
    target_amount: float
    current_amount: float
    progress_percentage: float
    remaining_amount: float
    achieved: bool


class SubWalletCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    parent_category: WalletCategory
    allocation_percentage: float = Field(..., gt=0, le=100)
    color: str = "gray"
    order_position: Optional[int] = None


class SubWalletUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    allocation_percentage: Optional[float] = Field(None, gt=0, le=100)
    color: Optional[str] = None
    order_position: Optional[int] = None


class SubWalletRead(BaseModel):
    id: uuid.UUID
    name: str
    parent_category: WalletCategory
    parent_wallet_id: Optional[uuid.UUID] = None
    bank_account_id: Optional[uuid.UUID] = None
    allocation_percentage: float
    color: str
    balance: float
    order_position: int
    goal_enabled: bool = False
    goal_target_amount: Optional[float] = None
    goal_progress: Optional[SubWalletGoalProgress] = None

    class Config:
        from_attributes = True


class WalletOverview(BaseModel):
    id: uuid.UUID
    name: str
    category: WalletCategory
    color: str
    unallocated_balance: float
    sub_wallet_balance: float
    total_balance: float
    allocated_percentage: float
    sub_wallets: List[SubWalletRead]
