# wallet_api/schemas/ledger.py
import math
from typing import Annotated, List, Literal, Optional, Union
from pydantic import AfterValidator, BaseModel, Field, TypeAdapter, model_validator
import uuid

SourceKind = Literal["wallet", "subwallet"]


# ────────────────────────────────────────────────────────────────────────────────
# MONEY
# ────────────────────────────────────────────────────────────────────────────────
# Balances and every recorded movement are kept in whole cents
def round_money(value: float) -> float:
    return round(float(value), 2)


def floor_money(value: float) -> float:
    # Tolerance absorbs float noise such as 14.999999999 for 15.00
    return math.floor(float(value) * 100 + 1e-6) / 100


def whole_cents(value: float) -> float:
    if value is not None and abs(value - round(value, 2)) > 1e-9:
        raise ValueError("Amount cannot have more than 2 decimal places")
    return round_money(value) if value is not None else value


Cents = Annotated[float, AfterValidator(whole_cents)]


# ────────────────────────────────────────────────────────────────────────────────
# MOVEMENTS
# ────────────────────────────────────────────────────────────────────────────────
class WalletMovement(BaseModel):
    kind: Literal["wallet"] = "wallet"
    id: uuid.UUID
    amount: float


class SubWalletMovement(BaseModel):
    kind: Literal["subwallet"] = "subwallet"
    id: uuid.UUID
    amount: float
    # Lets a reversal land on the parent wallet once the sub-wallet is gone
    parent_category: Optional[str] = None


# One balance change against a wallet remainder or a sub-wallet.
# Used for income allocations, expense deductions and their reversals.
Movement = Annotated[Union[WalletMovement, SubWalletMovement], Field(discriminator="kind")]

movement_list_adapter = TypeAdapter(List[Movement])


def make_movement(kind: str, id: uuid.UUID, amount: float, parent_category: Optional[str] = None):
    if kind == "wallet":
        return WalletMovement(id=id, amount=amount)
    return SubWalletMovement(id=id, amount=amount, parent_category=parent_category)

def load_movements(raw) -> List[Movement]:
    """Validate a JSON column value into typed movements"""
    return movement_list_adapter.validate_python(raw or [])


def dump_movements(movements) -> list:
    return movement_list_adapter.dump_python(list(movements), mode="json")


class FundingSource(BaseModel):
    """One entry of the user-ordered deduction queue"""
    kind: SourceKind
    id: uuid.UUID


class Distribution(BaseModel):
    saving: int = Field(..., ge=0, le=100)
    needs: int = Field(..., ge=0, le=100)
    wants: int = Field(..., ge=0, le=100)

    @model_validator(mode="after")
    def _sums_to_hundred(self):
        total = self.saving + self.needs + self.wants
        if total != 100:
            raise ValueError(f"Distribution percentages must add up to 100 (got {total})")
        return self


class TransferRequest(BaseModel):
    source: FundingSource
    target: FundingSource
    amount: Cents = Field(..., gt=0)


class TransferResult(BaseModel):
    amount: float
    movements: List[Movement]
