# wallet_api/utils/deduction.py
"""
Expense deduction over a user-ordered queue of funding sources.

The first selected source is drained first. A wallet source only offers its
unallocated remainder; money held on sub-wallets is spent from the
sub-wallets themselves.
"""
import logging
import uuid
from typing import Callable, Iterable, List, Optional, Tuple

from pydantic import BaseModel

from wallet_api.core.exceptions import InsufficientFundsError, ValidationError
from wallet_api.schemas.ledger import FundingSource, Movement, make_movement, round_money

logger = logging.getLogger(__name__)

# Shortfalls below this are float noise and count as fully covered
EPSILON = 1e-9

BalanceLookup = Callable[[str, uuid.UUID], Optional[float]]


class DeductionResult(BaseModel):
    deductions: List[Movement]
    shortfall: float

    @property
    def covered(self) -> bool:
        return self.shortfall <= EPSILON

    def raise_for_shortfall(self) -> None:
        if not self.covered:
            raise InsufficientFundsError(self.shortfall)


def unique_sources(sources: Iterable[FundingSource]) -> List[FundingSource]:
    """Drop repeated sources, keeping the first position of each"""
    seen: set = set()
    ordered: List[FundingSource] = []
    for source in sources:
        key: Tuple[str, uuid.UUID] = (source.kind, source.id)
        if key in seen:
            logger.warning(f"Ignoring duplicate funding source {source.kind}:{source.id}")
            continue
        seen.add(key)
        ordered.append(source)
    return ordered


def deduct(
    expense_amount: float,
    ordered_sources: Iterable[FundingSource],
    balance_lookup: BalanceLookup,
) -> DeductionResult:
    """
    Walk the sources in order, taking as much as each can give.

    Nothing is persisted; a non-zero ``shortfall`` means the caller must
    reject the expense.
    """
    if expense_amount is None or round_money(expense_amount) <= 0:
        raise ValidationError("Amount must be greater than 0")

    remaining = round_money(expense_amount)
    deductions: List[Movement] = []

    for source in unique_sources(ordered_sources):
        if remaining <= EPSILON:
            break

        available = balance_lookup(source.kind, source.id)
        if available is None:
            logger.warning(f"Funding source {source.kind}:{source.id} no longer exists, skipping")
            continue

        amount = round_money(min(max(0.0, available), remaining))
        if amount > 0:
            deductions.append(make_movement(source.kind, source.id, amount))
            remaining = round_money(remaining - amount)

    shortfall = remaining if remaining > EPSILON else 0.0
    return DeductionResult(deductions=deductions, shortfall=shortfall)
