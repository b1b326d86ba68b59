# wallet_api/utils/allocation.py
"""
Income allocation: split an income amount across the saving / needs / wants
wallets by the user's distribution, then across each category's sub-wallets
by their allocation percentage.

The part of a category's share not claimed by its sub-wallets is credited to
the category wallet itself (its stored unallocated remainder).

Every amount is in whole cents: category shares are rounded with the
rounding residue given to the last funded category, and sub-wallet shares
are rounded down so the leftover cents stay in the wallet remainder.
"""
import logging
import uuid
from typing import Dict, Iterable, List, Mapping, NamedTuple, Union

from pydantic import BaseModel

from wallet_api.core.exceptions import ValidationError
from wallet_api.models.wallet import WalletCategory
from wallet_api.schemas.ledger import (
    Distribution,
    Movement,
    SubWalletMovement,
    WalletMovement,
    floor_money,
    round_money,
)

logger = logging.getLogger(__name__)

CATEGORIES = [c.value for c in WalletCategory]

# Remainders below this are float noise from percentage arithmetic
EPSILON = 1e-9


class SubWalletShare(NamedTuple):
    id: uuid.UUID
    parent_category: str
    allocation_percentage: float


class Allocation(BaseModel):
    category_amounts: Dict[str, float]
    credits: List[Movement]

    def total(self) -> float:
        return sum(c.amount for c in self.credits)


def distribution_as_dict(distribution: Union[Distribution, Mapping[str, int]]) -> Dict[str, int]:
    """Read a distribution without normalising it; a bad one is rejected"""
    if isinstance(distribution, Distribution):
        values = distribution.model_dump()
    else:
        missing = [c for c in CATEGORIES if c not in distribution]
        if missing:
            raise ValidationError(f"Distribution is missing: {', '.join(missing)}")
        values = {c: distribution[c] for c in CATEGORIES}

    if any(v is None or v < 0 for v in values.values()):
        raise ValidationError("Distribution percentages cannot be negative")
    total = sum(values.values())
    if total != 100:
        raise ValidationError(f"Distribution percentages must add up to 100 (got {total})")
    return values


def split_by_category(income_amount: float, percentages: Mapping[str, int]) -> Dict[str, float]:
    """Category shares in cents; they always add up to the income exactly"""
    amounts = {c: round_money(income_amount * percentages[c] / 100) for c in CATEGORIES}
    funded = [c for c in CATEGORIES if percentages[c] > 0]
    residue = round_money(income_amount - sum(amounts.values()))
    if residue and funded:
        amounts[funded[-1]] = round_money(amounts[funded[-1]] + residue)
    return amounts


def shares_from_sub_wallets(sub_wallets: Iterable) -> List[SubWalletShare]:
    return [
        SubWalletShare(sw.id, sw.parent_category, float(sw.allocation_percentage or 0))
        for sw in sub_wallets
    ]


def allocate(
    income_amount: float,
    distribution: Union[Distribution, Mapping[str, int]],
    sub_wallets: Iterable[SubWalletShare],
    wallet_ids: Mapping[str, uuid.UUID],
) -> Allocation:
    """
    Compute the credits produced by one income entry.

    Args:
        income_amount: Positive income amount
        distribution: saving / needs / wants percentages summing to 100
        sub_wallets: Shares configured under each parent category
        wallet_ids: Category → wallet id, receiver of each category's remainder

    Returns:
        Allocation with the per-category amounts and the credit list
    """
    if income_amount is None or round_money(income_amount) <= 0:
        raise ValidationError("Amount must be greater than 0")

    percentages = distribution_as_dict(distribution)
    shares = list(sub_wallets)

    category_amounts = split_by_category(income_amount, percentages)
    credits: List[Movement] = []

    for category in CATEGORIES:
        category_amount = category_amounts[category]

        allocated = 0.0
        for share in shares:
            if share.parent_category != category:
                continue
            sub_amount = floor_money(category_amount * share.allocation_percentage / 100)
            if sub_amount > 0:
                credits.append(SubWalletMovement(id=share.id, amount=sub_amount, parent_category=category))
                allocated += sub_amount

        remainder = round_money(category_amount - allocated)
        if remainder > EPSILON:
            wallet_id = wallet_ids.get(category)
            if wallet_id is None:
                logger.warning(f"No {category} wallet to receive unallocated {remainder:.2f}")
                continue
            credits.append(WalletMovement(id=wallet_id, amount=remainder))

    return Allocation(category_amounts=category_amounts, credits=credits)
