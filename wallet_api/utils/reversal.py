# wallet_api/utils/reversal.py
import logging
from typing import Iterable, List, Mapping, Optional, Union
import uuid

from wallet_api.schemas.ledger import Distribution, Movement, load_movements
from wallet_api.utils.allocation import SubWalletShare, allocate

logger = logging.getLogger(__name__)


def negate(movements: Iterable[Movement]) -> List[Movement]:
    return [m.model_copy(update={"amount": -m.amount}) for m in movements]


def reverse_expense(deductions) -> List[Movement]:
    """Credit every recorded deduction back to its source"""
    return load_movements(_as_raw(deductions))


def reverse_income(
    allocations,
    income_amount: Optional[float] = None,
    distribution: Optional[Union[Distribution, Mapping[str, int]]] = None,
    sub_wallets: Iterable[SubWalletShare] = (),
    wallet_ids: Optional[Mapping[str, uuid.UUID]] = None,
) -> List[Movement]:
    """
    Debit the credits an income produced.

    The stored ``allocations`` are replayed when present. Entries recorded
    without them are recomputed from the current settings, which drifts if
    the distribution or sub-wallets changed since.
    """
    stored = load_movements(_as_raw(allocations)) if allocations is not None else None
    if stored is not None:
        return negate(stored)

    if income_amount is None or distribution is None:
        logger.warning("Income has no stored allocation and no settings to recompute it; nothing to reverse")
        return []

    logger.warning(f"Income of {income_amount:.2f} has no stored allocation; recomputing from current settings")
    recomputed = allocate(income_amount, distribution, sub_wallets, wallet_ids or {})
    return negate(recomputed.credits)


def _as_raw(movements) -> list:
    if movements is None:
        return []
    return [m.model_dump(mode="json") if hasattr(m, "model_dump") else m for m in movements]
