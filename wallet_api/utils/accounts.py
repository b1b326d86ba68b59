# wallet_api/utils/accounts.py
"""
Bank account balance rules: transfers between accounts, the cash effect of
income and expenses, and which account is primary.

Functions here work on any object with ``id``, ``balance``, ``is_primary``
and ``created_at`` attributes, so they are tested without a database.
"""
import logging
from typing import Any, Optional, Sequence

from wallet_api.core.exceptions import InsufficientFundsError, ValidationError
from wallet_api.schemas.ledger import round_money

logger = logging.getLogger(__name__)


def transfer_between(source: Any, target: Any, amount: float) -> None:
    """Move ``amount`` from ``source`` to ``target``; never past the source balance"""
    if amount is None or round_money(amount) <= 0:
        raise ValidationError("Amount must be greater than 0")
    if source.id == target.id:
        raise ValidationError("Source and destination accounts must be different")

    available = round_money(source.balance or 0)
    amount = round_money(amount)
    if amount > available:
        raise InsufficientFundsError(
            amount - available,
            f"Insufficient balance in {source.name}. Available: {available:.2f}",
        )

    source.balance = round_money(available - amount)
    target.balance = round_money((target.balance or 0) + amount)


def adjust_balance(account: Any, delta: float) -> float:
    """Apply an income (positive) or expense (negative) to the account's cash"""
    new_balance = round_money((account.balance or 0) + delta)
    if new_balance < 0:
        logger.warning(f"Account {account.id} would go to {new_balance:.2f}; clamping at 0")
        new_balance = 0.0
    account.balance = new_balance
    return new_balance


def choose_primary(accounts: Sequence[Any], removed_id: Optional[Any] = None) -> Optional[Any]:
    """The account to promote when the primary one is removed: the oldest left"""
    remaining = [a for a in accounts if a.id != removed_id]
    if not remaining:
        return None
    return min(remaining, key=lambda a: (a.created_at is None, a.created_at))
