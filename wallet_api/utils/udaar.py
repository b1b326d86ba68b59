# wallet_api/utils/udaar.py
"""
Udaar (person-to-person debt) settlement.

An entry moves pending → partially_paid → paid, or straight to paid; paid is
terminal. Every transition appends exactly one PaymentHistory record.
"""
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from wallet_api.core.database import utcnow
from wallet_api.core.exceptions import InvalidTransitionError, ValidationError
from wallet_api.models.udaar import HistoryAction, PaymentHistory, UdaarEntry, UdaarStatus, UdaarType

logger = logging.getLogger(__name__)

EPSILON = 1e-9

ALLOWED_TRANSITIONS = {
    UdaarStatus.pending.value: {UdaarStatus.partially_paid.value, UdaarStatus.paid.value},
    UdaarStatus.partially_paid.value: {UdaarStatus.partially_paid.value, UdaarStatus.paid.value},
    UdaarStatus.paid.value: set(),
}

OPEN_STATUSES = (UdaarStatus.pending.value, UdaarStatus.partially_paid.value)


def _status(entry: Any) -> str:
    status = entry.status or UdaarStatus.pending.value
    return status.value if isinstance(status, UdaarStatus) else status


def ensure_transition(entry: Any, target: str) -> None:
    current = _status(entry)
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransitionError(f"Cannot move a {current} entry to {target}")


def history_entry(
    entry: Any,
    action: HistoryAction,
    description: str,
    amount: Optional[float] = None,
    details: Optional[Dict[str, Any]] = None,
) -> PaymentHistory:
    return PaymentHistory(
        id=uuid.uuid4(),
        user_id=entry.user_id,
        transaction_id=entry.id,
        person_name=entry.person_name,
        action=action.value,
        description=description,
        amount=amount,
        date=utcnow(),
        details=details,
    )


def create_entry(
    user_id: uuid.UUID,
    person_name: str,
    amount: float,
    type: str,
    description: str = "",
    date: Optional[datetime] = None,
    parent_transaction_id: Optional[uuid.UUID] = None,
) -> Tuple[UdaarEntry, PaymentHistory]:
    if not person_name or not person_name.strip():
        raise ValidationError("Please fill in a valid person name")
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    if type not in (UdaarType.gave.value, UdaarType.took.value):
        raise ValidationError("Type must be 'gave' or 'took'")

    entry = UdaarEntry(
        id=uuid.uuid4(),
        user_id=user_id,
        person_name=person_name.strip(),
        description=description or "",
        amount=amount,
        type=type,
        date=date or utcnow(),
        status=UdaarStatus.pending.value,
        parent_transaction_id=parent_transaction_id,
    )
    history = history_entry(
        entry,
        HistoryAction.created,
        f"New transaction created: {description or 'No description'}",
        amount,
    )
    return entry, history


def edit_entry(entry: Any, changes: Dict[str, Any]) -> PaymentHistory:
    """Apply field changes to an open entry and log the before/after amount"""
    if _status(entry) == UdaarStatus.paid.value:
        raise InvalidTransitionError("A paid entry cannot be edited")

    new_amount = changes.get("amount", entry.amount)
    if new_amount is None or new_amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    if "type" in changes and changes["type"] not in (UdaarType.gave.value, UdaarType.took.value):
        raise ValidationError("Type must be 'gave' or 'took'")
    if "person_name" in changes and not (changes["person_name"] or "").strip():
        raise ValidationError("Please fill in a valid person name")

    previous_amount = entry.amount
    for field in ("person_name", "description", "type", "amount"):
        if field in changes and changes[field] is not None:
            value = changes[field]
            setattr(entry, field, value.strip() if field == "person_name" else value)

    return history_entry(
        entry,
        HistoryAction.edited,
        f"Transaction updated: {entry.description or 'No description'}",
        entry.amount,
        {"original_amount": previous_amount, "new_amount": entry.amount},
    )


def record_partial_payment(entry: Any, amount: float, description: str = "") -> PaymentHistory:
    """
    Reduce the remaining amount by ``amount``.

    The entry becomes paid once nothing remains. ``original_amount`` is
    captured on the first payment and kept from then on.
    """
    if amount is None or amount <= 0:
        raise ValidationError("Partial payment must be greater than 0")
    if _status(entry) == UdaarStatus.paid.value:
        raise InvalidTransitionError("Entry is already paid")
    if amount > entry.amount + EPSILON:
        raise ValidationError("Partial payment cannot be more than the remaining amount")

    original_amount = entry.original_amount if entry.original_amount is not None else entry.amount
    remaining = entry.amount - amount
    target = UdaarStatus.paid.value if remaining <= EPSILON else UdaarStatus.partially_paid.value
    ensure_transition(entry, target)

    entry.original_amount = original_amount
    entry.amount = max(0.0, remaining)
    entry.status = target
    logger.info(f"Partial payment of {amount:.2f} on {entry.person_name}'s entry, {entry.amount:.2f} left")

    return history_entry(
        entry,
        HistoryAction.partial_payment,
        f"Partial payment received: {description or 'No description'}",
        amount,
        {
            "original_amount": original_amount,
            "paid_amount": amount,
            "remaining_amount": entry.amount,
        },
    )


def mark_paid(entry: Any) -> PaymentHistory:
    ensure_transition(entry, UdaarStatus.paid.value)
    entry.status = UdaarStatus.paid.value
    return history_entry(
        entry,
        HistoryAction.marked_paid,
        "Transaction marked as fully paid",
        entry.amount,
    )


def person_balance(entries: Iterable[Any]) -> Dict[str, float]:
    entries = list(entries)
    open_entries = [e for e in entries if _status(e) in OPEN_STATUSES]

    def full(e) -> float:
        return e.original_amount if e.original_amount else e.amount

    total_given = sum(full(e) for e in entries if e.type == UdaarType.gave.value)
    total_received = sum(full(e) for e in entries if e.type == UdaarType.took.value)
    return {
        "total_given": total_given,
        "total_received": total_received,
        "net_balance": total_given - total_received,
        "pending_receivable": sum(e.amount for e in open_entries if e.type == UdaarType.gave.value),
        "pending_payable": sum(e.amount for e in open_entries if e.type == UdaarType.took.value),
    }


def settle_person(entries: Iterable[Any]) -> List[PaymentHistory]:
    """Mark every open entry of one person as paid"""
    entries = list(entries)
    balance = person_balance(entries)
    history: List[PaymentHistory] = []
    for entry in entries:
        if _status(entry) not in OPEN_STATUSES:
            continue
        entry.status = UdaarStatus.paid.value
        history.append(history_entry(
            entry,
            HistoryAction.settled,
            "Transaction settled as part of full settlement",
            entry.amount,
            {"settled_amount": entry.amount, "balance_at_settlement": balance["net_balance"]},
        ))
    return history
