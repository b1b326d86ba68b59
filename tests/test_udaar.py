# tests/test_udaar.py
import uuid

import pytest

from wallet_api.core.exceptions import InvalidTransitionError, ValidationError
from wallet_api.utils import udaar


def new_entry(amount=1000.0, type="gave", person="Ravi"):
    entry, _ = udaar.create_entry(uuid.uuid4(), person, amount, type, "Lunch money")
    return entry


def test_create_entry_starts_pending_with_history():
    entry, history = udaar.create_entry(uuid.uuid4(), "  Ravi ", 1000, "gave", "Lunch money")

    assert entry.status == "pending"
    assert entry.person_name == "Ravi"
    assert entry.original_amount is None
    assert history.action == "created"
    assert history.transaction_id == entry.id
    assert history.amount == 1000


@pytest.mark.parametrize("kwargs", [
    {"person_name": " ", "amount": 10, "type": "gave"},
    {"person_name": "Ravi", "amount": 0, "type": "gave"},
    {"person_name": "Ravi", "amount": 10, "type": "lent"},
])
def test_create_entry_validation(kwargs):
    with pytest.raises(ValidationError):
        udaar.create_entry(uuid.uuid4(), **kwargs)


def test_partial_payments_until_paid():
    entry = new_entry(1000)

    first = udaar.record_partial_payment(entry, 400, "first installment")
    assert entry.amount == pytest.approx(600)
    assert entry.original_amount == 1000
    assert entry.status == "partially_paid"
    assert first.action == "partial_payment"
    assert first.details == {"original_amount": 1000, "paid_amount": 400, "remaining_amount": 600}

    second = udaar.record_partial_payment(entry, 600)
    assert entry.amount == pytest.approx(0)
    assert entry.original_amount == 1000
    assert entry.status == "paid"
    assert second.details["remaining_amount"] == pytest.approx(0)


def test_paid_is_terminal():
    entry = new_entry(100)
    udaar.mark_paid(entry)

    with pytest.raises(InvalidTransitionError):
        udaar.mark_paid(entry)
    with pytest.raises(InvalidTransitionError):
        udaar.record_partial_payment(entry, 10)
    with pytest.raises(InvalidTransitionError):
        udaar.edit_entry(entry, {"amount": 50})


@pytest.mark.parametrize("amount", [0, -10, 1000.01])
def test_partial_payment_bounds_checked_before_mutation(amount):
    entry = new_entry(1000)

    with pytest.raises(ValidationError):
        udaar.record_partial_payment(entry, amount)
    assert entry.amount == 1000
    assert entry.status == "pending"
    assert entry.original_amount is None


def test_mark_paid_logs_remaining_amount():
    entry = new_entry(1000)
    udaar.record_partial_payment(entry, 250)

    history = udaar.mark_paid(entry)

    assert entry.status == "paid"
    assert history.action == "marked_paid"
    assert history.amount == pytest.approx(750)


def test_edit_entry_records_before_and_after():
    entry = new_entry(1000)

    history = udaar.edit_entry(entry, {"amount": 1200, "description": "Dinner too"})

    assert entry.amount == 1200
    assert entry.description == "Dinner too"
    assert history.action == "edited"
    assert history.details == {"original_amount": 1000, "new_amount": 1200}


def test_person_balance_uses_original_amounts():
    lent = new_entry(1000, "gave")
    udaar.record_partial_payment(lent, 400)
    borrowed = new_entry(300, "took")
    settled = new_entry(200, "gave")
    udaar.mark_paid(settled)

    balance = udaar.person_balance([lent, borrowed, settled])

    assert balance["total_given"] == pytest.approx(1200)
    assert balance["total_received"] == pytest.approx(300)
    assert balance["net_balance"] == pytest.approx(900)
    assert balance["pending_receivable"] == pytest.approx(600)
    assert balance["pending_payable"] == pytest.approx(300)


def test_settle_person_closes_open_entries_only():
    lent = new_entry(1000, "gave")
    borrowed = new_entry(300, "took")
    done = new_entry(50, "gave")
    udaar.mark_paid(done)

    history = udaar.settle_person([lent, borrowed, done])

    assert [e.status for e in (lent, borrowed, done)] == ["paid", "paid", "paid"]
    assert len(history) == 2
    assert {h.action for h in history} == {"settled"}
    assert history[0].details == {"settled_amount": 1000, "balance_at_settlement": 750}
