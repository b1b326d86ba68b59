# tests/test_reversal.py
import uuid

from wallet_api.schemas.ledger import SubWalletMovement, WalletMovement, dump_movements
from wallet_api.utils.reversal import reverse_expense, reverse_income


def test_expense_reversal_credits_each_source_back():
    a, b = uuid.uuid4(), uuid.uuid4()
    stored = dump_movements([SubWalletMovement(id=a, amount=300), WalletMovement(id=b, amount=200)])

    movements = reverse_expense(stored)

    assert [(m.kind, m.id, m.amount) for m in movements] == [
        ("subwallet", a, 300.0),
        ("wallet", b, 200.0),
    ]


def test_income_reversal_replays_stored_allocation():
    w, s = uuid.uuid4(), uuid.uuid4()
    stored = dump_movements([WalletMovement(id=w, amount=700), SubWalletMovement(id=s, amount=300)])

    # Current settings are ignored when the allocation was stored
    movements = reverse_income(stored, income_amount=1000, distribution={"saving": 100, "needs": 0, "wants": 0})

    assert [(m.kind, m.id, m.amount) for m in movements] == [
        ("wallet", w, -700.0),
        ("subwallet", s, -300.0),
    ]


def test_legacy_income_is_recomputed_with_a_warning(caplog):
    ids = {"saving": uuid.uuid4(), "needs": uuid.uuid4(), "wants": uuid.uuid4()}

    movements = reverse_income(None, income_amount=1000, distribution={"saving": 50, "needs": 30, "wants": 20}, wallet_ids=ids)

    assert sorted(m.amount for m in movements) == [-500, -300, -200]
    assert "no stored allocation" in caplog.text


def test_legacy_income_without_settings_reverses_nothing():
    assert reverse_income(None) == []


def test_empty_stored_allocation_reverses_nothing():
    assert reverse_income([], income_amount=100, distribution={"saving": 50, "needs": 30, "wants": 20}) == []
