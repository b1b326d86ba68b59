# tests/test_ledger.py
from types import SimpleNamespace
import uuid

import pytest

from wallet_api.core.exceptions import InsufficientFundsError, NotFoundError, ValidationError
from wallet_api.schemas.ledger import FundingSource, WalletMovement, dump_movements
from wallet_api.utils import ledger


def source(record) -> FundingSource:
    kind = "subwallet" if hasattr(record, "parent_category") else "wallet"
    return FundingSource(kind=kind, id=record.id)


def income_entry(amount, allocation):
    return SimpleNamespace(amount=amount, allocations=dump_movements(allocation.credits))


def expense_entry(amount, result):
    return SimpleNamespace(amount=amount, deductions=dump_movements(result.deductions))


# ────────────────────────────────────────────────────────────────────────────────
# INCOME
# ────────────────────────────────────────────────────────────────────────────────
async def test_record_income_credits_wallets_and_sub_wallets(store, distribution):
    mobile = store.add_sub_wallet("saving", "Mobile", 50)

    await ledger.record_income(store, 10000, distribution)

    assert mobile.balance == pytest.approx(2500)
    assert store.by_category("saving").balance == pytest.approx(2500)
    assert store.by_category("needs").balance == pytest.approx(3000)
    assert store.by_category("wants").balance == pytest.approx(2000)
    assert store.total() == pytest.approx(10000)


async def test_remove_income_replays_stored_allocation_after_settings_change(store, distribution):
    mobile = store.add_sub_wallet("saving", "Mobile", 50)
    allocation = await ledger.record_income(store, 1000, distribution)
    entry = income_entry(1000, allocation)

    # Settings move on before the income is deleted
    mobile.allocation_percentage = 100
    await ledger.remove_income(store, entry, {"saving": 10, "needs": 10, "wants": 80})

    assert store.total() == pytest.approx(0)
    assert mobile.balance == pytest.approx(0)


async def test_revise_income_swaps_the_allocation(store, distribution):
    allocation = await ledger.record_income(store, 1000, distribution)

    revised = await ledger.revise_income(store, income_entry(1000, allocation), 2000, distribution)

    assert revised.total() == pytest.approx(2000)
    assert store.by_category("saving").balance == pytest.approx(1000)
    assert store.total() == pytest.approx(2000)


async def test_income_reversal_clamps_spent_balances_at_zero(store, distribution):
    allocation = await ledger.record_income(store, 1000, distribution)
    store.by_category("wants").balance = 50  # spent since

    await ledger.remove_income(store, income_entry(1000, allocation))

    assert store.by_category("wants").balance == 0
    assert all(w.balance >= 0 for w in store.wallets.values())


# ────────────────────────────────────────────────────────────────────────────────
# EXPENSES
# ────────────────────────────────────────────────────────────────────────────────
async def test_expense_then_delete_restores_every_balance(store):
    mobile = store.add_sub_wallet("saving", "Mobile", 50, balance=300)
    needs = store.by_category("needs")
    needs.balance = 1000

    result = await ledger.record_expense(store, 500, [source(mobile), source(needs)])
    assert mobile.balance == 0
    assert needs.balance == pytest.approx(800)

    await ledger.remove_expense(store, expense_entry(500, result))
    assert mobile.balance == pytest.approx(300)
    assert needs.balance == pytest.approx(1000)


async def test_short_expense_changes_nothing(store):
    mobile = store.add_sub_wallet("saving", "Mobile", 50, balance=300)

    with pytest.raises(InsufficientFundsError) as exc_info:
        await ledger.record_expense(store, 500, [source(mobile)])

    assert exc_info.value.shortfall == pytest.approx(200)
    assert mobile.balance == 300
    assert store.writes == []


async def test_expense_needs_a_source(store):
    with pytest.raises(ValidationError):
        await ledger.record_expense(store, 10, [])


async def test_wallet_source_only_offers_its_remainder(store):
    saving = store.by_category("saving")
    saving.balance = 100
    store.add_sub_wallet("saving", "Mobile", 50, balance=900)

    with pytest.raises(InsufficientFundsError):
        await ledger.record_expense(store, 500, [source(saving)])


async def test_revise_expense_reuses_previous_sources(store):
    mobile = store.add_sub_wallet("saving", "Mobile", 50, balance=300)
    wants = store.by_category("wants")
    wants.balance = 500
    result = await ledger.record_expense(store, 400, [source(mobile), source(wants)])
    assert (mobile.balance, wants.balance) == (0, 400)

    revised = await ledger.revise_expense(store, expense_entry(400, result), 200)

    assert [(d.id, d.amount) for d in revised.deductions] == [(mobile.id, 200.0)]
    assert mobile.balance == pytest.approx(100)
    assert wants.balance == pytest.approx(500)


async def test_revise_expense_to_unaffordable_amount_changes_nothing(store):
    mobile = store.add_sub_wallet("saving", "Mobile", 50, balance=300)
    result = await ledger.record_expense(store, 100, [source(mobile)])
    writes_before = len(store.writes)

    with pytest.raises(InsufficientFundsError) as exc_info:
        await ledger.revise_expense(store, expense_entry(100, result), 1000)

    assert exc_info.value.shortfall == pytest.approx(700)
    assert mobile.balance == pytest.approx(200)
    assert len(store.writes) == writes_before


async def test_revise_expense_with_new_sources(store):
    mobile = store.add_sub_wallet("saving", "Mobile", 50, balance=300)
    needs = store.by_category("needs")
    needs.balance = 1000
    result = await ledger.record_expense(store, 100, [source(mobile)])

    await ledger.revise_expense(store, expense_entry(100, result), 150, [source(needs)])

    assert mobile.balance == pytest.approx(300)
    assert needs.balance == pytest.approx(850)


# ────────────────────────────────────────────────────────────────────────────────
# TRANSFERS, FOLDING, CAPACITY
# ────────────────────────────────────────────────────────────────────────────────
async def test_transfer_conserves_total(store):
    saving = store.by_category("saving")
    saving.balance = 1000
    pc = store.add_sub_wallet("saving", "PC", 30)

    result = await ledger.transfer_funds(store, source(saving), source(pc), 400)

    assert result.amount == 400
    assert (saving.balance, pc.balance) == (600, 400)
    assert store.total() == pytest.approx(1000)


async def test_transfer_rejects_more_than_available(store):
    saving = store.by_category("saving")
    saving.balance = 100

    with pytest.raises(InsufficientFundsError, match="Available: 100.00"):
        await ledger.transfer_funds(store, source(saving), source(store.by_category("needs")), 150)
    assert saving.balance == 100


async def test_transfer_rejects_same_source_and_target(store):
    saving = store.by_category("saving")
    with pytest.raises(ValidationError):
        await ledger.transfer_funds(store, source(saving), source(saving), 10)


async def test_transfer_to_unknown_target(store):
    saving = store.by_category("saving")
    saving.balance = 100
    with pytest.raises(NotFoundError):
        await ledger.transfer_funds(store, source(saving), FundingSource(kind="subwallet", id=uuid.uuid4()), 10)


async def test_fold_sub_wallet_balance_into_parent(store):
    pc = store.add_sub_wallet("saving", "PC", 30, balance=250)
    store.by_category("saving").balance = 50

    await ledger.fold_sub_wallet_balance(store, pc)

    assert pc.balance == 0
    assert store.by_category("saving").balance == pytest.approx(300)


async def test_apply_movements_skips_missing_targets(store, caplog):
    saving = store.by_category("saving")
    applied = await ledger.apply_movements(
        store,
        [WalletMovement(id=saving.id, amount=10), WalletMovement(id=uuid.uuid4(), amount=5)],
    )

    assert [(m.id, m.amount) for m in applied] == [(saving.id, 10.0)]
    assert "no longer exists" in caplog.text


def test_allocation_capacity_per_category(store):
    store.add_sub_wallet("saving", "Mobile", 50)
    pc = store.add_sub_wallet("saving", "PC", 30)
    siblings = list(store.sub_wallets.values())

    assert ledger.check_allocation_capacity(siblings, "saving", 20) == pytest.approx(0)
    assert ledger.check_allocation_capacity(siblings, "needs", 100) == pytest.approx(0)
    # Editing PC from 30 to 50 fits once its own share is excluded
    assert ledger.check_allocation_capacity(siblings, "saving", 50, exclude_id=pc.id) == pytest.approx(0)

    with pytest.raises(ValidationError) as exc_info:
        ledger.check_allocation_capacity(siblings, "saving", 21)
    assert exc_info.value.extra["available_percentage"] == pytest.approx(20)


@pytest.mark.parametrize("percentage", [0, -5, 101])
def test_allocation_percentage_bounds(percentage):
    with pytest.raises(ValidationError):
        ledger.check_allocation_capacity([], "saving", percentage)


def test_wallet_overview_adds_sub_wallets_to_the_remainder(store):
    store.by_category("saving").balance = 100
    store.add_sub_wallet("saving", "Mobile", 50, balance=250)
    store.add_sub_wallet("saving", "PC", 30, balance=150)

    overview = {o["category"]: o for o in ledger.wallet_overview(list(store.wallets.values()), list(store.sub_wallets.values()))}

    assert overview["saving"]["unallocated_balance"] == 100
    assert overview["saving"]["sub_wallet_balance"] == 400
    assert overview["saving"]["total_balance"] == 500
    assert overview["saving"]["allocated_percentage"] == 80
    assert [sw.name for sw in overview["saving"]["sub_wallets"]] == ["Mobile", "PC"]
    assert overview["wants"]["total_balance"] == 0


# ────────────────────────────────────────────────────────────────────────────────
# DELETED SUB-WALLETS & CENTS
# ────────────────────────────────────────────────────────────────────────────────
async def test_remove_income_after_sub_wallet_deleted_debits_the_parent(store, distribution):
    mobile = store.add_sub_wallet("saving", "Mobile", 50)
    allocation = await ledger.record_income(store, 1000, distribution)
    await ledger.fold_sub_wallet_balance(store, mobile)
    del store.sub_wallets[mobile.id]
    assert store.by_category("saving").balance == pytest.approx(500)

    await ledger.remove_income(store, income_entry(1000, allocation))

    assert store.by_category("saving").balance == 0
    assert store.total() == pytest.approx(0)


async def test_remove_expense_refunds_deleted_sub_wallet_to_its_parent(store):
    mobile = store.add_sub_wallet("saving", "Mobile", 50, balance=300)
    result = await ledger.record_expense(store, 200, [source(mobile)])
    assert result.deductions[0].parent_category == "saving"
    await ledger.fold_sub_wallet_balance(store, mobile)
    del store.sub_wallets[mobile.id]

    await ledger.remove_expense(store, expense_entry(200, result))

    assert store.by_category("saving").balance == pytest.approx(300)
    assert store.total() == pytest.approx(300)


async def test_revise_expense_after_sub_wallet_deleted_uses_the_parent(store):
    mobile = store.add_sub_wallet("saving", "Mobile", 50, balance=300)
    result = await ledger.record_expense(store, 200, [source(mobile)])
    await ledger.fold_sub_wallet_balance(store, mobile)
    del store.sub_wallets[mobile.id]

    revised = await ledger.revise_expense(store, expense_entry(200, result), 50)

    assert [(d.kind, d.amount) for d in revised.deductions] == [("wallet", 50.0)]
    assert store.by_category("saving").balance == pytest.approx(250)


async def test_income_then_delete_leaves_no_stray_cents(store, distribution):
    store.add_sub_wallet("saving", "Mobile", 33.3)
    store.add_sub_wallet("saving", "PC", 33.3)
    allocation = await ledger.record_income(store, 100.01, distribution)
    assert round(store.total(), 2) == 100.01

    await ledger.remove_income(store, income_entry(100.01, allocation))

    assert all(w.balance == 0 for w in store.wallets.values())
    assert all(sw.balance == 0 for sw in store.sub_wallets.values())


async def test_one_cent_shortfall_is_reported(store):
    wants = store.by_category("wants")
    wants.balance = 200

    with pytest.raises(InsufficientFundsError) as exc_info:
        await ledger.record_expense(store, 200.01, [source(wants)])

    assert exc_info.value.shortfall == pytest.approx(0.01)
    assert "short by 0.01" in exc_info.value.detail
    assert wants.balance == 200
