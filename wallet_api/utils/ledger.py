# wallet_api/utils/ledger.py
"""
Balance-affecting operations: recording, revising and removing income and
expenses, and moving money between wallets.

Each operation computes its movements with the pure engines first, so a
rejected operation leaves every balance untouched, then writes the resulting
balances through the injected ``WalletStore``.
"""
import logging
import uuid
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from wallet_api.core.exceptions import InsufficientFundsError, NotFoundError, ValidationError
from wallet_api.schemas.ledger import (
    Distribution,
    FundingSource,
    Movement,
    TransferResult,
    WalletMovement,
    make_movement,
    round_money,
)
from wallet_api.utils.allocation import Allocation, SubWalletShare, allocate, shares_from_sub_wallets
from wallet_api.utils.deduction import EPSILON, DeductionResult, deduct
from wallet_api.utils.reversal import negate, reverse_expense, reverse_income
from wallet_api.utils.wallet_store import WalletStore

logger = logging.getLogger(__name__)

BalanceKey = Tuple[str, uuid.UUID]


# ────────────────────────────────────────────────────────────────────────────────
# SNAPSHOT
# ────────────────────────────────────────────────────────────────────────────────
class WalletSnapshot:
    """Working copy of the balances, used to price an operation before writing it"""

    def __init__(self, wallets: Sequence[Any], sub_wallets: Sequence[Any]):
        self.wallets = list(wallets)
        self.sub_wallets = list(sub_wallets)
        self.balances: Dict[BalanceKey, float] = {}
        for w in self.wallets:
            self.balances[("wallet", w.id)] = float(w.balance or 0)
        for sw in self.sub_wallets:
            self.balances[("subwallet", sw.id)] = float(sw.balance or 0)

    @property
    def wallet_ids(self) -> Dict[str, uuid.UUID]:
        return {w.category: w.id for w in self.wallets}

    @property
    def shares(self) -> List[SubWalletShare]:
        return shares_from_sub_wallets(self.sub_wallets)

    def available(self, kind: str, record_id: uuid.UUID) -> Optional[float]:
        return self.balances.get((kind, record_id))

    def apply(self, movements: Iterable[Movement]) -> None:
        for key, delta in aggregate(movements).items():
            if key in self.balances:
                self.balances[key] = round_money(max(0.0, self.balances[key] + delta))

    def tag(self, movements: Iterable[Movement]) -> List[Movement]:
        """Record each sub-wallet's parent category on its movements"""
        parents = {sw.id: sw.parent_category for sw in self.sub_wallets}
        return [
            m.model_copy(update={"parent_category": parents.get(m.id)})
            if m.kind == "subwallet" and m.parent_category is None else m
            for m in movements
        ]

    def reroute(self, movements: Iterable[Movement]) -> List[Movement]:
        """Point movements of deleted sub-wallets at their parent wallet's remainder"""
        wallet_ids = self.wallet_ids
        routed: List[Movement] = []
        for m in movements:
            if m.kind == "subwallet" and ("subwallet", m.id) not in self.balances:
                wallet_id = wallet_ids.get(m.parent_category) if m.parent_category else None
                if wallet_id is not None:
                    logger.info(f"Sub-wallet {m.id} is gone; moving {m.amount:.2f} via the {m.parent_category} wallet")
                    routed.append(WalletMovement(id=wallet_id, amount=m.amount))
                    continue
            routed.append(m)
        return routed


async def load_snapshot(store: WalletStore) -> WalletSnapshot:
    wallets = await store.list_wallets()
    sub_wallets = await store.list_sub_wallets()
    return WalletSnapshot(wallets, sub_wallets)


def aggregate(movements: Iterable[Movement]) -> "OrderedDict[BalanceKey, float]":
    totals: "OrderedDict[BalanceKey, float]" = OrderedDict()
    for m in movements:
        key = (m.kind, m.id)
        totals[key] = totals.get(key, 0.0) + m.amount
    return totals


async def apply_movements(store: WalletStore, movements: Iterable[Movement]) -> List[Movement]:
    """
    Add each movement to its target's balance, clamping at zero.

    Movements on the same target are summed first. Targets that no longer
    exist are skipped with a warning. Returns the deltas actually written.
    """
    applied: List[Movement] = []
    for (kind, record_id), delta in aggregate(movements).items():
        record = await store.get(kind, record_id)
        if record is None:
            logger.warning(f"Balance target {kind}:{record_id} no longer exists, skipping {delta:.2f}")
            continue

        current = float(record.balance or 0)
        new_balance = round_money(current + delta)
        if new_balance < 0:
            logger.warning(
                f"Clamping {kind}:{record_id} at 0 (would be {new_balance:.2f}); balances have drifted"
            )
        new_balance = max(0.0, new_balance)

        await store.update_balance(kind, record_id, new_balance)
        applied.append(make_movement(kind, record_id, round_money(new_balance - current)))
    return applied


# ────────────────────────────────────────────────────────────────────────────────
# INCOME
# ────────────────────────────────────────────────────────────────────────────────
async def record_income(
    store: WalletStore,
    amount: float,
    distribution: Union[Distribution, Mapping[str, int]],
) -> Allocation:
    snapshot = await load_snapshot(store)
    allocation = allocate(amount, distribution, snapshot.shares, snapshot.wallet_ids)
    await apply_movements(store, allocation.credits)
    logger.info(f"Allocated income of {amount:.2f} across {len(allocation.credits)} targets")
    return allocation


async def remove_income(
    store: WalletStore,
    entry: Any,
    distribution: Optional[Union[Distribution, Mapping[str, int]]] = None,
) -> List[Movement]:
    snapshot = await load_snapshot(store)
    movements = reverse_income(
        entry.allocations,
        income_amount=entry.amount,
        distribution=distribution,
        sub_wallets=snapshot.shares,
        wallet_ids=snapshot.wallet_ids,
    )
    return await apply_movements(store, snapshot.reroute(movements))


async def revise_income(
    store: WalletStore,
    entry: Any,
    new_amount: float,
    distribution: Union[Distribution, Mapping[str, int]],
) -> Allocation:
    """Undo the entry's stored allocation and allocate ``new_amount`` afresh"""
    if new_amount is None or new_amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    await remove_income(store, entry, distribution)
    return await record_income(store, new_amount, distribution)


# ────────────────────────────────────────────────────────────────────────────────
# EXPENSES
# ────────────────────────────────────────────────────────────────────────────────
async def record_expense(
    store: WalletStore,
    amount: float,
    sources: Sequence[FundingSource],
) -> DeductionResult:
    """Deduct ``amount`` from ``sources`` in order; all or nothing"""
    if not sources:
        raise ValidationError("Select at least one wallet or sub-wallet to pay from")
    snapshot = await load_snapshot(store)
    result = deduct(amount, sources, snapshot.available)
    result.raise_for_shortfall()
    result = result.model_copy(update={"deductions": snapshot.tag(result.deductions)})
    await apply_movements(store, negate(result.deductions))
    logger.info(f"Deducted expense of {amount:.2f} from {len(result.deductions)} sources")
    return result


async def remove_expense(store: WalletStore, entry: Any) -> List[Movement]:
    snapshot = await load_snapshot(store)
    return await apply_movements(store, snapshot.reroute(reverse_expense(entry.deductions)))


async def revise_expense(
    store: WalletStore,
    entry: Any,
    new_amount: float,
    sources: Optional[Sequence[FundingSource]] = None,
) -> DeductionResult:
    """
    Re-price an expense against balances with its old deductions restored.

    Without explicit ``sources`` the previous deduction order is reused.
    On a shortfall nothing is written.
    """
    snapshot = await load_snapshot(store)
    restore = snapshot.reroute(reverse_expense(entry.deductions))

    if not sources:
        keys = dict.fromkeys((d.kind, d.id) for d in restore)
        sources = [FundingSource(kind=kind, id=record_id) for kind, record_id in keys]
    if not sources:
        raise ValidationError("Select at least one wallet or sub-wallet to pay from")

    snapshot.apply(restore)
    result = deduct(new_amount, sources, snapshot.available)
    result.raise_for_shortfall()
    result = result.model_copy(update={"deductions": snapshot.tag(result.deductions)})

    await apply_movements(store, list(restore) + negate(result.deductions))
    return result


# ────────────────────────────────────────────────────────────────────────────────
# TRANSFERS & SUB-WALLET LIFECYCLE
# ────────────────────────────────────────────────────────────────────────────────
async def transfer_funds(
    store: WalletStore,
    source: FundingSource,
    target: FundingSource,
    amount: float,
) -> TransferResult:
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    if source.kind == target.kind and source.id == target.id:
        raise ValidationError("Source and destination must be different")

    snapshot = await load_snapshot(store)
    available = snapshot.available(source.kind, source.id)
    if available is None:
        raise NotFoundError("Transfer source not found")
    if snapshot.available(target.kind, target.id) is None:
        raise NotFoundError("Transfer destination not found")
    if amount > available + EPSILON:
        raise InsufficientFundsError(
            amount - available,
            f"Insufficient balance. Available: {available:.2f}",
        )

    movements = snapshot.tag([
        make_movement(source.kind, source.id, -amount),
        make_movement(target.kind, target.id, amount),
    ])
    await apply_movements(store, movements)
    logger.info(f"Transferred {amount:.2f} from {source.kind}:{source.id} to {target.kind}:{target.id}")
    return TransferResult(amount=amount, movements=movements)


async def fold_sub_wallet_balance(store: WalletStore, sub_wallet: Any) -> List[Movement]:
    """Return a sub-wallet's money to its parent wallet's remainder"""
    balance = float(sub_wallet.balance or 0)
    if balance <= 0:
        return []
    snapshot = await load_snapshot(store)
    wallet_id = snapshot.wallet_ids.get(sub_wallet.parent_category)
    if wallet_id is None:
        logger.warning(f"No {sub_wallet.parent_category} wallet to take {balance:.2f} from {sub_wallet.name}")
        return []
    movements = [
        make_movement("subwallet", sub_wallet.id, -balance, sub_wallet.parent_category),
        make_movement("wallet", wallet_id, balance),
    ]
    return await apply_movements(store, movements)


def check_allocation_capacity(
    sub_wallets: Iterable[Any],
    parent_category: str,
    percentage: float,
    exclude_id: Optional[uuid.UUID] = None,
) -> float:
    """
    Validate a sub-wallet percentage against its siblings.

    Returns the percentage still free in the category after this one.
    """
    if percentage is None or percentage <= 0 or percentage > 100:
        raise ValidationError("Allocation percentage must be between 1 and 100")
    used = sum(
        float(sw.allocation_percentage or 0)
        for sw in sub_wallets
        if sw.parent_category == parent_category and sw.id != exclude_id
    )
    free = 100 - used
    if percentage > free + EPSILON:
        raise ValidationError(
            f"Only {free:g}% left to allocate in {parent_category}",
            {"available_percentage": free},
        )
    return free - percentage


# ────────────────────────────────────────────────────────────────────────────────
# DISPLAY
# ────────────────────────────────────────────────────────────────────────────────
def wallet_overview(wallets: Sequence[Any], sub_wallets: Sequence[Any]) -> List[Dict[str, Any]]:
    """Displayed wallet totals: stored remainder plus the category's sub-wallets"""
    overview = []
    for w in wallets:
        children = sorted(
            (sw for sw in sub_wallets if sw.parent_category == w.category),
            key=lambda sw: (sw.order_position or 0, sw.name),
        )
        sub_total = sum(float(sw.balance or 0) for sw in children)
        remainder = float(w.balance or 0)
        overview.append({
            "id": w.id,
            "name": w.name,
            "category": w.category,
            "color": w.color,
            "unallocated_balance": round(remainder, 2),
            "sub_wallet_balance": round(sub_total, 2),
            "total_balance": round(remainder + sub_total, 2),
            "allocated_percentage": sum(float(sw.allocation_percentage or 0) for sw in children),
            "sub_wallets": children,
        })
    return overview
