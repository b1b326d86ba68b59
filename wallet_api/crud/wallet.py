# wallet_api/crud/wallet.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func
from wallet_api.models.wallet import Wallet, SubWallet, WalletCategory
from wallet_api.schemas.wallet import SubWalletCreate, SubWalletUpdate
from wallet_api.core.db_utils import with_db_retry
from typing import List, Optional, Union
import uuid
import logging

logger = logging.getLogger(__name__)


class SQLAlchemyWalletStore:
    """
    ``WalletStore`` over one user's rows in an ``AsyncSession``.

    A store sees one wallet set: the wallets of ``bank_account_id``, or the
    account-less default set when it is ``None``.

    Balance writes are staged on the session only; the route that runs the
    operation commits once, so an operation lands whole or not at all.
    """

    def __init__(self, db: AsyncSession, user_id: uuid.UUID, bank_account_id: Optional[uuid.UUID] = None):
        self.db = db
        self.user_id = user_id
        self.bank_account_id = bank_account_id

    @with_db_retry()
    async def list_wallets(self) -> List[Wallet]:
        return await get_wallets_for_user(self.user_id, self.db, self.bank_account_id)

    @with_db_retry()
    async def list_sub_wallets(self) -> List[SubWallet]:
        return await get_sub_wallets_for_user(self.user_id, self.db, self.bank_account_id)

    @with_db_retry()
    async def get(self, kind: str, record_id: uuid.UUID) -> Optional[Union[Wallet, SubWallet]]:
        if kind == "wallet":
            record = await get_wallet_by_id(record_id, self.user_id, self.db)
        else:
            record = await get_sub_wallet_by_id(record_id, self.user_id, self.db)
        if record is not None and record.bank_account_id != self.bank_account_id:
            return None
        return record

    async def update_balance(self, kind: str, record_id: uuid.UUID, balance: float) -> None:
        record = await self.get(kind, record_id)
        if record is None:
            logger.warning(f"Cannot update balance of missing {kind}:{record_id}")
            return
        record.balance = balance
        self.db.add(record)


def in_account(column, bank_account_id: Optional[uuid.UUID]):
    """Filter for one wallet set; ``None`` is the default, account-less set"""
    if bank_account_id is None:
        return column.is_(None)
    return column == bank_account_id


# ────────────────────────────────────────────────────────────────────────────────
# WALLETS
# ────────────────────────────────────────────────────────────────────────────────
async def get_wallets_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    bank_account_id: Optional[uuid.UUID] = None,
) -> List[Wallet]:
    result = await db.execute(
        select(Wallet).where(Wallet.user_id == user_id, in_account(Wallet.bank_account_id, bank_account_id))
    )
    return list(result.scalars().all())

async def get_wallet_by_id(wallet_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Wallet]:
    result = await db.execute(
        select(Wallet).where(Wallet.id == wallet_id, Wallet.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def get_wallet_by_category(
    category: str,
    user_id: uuid.UUID,
    db: AsyncSession,
    bank_account_id: Optional[uuid.UUID] = None,
) -> Optional[Wallet]:
    result = await db.execute(
        select(Wallet).where(
            Wallet.category == category,
            Wallet.user_id == user_id,
            in_account(Wallet.bank_account_id, bank_account_id),
        )
    )
    return result.scalar_one_or_none()


# ────────────────────────────────────────────────────────────────────────────────
# SUB-WALLETS
# ────────────────────────────────────────────────────────────────────────────────
async def get_sub_wallets_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    bank_account_id: Optional[uuid.UUID] = None,
) -> List[SubWallet]:
    result = await db.execute(
        select(SubWallet)
        .where(SubWallet.user_id == user_id, in_account(SubWallet.bank_account_id, bank_account_id))
        .order_by(SubWallet.parent_category, SubWallet.order_position)
    )
    return list(result.scalars().all())

async def get_sub_wallet_by_id(sub_wallet_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[SubWallet]:
    result = await db.execute(
        select(SubWallet).where(SubWallet.id == sub_wallet_id, SubWallet.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def create_sub_wallet_for_user(
    user_id: uuid.UUID,
    sw_in: SubWalletCreate,
    db: AsyncSession,
    bank_account_id: Optional[uuid.UUID] = None,
) -> SubWallet:
    data = sw_in.model_dump()
    category = data["parent_category"].value if isinstance(data["parent_category"], WalletCategory) else data["parent_category"]
    parent = await get_wallet_by_category(category, user_id, db, bank_account_id)

    if data.get("order_position") is None:
        result = await db.execute(
            select(func.max(SubWallet.order_position)).where(
                SubWallet.user_id == user_id,
                SubWallet.parent_category == category,
                in_account(SubWallet.bank_account_id, bank_account_id),
            )
        )
        current_max = result.scalar()
        data["order_position"] = 0 if current_max is None else current_max + 1

    data["parent_category"] = category
    new_sw = SubWallet(
        **data,
        user_id=user_id,
        bank_account_id=bank_account_id,
        parent_wallet_id=parent.id if parent else None,
        balance=0.0,
    )
    db.add(new_sw)
    await db.commit()
    await db.refresh(new_sw)
    return new_sw

async def update_sub_wallet(sub_wallet: SubWallet, sw_in: SubWalletUpdate, db: AsyncSession) -> SubWallet:
    for field, value in sw_in.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        setattr(sub_wallet, field, value)
    db.add(sub_wallet)
    await db.commit()
    await db.refresh(sub_wallet)
    return sub_wallet

async def set_sub_wallet_goal(sub_wallet: SubWallet, enabled: bool, target_amount: Optional[float], db: AsyncSession) -> SubWallet:
    sub_wallet.goal_enabled = enabled
    sub_wallet.goal_target_amount = target_amount if enabled else None
    db.add(sub_wallet)
    await db.commit()
    await db.refresh(sub_wallet)
    return sub_wallet

async def delete_sub_wallet(sub_wallet: SubWallet, db: AsyncSession) -> None:
    """Stage the delete; the caller commits together with the balance fold"""
    await db.delete(sub_wallet)


# ────────────────────────────────────────────────────────────────────────────────
# DEFAULTS
# ────────────────────────────────────────────────────────────────────────────────
# Default wallets to be created for every new user
DEFAULT_WALLETS: List[dict] = [
    {"name": "Saving Wallet", "category": WalletCategory.saving.value, "color": "green"},
    {"name": "Needs Wallet", "category": WalletCategory.needs.value, "color": "blue"},
    {"name": "Wants Wallet", "category": WalletCategory.wants.value, "color": "purple"},
]

DEFAULT_SUB_WALLETS: List[dict] = [
    {"name": "Mobile", "parent_category": WalletCategory.saving.value, "allocation_percentage": 50.0, "color": "blue"},
    {"name": "PC", "parent_category": WalletCategory.saving.value, "allocation_percentage": 30.0, "color": "purple"},
    {"name": "Other", "parent_category": WalletCategory.saving.value, "allocation_percentage": 20.0, "color": "gray"},
    {"name": "Recharge", "parent_category": WalletCategory.needs.value, "allocation_percentage": 50.0, "color": "orange"},
    {"name": "Entertainment", "parent_category": WalletCategory.needs.value, "allocation_percentage": 30.0, "color": "pink"},
]

async def seed_default_wallets_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    bank_account_id: Optional[uuid.UUID] = None,
) -> List[Wallet]:
    """Create the three wallets and the default sub-wallets for a wallet set with none.

    Returns the wallets that were created (empty if the set already had wallets).
    """
    existing = await get_wallets_for_user(user_id, db, bank_account_id)
    if existing:
        return []

    wallets: List[Wallet] = [
        Wallet(id=uuid.uuid4(), user_id=user_id, bank_account_id=bank_account_id, balance=0.0, **w)
        for w in DEFAULT_WALLETS
    ]
    wallet_ids = {w.category: w.id for w in wallets}

    positions: dict = {}
    sub_wallets: List[SubWallet] = []
    for sw in DEFAULT_SUB_WALLETS:
        position = positions.get(sw["parent_category"], 0)
        positions[sw["parent_category"]] = position + 1
        sub_wallets.append(
            SubWallet(
                user_id=user_id,
                bank_account_id=bank_account_id,
                parent_wallet_id=wallet_ids[sw["parent_category"]],
                balance=0.0,
                order_position=position,
                **sw,
            )
        )

    db.add_all(wallets)
    await db.flush()
    db.add_all(sub_wallets)
    await db.commit()
    for w in wallets:
        await db.refresh(w)

    scope = f"account {bank_account_id}" if bank_account_id else "default set"
    logger.info(f"✅ Seeded {len(wallets)} wallets and {len(sub_wallets)} sub-wallets for user {user_id} ({scope})")
    return wallets
