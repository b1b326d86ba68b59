# wallet_api/api/v1/routes/wallets.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid
import logging

from wallet_api.api.deps import get_current_user, get_wallet_store, wallet_store_for
from wallet_api.core.auth import User
from wallet_api.core.database import get_async_session
from wallet_api.core.exceptions import LedgerError
from wallet_api.crud import account as crud_account
from wallet_api.crud import wallet as crud_wallet
from wallet_api.crud.wallet import SQLAlchemyWalletStore
from wallet_api.models.wallet import SubWallet
from wallet_api.schemas.ledger import TransferRequest, TransferResult
from wallet_api.schemas.wallet import (
    SubWalletCreate,
    SubWalletGoal,
    SubWalletGoalProgress,
    SubWalletRead,
    SubWalletUpdate,
    WalletOverview,
)
from wallet_api.utils import ledger
from wallet_api.utils.events import publish_change
from wallet_api.utils.goals import sub_wallet_goal_progress, validate_sub_wallet_goal

router = APIRouter(prefix="/wallets", tags=["wallets"])
logger = logging.getLogger(__name__)


def sub_wallet_read(sw: SubWallet) -> SubWalletRead:
    read = SubWalletRead.model_validate(sw)
    progress = sub_wallet_goal_progress(sw)
    if progress is not None:
        read.goal_progress = SubWalletGoalProgress(**progress)
    return read


async def build_overview(store: SQLAlchemyWalletStore) -> List[WalletOverview]:
    wallets = await store.list_wallets()
    sub_wallets = await store.list_sub_wallets()
    overview = []
    for item in ledger.wallet_overview(wallets, sub_wallets):
        item["sub_wallets"] = [sub_wallet_read(sw) for sw in item["sub_wallets"]]
        overview.append(WalletOverview(**item))
    return overview


async def get_owned_sub_wallet(sub_wallet_id: uuid.UUID, user: User, db: AsyncSession) -> SubWallet:
    sub_wallet = await crud_wallet.get_sub_wallet_by_id(sub_wallet_id, uuid.UUID(str(user.id)), db)
    if not sub_wallet:
        raise HTTPException(status_code=404, detail="Sub-wallet not found")
    return sub_wallet


# ────────────────────────────────────────────────────────────────────────────────
# WALLETS
# ────────────────────────────────────────────────────────────────────────────────
@router.get("", response_model=List[WalletOverview])
async def list_wallets(store: SQLAlchemyWalletStore = Depends(get_wallet_store)):
    """
    Wallets with their displayed totals.

    `total_balance` is the unallocated remainder plus every sub-wallet balance
    in the category; it is recomputed on every read.
    """
    return await build_overview(store)


@router.post("/initialize", response_model=List[WalletOverview])
async def initialize_wallets(
    bank_account_id: Optional[uuid.UUID] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Create the default wallets and sub-wallets if the wallet set has none yet"""
    user_id = uuid.UUID(str(user.id))
    if bank_account_id is not None and not await crud_account.get_account_by_id(bank_account_id, user_id, db):
        raise HTTPException(status_code=404, detail="Bank account not found")
    created = await crud_wallet.seed_default_wallets_for_user(user_id, db, bank_account_id)
    if created:
        await publish_change(user_id)
    return await build_overview(SQLAlchemyWalletStore(db, user_id, bank_account_id))


@router.post("/transfer", response_model=TransferResult)
async def transfer(
    transfer_in: TransferRequest,
    db: AsyncSession = Depends(get_async_session),
    store: SQLAlchemyWalletStore = Depends(get_wallet_store),
):
    """Move money between any two wallets or sub-wallets"""
    try:
        result = await ledger.transfer_funds(store, transfer_in.source, transfer_in.target, transfer_in.amount)
        await db.commit()
    except LedgerError:
        await db.rollback()
        raise
    await publish_change(store.user_id)
    return result


# ────────────────────────────────────────────────────────────────────────────────
# SUB-WALLETS
# ────────────────────────────────────────────────────────────────────────────────
@router.get("/sub-wallets", response_model=List[SubWalletRead])
async def list_sub_wallets(store: SQLAlchemyWalletStore = Depends(get_wallet_store)):
    return [sub_wallet_read(sw) for sw in await store.list_sub_wallets()]


@router.post("/sub-wallets", response_model=SubWalletRead, status_code=status.HTTP_201_CREATED)
async def create_sub_wallet(
    sw_in: SubWalletCreate,
    db: AsyncSession = Depends(get_async_session),
    store: SQLAlchemyWalletStore = Depends(get_wallet_store),
):
    """New sub-wallets start empty and share only future income"""
    siblings = await store.list_sub_wallets()
    ledger.check_allocation_capacity(siblings, sw_in.parent_category.value, sw_in.allocation_percentage)

    sub_wallet = await crud_wallet.create_sub_wallet_for_user(store.user_id, sw_in, db, store.bank_account_id)
    logger.info(f"Created sub-wallet {sub_wallet.name} under {sub_wallet.parent_category}")
    await publish_change(store.user_id)
    return sub_wallet_read(sub_wallet)


@router.patch("/sub-wallets/{sub_wallet_id}", response_model=SubWalletRead)
async def update_sub_wallet(
    sub_wallet_id: uuid.UUID,
    sw_in: SubWalletUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    sub_wallet = await get_owned_sub_wallet(sub_wallet_id, user, db)
    store = await wallet_store_for(sub_wallet.user_id, sub_wallet.bank_account_id, db)
    if sw_in.allocation_percentage is not None:
        ledger.check_allocation_capacity(
            await store.list_sub_wallets(),
            sub_wallet.parent_category,
            sw_in.allocation_percentage,
            exclude_id=sub_wallet.id,
        )

    sub_wallet = await crud_wallet.update_sub_wallet(sub_wallet, sw_in, db)
    await publish_change(store.user_id)
    return sub_wallet_read(sub_wallet)


@router.delete("/sub-wallets/{sub_wallet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sub_wallet(
    sub_wallet_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Delete a sub-wallet; its balance goes back to the parent wallet"""
    sub_wallet = await get_owned_sub_wallet(sub_wallet_id, user, db)
    store = await wallet_store_for(sub_wallet.user_id, sub_wallet.bank_account_id, db)
    try:
        await ledger.fold_sub_wallet_balance(store, sub_wallet)
        await crud_wallet.delete_sub_wallet(sub_wallet, db)
        await db.commit()
    except LedgerError:
        await db.rollback()
        raise
    logger.info(f"Deleted sub-wallet {sub_wallet_id}")
    await publish_change(store.user_id)


@router.put("/sub-wallets/{sub_wallet_id}/goal", response_model=SubWalletRead)
async def set_sub_wallet_goal(
    sub_wallet_id: uuid.UUID,
    goal_in: SubWalletGoal,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Set or clear a savings target on a sub-wallet"""
    validate_sub_wallet_goal(goal_in.enabled, goal_in.target_amount)
    sub_wallet = await get_owned_sub_wallet(sub_wallet_id, user, db)
    sub_wallet = await crud_wallet.set_sub_wallet_goal(sub_wallet, goal_in.enabled, goal_in.target_amount, db)
    await publish_change(uuid.UUID(str(user.id)))
    return sub_wallet_read(sub_wallet)
