# wallet_api/api/v1/routes/income.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import date
import uuid
import logging

from wallet_api.api.deps import get_current_user, wallet_store_for
from wallet_api.core.auth import User
from wallet_api.core.database import get_async_session
from wallet_api.core.exceptions import LedgerError
from wallet_api.crud import account as crud_account
from wallet_api.crud import income as crud_income
from wallet_api.models.income import IncomeEntry
from wallet_api.schemas.income import IncomeCreate, IncomeRead, IncomeUpdate
from wallet_api.schemas.ledger import Distribution
from wallet_api.utils import ledger
from wallet_api.utils.events import publish_change

router = APIRouter(prefix="/income", tags=["income"])
logger = logging.getLogger(__name__)


def user_distribution(user: User) -> Distribution:
    return Distribution(**user.distribution())


async def get_owned_income(income_id: uuid.UUID, user: User, db: AsyncSession) -> IncomeEntry:
    income = await crud_income.get_income_by_id(income_id, uuid.UUID(str(user.id)), db)
    if not income:
        raise HTTPException(status_code=404, detail="Income entry not found")
    return income


@router.get("", response_model=List[IncomeRead])
async def list_income(
    start_date: Optional[date] = Query(None, description="Inclusive lower bound"),
    end_date: Optional[date] = Query(None, description="Exclusive upper bound"),
    bank_account_id: Optional[uuid.UUID] = Query(None, description="Only income into this account"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await crud_income.get_income_for_user(
        uuid.UUID(str(user.id)), db, start_date, end_date, bank_account_id
    )


@router.get("/{income_id}", response_model=IncomeRead)
async def get_income(
    income_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await get_owned_income(income_id, user, db)


@router.post("", response_model=IncomeRead, status_code=status.HTTP_201_CREATED)
async def create_income(
    inc_in: IncomeCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Record an income and allocate it across the wallets.

    The saved distribution is used unless the request carries a one-off
    `distribution`. The applied credits are stored on the entry. With a
    `bank_account_id` the account's own wallets receive the allocation and
    the account balance goes up by the amount.
    """
    store = await wallet_store_for(uuid.UUID(str(user.id)), inc_in.bank_account_id, db)
    distribution = inc_in.distribution or user_distribution(user)
    try:
        allocation = await ledger.record_income(store, inc_in.amount, distribution)
        income = await crud_income.add_income_for_user(store.user_id, inc_in, allocation.credits, db)
        await crud_account.apply_account_delta(inc_in.bank_account_id, store.user_id, inc_in.amount, db)
        await db.commit()
    except LedgerError:
        await db.rollback()
        raise
    await db.refresh(income)
    await publish_change(store.user_id)
    return income


@router.patch("/{income_id}", response_model=IncomeRead)
async def update_income(
    income_id: uuid.UUID,
    inc_in: IncomeUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Editing the amount or distribution re-runs the allocation"""
    income = await get_owned_income(income_id, user, db)
    store = await wallet_store_for(income.user_id, income.bank_account_id, db)
    reallocate = inc_in.amount is not None or inc_in.distribution is not None
    old_amount = income.amount

    try:
        allocations = None
        if reallocate:
            new_amount = inc_in.amount if inc_in.amount is not None else income.amount
            distribution = inc_in.distribution or user_distribution(user)
            allocation = await ledger.revise_income(store, income, new_amount, distribution)
            allocations = allocation.credits
            await crud_account.apply_account_delta(income.bank_account_id, store.user_id, new_amount - old_amount, db)
        income = await crud_income.apply_income_update(income, inc_in, allocations, db)
        await db.commit()
    except LedgerError:
        await db.rollback()
        raise
    await db.refresh(income)
    await publish_change(store.user_id)
    return income


@router.delete("/{income_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_income(
    income_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Delete an income and take back exactly what it credited"""
    income = await get_owned_income(income_id, user, db)
    store = await wallet_store_for(income.user_id, income.bank_account_id, db)
    try:
        await ledger.remove_income(store, income, user_distribution(user))
        await crud_account.apply_account_delta(income.bank_account_id, store.user_id, -income.amount, db)
        await crud_income.delete_income(income, db)
        await db.commit()
    except LedgerError:
        await db.rollback()
        raise
    logger.info(f"Deleted income {income_id} of {income.amount:.2f}")
    await publish_change(store.user_id)
