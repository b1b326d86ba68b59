# wallet_api/api/v1/routes/expenses.py
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
from wallet_api.crud import expense as crud_expense
from wallet_api.models.expense import ExpenseEntry
from wallet_api.schemas.expense import ExpenseCreate, ExpenseRead, ExpenseUpdate
from wallet_api.utils import ledger
from wallet_api.utils.events import publish_change

router = APIRouter(prefix="/expenses", tags=["expenses"])
logger = logging.getLogger(__name__)


async def get_owned_expense(expense_id: uuid.UUID, user: User, db: AsyncSession) -> ExpenseEntry:
    expense = await crud_expense.get_expense_by_id(expense_id, uuid.UUID(str(user.id)), db)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense


@router.get("", response_model=List[ExpenseRead])
async def list_expenses(
    start_date: Optional[date] = Query(None, description="Inclusive lower bound"),
    end_date: Optional[date] = Query(None, description="Exclusive upper bound"),
    bank_account_id: Optional[uuid.UUID] = Query(None, description="Only expenses paid from this account"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await crud_expense.get_expenses_for_user(
        uuid.UUID(str(user.id)), db, start_date, end_date, bank_account_id
    )


@router.get("/{expense_id}", response_model=ExpenseRead)
async def get_expense(
    expense_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await get_owned_expense(expense_id, user, db)


@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
async def create_expense(
    ex_in: ExpenseCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Record an expense paid from `sources`, drained in the given order.

    If the sources together cannot cover the amount the expense is rejected
    with the shortfall and no balance changes. With a `bank_account_id` the
    sources come from that account's wallets and its balance goes down.
    """
    store = await wallet_store_for(uuid.UUID(str(user.id)), ex_in.bank_account_id, db)
    try:
        result = await ledger.record_expense(store, ex_in.amount, ex_in.sources)
        expense = await crud_expense.add_expense_for_user(store.user_id, ex_in, result.deductions, db)
        await crud_account.apply_account_delta(ex_in.bank_account_id, store.user_id, -ex_in.amount, db)
        await db.commit()
    except LedgerError:
        await db.rollback()
        raise
    await db.refresh(expense)
    await publish_change(store.user_id)
    return expense


@router.patch("/{expense_id}", response_model=ExpenseRead)
async def update_expense(
    expense_id: uuid.UUID,
    ex_in: ExpenseUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Changing the amount or sources re-prices the expense; the old deductions are restored first"""
    expense = await get_owned_expense(expense_id, user, db)
    store = await wallet_store_for(expense.user_id, expense.bank_account_id, db)
    reprice = ex_in.amount is not None or ex_in.sources is not None
    old_amount = expense.amount

    try:
        deductions = None
        if reprice:
            new_amount = ex_in.amount if ex_in.amount is not None else expense.amount
            result = await ledger.revise_expense(store, expense, new_amount, ex_in.sources)
            deductions = result.deductions
            await crud_account.apply_account_delta(expense.bank_account_id, store.user_id, old_amount - new_amount, db)
        expense = await crud_expense.apply_expense_update(expense, ex_in, deductions, db)
        await db.commit()
    except LedgerError:
        await db.rollback()
        raise
    await db.refresh(expense)
    await publish_change(store.user_id)
    return expense


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Delete an expense and credit every recorded deduction back to its source"""
    expense = await get_owned_expense(expense_id, user, db)
    store = await wallet_store_for(expense.user_id, expense.bank_account_id, db)
    try:
        await ledger.remove_expense(store, expense)
        await crud_account.apply_account_delta(expense.bank_account_id, store.user_id, expense.amount, db)
        await crud_expense.delete_expense(expense, db)
        await db.commit()
    except LedgerError:
        await db.rollback()
        raise
    logger.info(f"Deleted expense {expense_id} of {expense.amount:.2f}")
    await publish_change(store.user_id)
