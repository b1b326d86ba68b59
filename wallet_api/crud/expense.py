# wallet_api/crud/expense.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc
from wallet_api.models.expense import ExpenseEntry
from wallet_api.schemas.expense import ExpenseCreate, ExpenseUpdate
from wallet_api.schemas.ledger import Movement, dump_movements
from typing import List, Optional
from datetime import date
import uuid

# Staged writes, committed by the route with the matching balance changes

async def get_expenses_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    bank_account_id: Optional[uuid.UUID] = None,
) -> List[ExpenseEntry]:
    query = select(ExpenseEntry).where(ExpenseEntry.user_id == user_id)
    if bank_account_id is not None:
        query = query.where(ExpenseEntry.bank_account_id == bank_account_id)
    if start_date is not None:
        query = query.where(ExpenseEntry.date >= start_date)
    if end_date is not None:
        query = query.where(ExpenseEntry.date < end_date)
    result = await db.execute(query.order_by(desc(ExpenseEntry.date), desc(ExpenseEntry.created_at)))
    return list(result.scalars().all())

async def get_expense_by_id(expense_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[ExpenseEntry]:
    result = await db.execute(
        select(ExpenseEntry).where(ExpenseEntry.id == expense_id, ExpenseEntry.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def add_expense_for_user(
    user_id: uuid.UUID,
    ex_in: ExpenseCreate,
    deductions: List[Movement],
    db: AsyncSession,
) -> ExpenseEntry:
    new_ex = ExpenseEntry(
        **ex_in.model_dump(exclude={"sources"}),
        user_id=user_id,
        deductions=dump_movements(deductions),
    )
    db.add(new_ex)
    return new_ex

async def apply_expense_update(
    expense: ExpenseEntry,
    ex_in: ExpenseUpdate,
    deductions: Optional[List[Movement]],
    db: AsyncSession,
) -> ExpenseEntry:
    for field, value in ex_in.model_dump(exclude_unset=True, exclude={"sources"}).items():
        if value is None and field not in ("notes", "payment_method"):
            continue
        setattr(expense, field, value)
    if deductions is not None:
        expense.deductions = dump_movements(deductions)
    db.add(expense)
    return expense

async def delete_expense(expense: ExpenseEntry, db: AsyncSession) -> None:
    await db.delete(expense)
