# wallet_api/crud/income.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc
from wallet_api.models.income import IncomeEntry
from wallet_api.schemas.income import IncomeCreate, IncomeUpdate
from wallet_api.schemas.ledger import Movement, dump_movements
from typing import List, Optional
from datetime import date
import uuid

# Writes here are staged only: the route commits them together with the
# wallet balance changes they caused.

async def get_income_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    bank_account_id: Optional[uuid.UUID] = None,
) -> List[IncomeEntry]:
    query = select(IncomeEntry).where(IncomeEntry.user_id == user_id)
    if bank_account_id is not None:
        query = query.where(IncomeEntry.bank_account_id == bank_account_id)
    if start_date is not None:
        query = query.where(IncomeEntry.date >= start_date)
    if end_date is not None:
        query = query.where(IncomeEntry.date < end_date)
    result = await db.execute(query.order_by(desc(IncomeEntry.date), desc(IncomeEntry.created_at)))
    return list(result.scalars().all())

async def get_income_by_id(income_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[IncomeEntry]:
    result = await db.execute(
        select(IncomeEntry).where(IncomeEntry.id == income_id, IncomeEntry.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def add_income_for_user(
    user_id: uuid.UUID,
    inc_in: IncomeCreate,
    allocations: List[Movement],
    db: AsyncSession,
) -> IncomeEntry:
    new_inc = IncomeEntry(
        **inc_in.model_dump(exclude={"distribution"}),
        user_id=user_id,
        allocations=dump_movements(allocations),
    )
    db.add(new_inc)
    return new_inc

async def apply_income_update(
    income: IncomeEntry,
    inc_in: IncomeUpdate,
    allocations: Optional[List[Movement]],
    db: AsyncSession,
) -> IncomeEntry:
    for field, value in inc_in.model_dump(exclude_unset=True, exclude={"distribution"}).items():
        if value is None and field not in ("notes", "payment_method"):
            continue
        setattr(income, field, value)
    if allocations is not None:
        income.allocations = dump_movements(allocations)
    db.add(income)
    return income

async def delete_income(income: IncomeEntry, db: AsyncSession) -> None:
    await db.delete(income)
