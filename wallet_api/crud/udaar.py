# wallet_api/crud/udaar.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc, func
from wallet_api.models.udaar import UdaarEntry, PaymentHistory
from typing import Iterable, List, Optional
import uuid

async def get_udaar_for_user(user_id: uuid.UUID, db: AsyncSession, status: Optional[str] = None) -> List[UdaarEntry]:
    query = select(UdaarEntry).where(UdaarEntry.user_id == user_id)
    if status:
        query = query.where(UdaarEntry.status == status)
    result = await db.execute(query.order_by(desc(UdaarEntry.date)))
    return list(result.scalars().all())

async def get_udaar_by_id(entry_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[UdaarEntry]:
    result = await db.execute(
        select(UdaarEntry).where(UdaarEntry.id == entry_id, UdaarEntry.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def get_udaar_for_person(person_name: str, user_id: uuid.UUID, db: AsyncSession) -> List[UdaarEntry]:
    """Case-insensitive lookup of every entry with one person."""
    result = await db.execute(
        select(UdaarEntry).where(
            UdaarEntry.user_id == user_id,
            func.lower(UdaarEntry.person_name) == func.lower(person_name.strip()),
        )
    )
    return list(result.scalars().all())

async def get_history_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    person_name: Optional[str] = None,
    limit: int = 100,
) -> List[PaymentHistory]:
    query = select(PaymentHistory).where(PaymentHistory.user_id == user_id)
    if person_name:
        query = query.where(func.lower(PaymentHistory.person_name) == func.lower(person_name.strip()))
    result = await db.execute(query.order_by(desc(PaymentHistory.date)).limit(limit))
    return list(result.scalars().all())

async def save_udaar_changes(
    entries: Iterable[UdaarEntry],
    history: Iterable[PaymentHistory],
    db: AsyncSession,
) -> None:
    """Persist entry changes and their history records in one commit"""
    db.add_all(list(entries))
    db.add_all(list(history))
    await db.commit()

async def delete_udaar(entry: UdaarEntry, db: AsyncSession) -> None:
    # History rows keep their transaction_id; there is no FK to cascade
    await db.delete(entry)
    await db.commit()
