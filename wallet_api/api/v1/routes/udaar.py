# wallet_api/api/v1/routes/udaar.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid
import logging

from wallet_api.api.deps import get_current_user
from wallet_api.core.auth import User
from wallet_api.core.database import get_async_session
from wallet_api.crud import udaar as crud_udaar
from wallet_api.models.udaar import UdaarEntry, UdaarStatus
from wallet_api.schemas.udaar import (
    PartialPaymentRequest,
    PaymentHistoryRead,
    PersonBalance,
    UdaarCreate,
    UdaarRead,
    UdaarUpdate,
)
from wallet_api.utils import udaar as udaar_logic
from wallet_api.utils.events import publish_change

router = APIRouter(prefix="/udaar", tags=["udaar"])
logger = logging.getLogger(__name__)


async def get_owned_entry(entry_id: uuid.UUID, user: User, db: AsyncSession) -> UdaarEntry:
    entry = await crud_udaar.get_udaar_by_id(entry_id, uuid.UUID(str(user.id)), db)
    if not entry:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return entry


async def get_person_entries(person_name: str, user: User, db: AsyncSession) -> List[UdaarEntry]:
    entries = await crud_udaar.get_udaar_for_person(person_name, uuid.UUID(str(user.id)), db)
    if not entries:
        raise HTTPException(status_code=404, detail=f"No transactions with {person_name}")
    return entries


@router.get("", response_model=List[UdaarRead])
async def list_udaar(
    status_filter: Optional[UdaarStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await crud_udaar.get_udaar_for_user(
        uuid.UUID(str(user.id)),
        db,
        status_filter.value if status_filter else None,
    )


@router.get("/history", response_model=List[PaymentHistoryRead])
async def list_history(
    person_name: Optional[str] = Query(None, description="Only this person's history"),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Payment history, newest first; records outlive deleted transactions"""
    return await crud_udaar.get_history_for_user(uuid.UUID(str(user.id)), db, person_name, limit)


@router.post("", response_model=UdaarRead, status_code=status.HTTP_201_CREATED)
async def create_udaar(
    entry_in: UdaarCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    entry, history = udaar_logic.create_entry(
        user_id,
        entry_in.person_name,
        entry_in.amount,
        entry_in.type.value,
        entry_in.description,
        entry_in.date,
    )
    await crud_udaar.save_udaar_changes([entry], [history], db)
    await db.refresh(entry)
    await publish_change(user_id)
    return entry


@router.patch("/{entry_id}", response_model=UdaarRead)
async def update_udaar(
    entry_id: uuid.UUID,
    entry_in: UdaarUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    entry = await get_owned_entry(entry_id, user, db)
    changes = entry_in.model_dump(exclude_unset=True)
    if changes.get("type") is not None:
        changes["type"] = changes["type"].value

    history = udaar_logic.edit_entry(entry, changes)
    await crud_udaar.save_udaar_changes([entry], [history], db)
    await db.refresh(entry)
    await publish_change(uuid.UUID(str(user.id)))
    return entry


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_udaar(
    entry_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    entry = await get_owned_entry(entry_id, user, db)
    await crud_udaar.delete_udaar(entry, db)
    logger.info(f"Deleted udaar entry {entry_id}")
    await publish_change(uuid.UUID(str(user.id)))


@router.post("/{entry_id}/partial-payment", response_model=UdaarRead)
async def partial_payment(
    entry_id: uuid.UUID,
    payment_in: PartialPaymentRequest,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Record part of the remaining amount as paid.

    The entry is marked paid once nothing remains; paying more than the
    remaining amount is rejected.
    """
    entry = await get_owned_entry(entry_id, user, db)
    history = udaar_logic.record_partial_payment(entry, payment_in.amount, payment_in.description)
    await crud_udaar.save_udaar_changes([entry], [history], db)
    await db.refresh(entry)
    await publish_change(uuid.UUID(str(user.id)))
    return entry


@router.post("/{entry_id}/mark-paid", response_model=UdaarRead)
async def mark_paid(
    entry_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    entry = await get_owned_entry(entry_id, user, db)
    history = udaar_logic.mark_paid(entry)
    await crud_udaar.save_udaar_changes([entry], [history], db)
    await db.refresh(entry)
    await publish_change(uuid.UUID(str(user.id)))
    return entry


@router.get("/people/{person_name}/balance", response_model=PersonBalance)
async def person_balance(
    person_name: str,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    entries = await get_person_entries(person_name, user, db)
    return PersonBalance(person_name=entries[0].person_name, **udaar_logic.person_balance(entries))


@router.post("/people/{person_name}/settle", response_model=List[PaymentHistoryRead])
async def settle_person(
    person_name: str,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Mark every open transaction with this person as paid"""
    entries = await get_person_entries(person_name, user, db)
    history = udaar_logic.settle_person(entries)
    await crud_udaar.save_udaar_changes(entries, history, db)
    logger.info(f"Settled {len(history)} transactions with {person_name}")
    await publish_change(uuid.UUID(str(user.id)))
    return history
