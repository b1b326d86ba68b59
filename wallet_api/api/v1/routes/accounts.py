# wallet_api/api/v1/routes/accounts.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid
import logging

from wallet_api.api.deps import get_current_user
from wallet_api.core.auth import User
from wallet_api.core.database import get_async_session
from wallet_api.core.exceptions import LedgerError
from wallet_api.crud import account as crud_account
from wallet_api.models.account import BankAccount
from wallet_api.schemas.account import (
    BankAccountCreate,
    BankAccountRead,
    BankAccountUpdate,
    BankTransferCreate,
    BankTransferRead,
)
from wallet_api.utils.accounts import transfer_between
from wallet_api.utils.events import publish_change

router = APIRouter(prefix="/accounts", tags=["accounts"])
logger = logging.getLogger(__name__)


async def get_owned_account(account_id: uuid.UUID, user: User, db: AsyncSession) -> BankAccount:
    account = await crud_account.get_account_by_id(account_id, uuid.UUID(str(user.id)), db)
    if not account:
        raise HTTPException(status_code=404, detail="Bank account not found")
    return account


@router.get("", response_model=List[BankAccountRead])
async def list_accounts(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Primary account first, then the rest oldest first"""
    return await crud_account.get_accounts_for_user(uuid.UUID(str(user.id)), db)


@router.post("", response_model=BankAccountRead, status_code=status.HTTP_201_CREATED)
async def create_account(
    acc_in: BankAccountCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    account = await crud_account.create_account_for_user(user_id, acc_in, db)
    logger.info(f"Added bank account {account.name} ({account.bank_name}) for user {user_id}")
    await publish_change(user_id)
    return account


# ────────────────────────────────────────────────────────────────────────────────
# TRANSFERS
# ────────────────────────────────────────────────────────────────────────────────
@router.get("/transfers", response_model=List[BankTransferRead])
async def list_transfers(
    account_id: Optional[uuid.UUID] = Query(None, description="Only transfers into or out of this account"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await crud_account.get_transfers_for_user(uuid.UUID(str(user.id)), db, account_id)


@router.post("/transfer", response_model=BankTransferRead, status_code=status.HTTP_201_CREATED)
async def transfer(
    tr_in: BankTransferCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Move money between two of the user's accounts; never more than the source holds"""
    source = await get_owned_account(tr_in.from_account_id, user, db)
    target = await get_owned_account(tr_in.to_account_id, user, db)
    try:
        transfer_between(source, target, tr_in.amount)
        db.add_all([source, target])
        record = await crud_account.add_transfer_for_user(uuid.UUID(str(user.id)), tr_in, db)
        await db.commit()
    except LedgerError:
        await db.rollback()
        raise
    await db.refresh(record)
    logger.info(f"Bank transfer of {tr_in.amount:.2f} from {source.name} to {target.name}")
    await publish_change(uuid.UUID(str(user.id)))
    return record


# ────────────────────────────────────────────────────────────────────────────────
# SINGLE ACCOUNT
# ────────────────────────────────────────────────────────────────────────────────
@router.get("/{account_id}", response_model=BankAccountRead)
async def get_account(
    account_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await get_owned_account(account_id, user, db)


@router.patch("/{account_id}", response_model=BankAccountRead)
async def update_account(
    account_id: uuid.UUID,
    acc_in: BankAccountUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Rename or re-type an account; the balance only moves through entries and transfers"""
    account = await get_owned_account(account_id, user, db)
    account = await crud_account.update_account(account, acc_in, db)
    await publish_change(uuid.UUID(str(user.id)))
    return account


@router.post("/{account_id}/primary", response_model=BankAccountRead)
async def set_primary(
    account_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    account = await get_owned_account(account_id, user, db)
    account = await crud_account.set_primary_account(account, uuid.UUID(str(user.id)), db)
    await publish_change(uuid.UUID(str(user.id)))
    return account


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    account_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Delete an account together with its transfers, income, expenses and wallets"""
    account = await get_owned_account(account_id, user, db)
    await crud_account.delete_account(account, uuid.UUID(str(user.id)), db)
    await publish_change(uuid.UUID(str(user.id)))
