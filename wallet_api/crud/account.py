# wallet_api/crud/account.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete, desc, or_
from wallet_api.models.account import BankAccount, BankTransfer
from wallet_api.models.expense import ExpenseEntry
from wallet_api.models.income import IncomeEntry
from wallet_api.models.wallet import SubWallet, Wallet
from wallet_api.schemas.account import BankAccountCreate, BankAccountUpdate, BankTransferCreate
from wallet_api.utils.accounts import adjust_balance, choose_primary
from datetime import date
from typing import List, Optional
import uuid
import logging

logger = logging.getLogger(__name__)


async def get_accounts_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[BankAccount]:
    result = await db.execute(
        select(BankAccount)
        .where(BankAccount.user_id == user_id)
        .order_by(desc(BankAccount.is_primary), BankAccount.created_at)
    )
    return list(result.scalars().all())

async def get_account_by_id(account_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[BankAccount]:
    result = await db.execute(
        select(BankAccount).where(BankAccount.id == account_id, BankAccount.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def create_account_for_user(user_id: uuid.UUID, acc_in: BankAccountCreate, db: AsyncSession) -> BankAccount:
    existing = await get_accounts_for_user(user_id, db)
    new_acc = BankAccount(
        **acc_in.model_dump(),
        user_id=user_id,
        # The first account a user adds becomes the primary one
        is_primary=not existing,
    )
    db.add(new_acc)
    await db.commit()
    await db.refresh(new_acc)
    return new_acc

async def update_account(account: BankAccount, acc_in: BankAccountUpdate, db: AsyncSession) -> BankAccount:
    for field, value in acc_in.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        setattr(account, field, value)
    db.add(account)
    await db.commit()
    await db.refresh(account)
    return account

async def set_primary_account(account: BankAccount, user_id: uuid.UUID, db: AsyncSession) -> BankAccount:
    for other in await get_accounts_for_user(user_id, db):
        other.is_primary = other.id == account.id
        db.add(other)
    await db.commit()
    await db.refresh(account)
    return account

async def delete_account(account: BankAccount, user_id: uuid.UUID, db: AsyncSession) -> None:
    """Delete an account with its transfers, entries and wallet set"""
    account_id = account.id
    await db.execute(
        delete(BankTransfer).where(
            BankTransfer.user_id == user_id,
            or_(BankTransfer.from_account_id == account_id, BankTransfer.to_account_id == account_id),
        )
    )
    for model in (IncomeEntry, ExpenseEntry, SubWallet, Wallet):
        await db.execute(delete(model).where(model.user_id == user_id, model.bank_account_id == account_id))

    if account.is_primary:
        successor = choose_primary(await get_accounts_for_user(user_id, db), removed_id=account_id)
        if successor is not None:
            successor.is_primary = True
            db.add(successor)

    await db.delete(account)
    await db.commit()
    logger.info(f"Deleted bank account {account_id} and its wallet set for user {user_id}")


# ────────────────────────────────────────────────────────────────────────────────
# TRANSFERS & CASH MOVEMENTS (staged; the route commits)
# ────────────────────────────────────────────────────────────────────────────────
async def add_transfer_for_user(user_id: uuid.UUID, tr_in: BankTransferCreate, db: AsyncSession) -> BankTransfer:
    data = tr_in.model_dump()
    data["transfer_date"] = data.get("transfer_date") or date.today()
    new_tr = BankTransfer(**data, user_id=user_id)
    db.add(new_tr)
    return new_tr

async def get_transfers_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    account_id: Optional[uuid.UUID] = None,
) -> List[BankTransfer]:
    query = select(BankTransfer).where(BankTransfer.user_id == user_id)
    if account_id is not None:
        query = query.where(
            or_(BankTransfer.from_account_id == account_id, BankTransfer.to_account_id == account_id)
        )
    result = await db.execute(query.order_by(desc(BankTransfer.transfer_date), desc(BankTransfer.created_at)))
    return list(result.scalars().all())

async def apply_account_delta(
    account_id: Optional[uuid.UUID],
    user_id: uuid.UUID,
    delta: float,
    db: AsyncSession,
) -> Optional[BankAccount]:
    if account_id is None or not delta:
        return None
    account = await get_account_by_id(account_id, user_id, db)
    if account is None:
        logger.warning(f"Bank account {account_id} is gone, skipping {delta:.2f}")
        return None
    adjust_balance(account, delta)
    db.add(account)
    return account
