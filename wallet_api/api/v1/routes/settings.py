# wallet_api/api/v1/routes/settings.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
import uuid
import logging

from wallet_api.api.deps import get_current_user
from wallet_api.core.auth import User
from wallet_api.core.database import get_async_session
from wallet_api.schemas.ledger import Distribution
from wallet_api.utils.events import publish_change

router = APIRouter(prefix="/settings", tags=["settings"])
logger = logging.getLogger(__name__)


@router.get("/distribution", response_model=Distribution)
async def get_distribution(user: User = Depends(get_current_user)):
    """How new income is split across the saving / needs / wants wallets"""
    return Distribution(**user.distribution())


@router.put("/distribution", response_model=Distribution)
async def update_distribution(
    distribution: Distribution,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Replace the distribution. The three percentages must add up to 100.

    Only future income is affected; recorded entries keep the allocation
    they were created with.
    """
    user_id = uuid.UUID(str(user.id))
    await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(
            saving_percentage=distribution.saving,
            needs_percentage=distribution.needs,
            wants_percentage=distribution.wants,
        )
    )
    await db.commit()
    logger.info(f"User {user_id} distribution set to {distribution.saving}/{distribution.needs}/{distribution.wants}")
    await publish_change(user_id)
    return distribution
