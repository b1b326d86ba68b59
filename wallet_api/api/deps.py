# wallet_api/api/deps.py
from typing import Optional
from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import jwt
import uuid
import logging

from wallet_api.core.database import get_async_session
from wallet_api.core.auth import User, JWT_AUDIENCE
from wallet_api.core.config import settings
from wallet_api.crud.account import get_account_by_id
from wallet_api.crud.wallet import SQLAlchemyWalletStore, seed_default_wallets_for_user

logger = logging.getLogger(__name__)

# Security schemes
optional_security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_user_from_token(token: str, db: AsyncSession) -> User:
    """Decode a fastapi-users JWT and load the active user it names"""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")

    user_id_str = payload.get("sub")
    if not user_id_str:
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_id = uuid.UUID(user_id_str)
    except ValueError:
        raise _unauthorized("Invalid user ID format in token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()

    if not user:
        raise _unauthorized("User not found")
    if getattr(user, "is_active", False) is False:
        raise _unauthorized("Inactive user")

    return user


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security)
) -> User:
    """
    Get the current user from a token in one of:
    - Authorization header
    - Query parameters
    - Cookies
    """
    token = None

    # From Authorization header
    if credentials and credentials.credentials:
        token = credentials.credentials

    # From query parameter
    if not token:
        token = request.query_params.get("token") or request.query_params.get("access_token")

    # From cookie
    if not token:
        token = request.cookies.get("access_token")
        if token and token.startswith("Bearer "):
            token = token[7:]

    if not token:
        raise _unauthorized("Not authenticated")

    return await get_user_from_token(token, db)


async def wallet_store_for(
    user_id: uuid.UUID,
    bank_account_id: Optional[uuid.UUID],
    db: AsyncSession,
) -> SQLAlchemyWalletStore:
    """Store over one wallet set, seeding its default wallets on first use"""
    if bank_account_id is not None and await get_account_by_id(bank_account_id, user_id, db) is None:
        raise HTTPException(status_code=404, detail="Bank account not found")
    created = await seed_default_wallets_for_user(user_id, db, bank_account_id)
    if created:
        logger.info(f"Lazily created default wallets for user {user_id}")
    return SQLAlchemyWalletStore(db, user_id, bank_account_id)


async def get_wallet_store(
    bank_account_id: Optional[uuid.UUID] = Query(None, description="Wallet set of this bank account; default set if omitted"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
) -> SQLAlchemyWalletStore:
    """Balance store for the current user's default wallets or one account's"""
    return await wallet_store_for(uuid.UUID(str(user.id)), bank_account_id, db)
