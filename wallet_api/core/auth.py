# wallet_api/core/auth.py

import uuid
import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi_users import FastAPIUsers, BaseUserManager, UUIDIDMixin
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    JWTStrategy,
)
from fastapi_users.db import SQLAlchemyUserDatabase
from fastapi_users import schemas
from pydantic import ConfigDict

from sqlalchemy import Column, String, Boolean, Integer, Uuid
from sqlalchemy.ext.asyncio import AsyncSession

from .database import Base, get_async_session
from .config import settings

logger = logging.getLogger(__name__)

JWT_AUDIENCE = ["fastapi-users:auth"]

# 1. User DB model
class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    full_name = Column(String, nullable=True)

    # Income distribution across the three top-level wallets, sums to 100
    saving_percentage = Column(Integer, nullable=False, default=settings.DEFAULT_SAVING_PERCENTAGE)
    needs_percentage = Column(Integer, nullable=False, default=settings.DEFAULT_NEEDS_PERCENTAGE)
    wants_percentage = Column(Integer, nullable=False, default=settings.DEFAULT_WANTS_PERCENTAGE)

    def distribution(self) -> dict:
        return {
            "saving": self.saving_percentage if self.saving_percentage is not None else settings.DEFAULT_SAVING_PERCENTAGE,
            "needs": self.needs_percentage if self.needs_percentage is not None else settings.DEFAULT_NEEDS_PERCENTAGE,
            "wants": self.wants_percentage if self.wants_percentage is not None else settings.DEFAULT_WANTS_PERCENTAGE,
        }

# 2. Pydantic schemas
class UserRead(schemas.BaseUser[uuid.UUID]):
    full_name: Optional[str] = None
    saving_percentage: Optional[int] = None
    needs_percentage: Optional[int] = None
    wants_percentage: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

class UserCreate(schemas.BaseUserCreate):
    full_name: Optional[str] = None

class UserUpdate(schemas.BaseUserUpdate):
    full_name: Optional[str] = None

# 3. User Manager
class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    reset_password_token_secret = settings.SECRET_KEY
    verification_token_secret = settings.SECRET_KEY

    async def on_after_register(self, user: User, request: Optional[Request] = None):
        logger.info(f"User {user.email} has registered. Seeding default wallets…")
        # Local import: crud.wallet depends on models that load after this module
        from wallet_api.crud.wallet import seed_default_wallets_for_user

        try:
            await seed_default_wallets_for_user(user.id, self.user_db.session)
        except Exception as e:
            # Wallets are seeded lazily on first wallet access as well
            logger.error(f"❌ Could not seed wallets for {user.email}: {str(e)}")

# 4. User Database
async def get_user_db(session: AsyncSession = Depends(get_async_session)):
    yield SQLAlchemyUserDatabase(session, User)

# 5. User Manager dependency
async def get_user_manager(user_db: SQLAlchemyUserDatabase = Depends(get_user_db)):
    yield UserManager(user_db)

# 6. Authentication
bearer_transport = BearerTransport(tokenUrl="/api/v1/auth/jwt/login")

def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(
        secret=settings.SECRET_KEY,
        lifetime_seconds=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        token_audience=JWT_AUDIENCE,
    )

auth_backend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

# 7. FastAPI Users instance
fastapi_users = FastAPIUsers[User, uuid.UUID](get_user_manager, [auth_backend])

# 8. Current user dependency
current_active_user = fastapi_users.current_user(active=True)

__all__ = [
    "fastapi_users",
    "auth_backend",
    "current_active_user",
    "get_user_db",
    "User",
    "UserRead",
    "UserCreate",
    "UserUpdate",
    "JWT_AUDIENCE",
]
