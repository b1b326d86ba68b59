# tests/conftest.py
import os

# Settings are read at import time; point them at an in-memory database first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-wallet-ledger"

import uuid
from types import SimpleNamespace
from typing import Dict, List, Optional, Tuple

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from wallet_api.core.auth import User, get_jwt_strategy
from wallet_api.core.database import Base, get_async_session
from wallet_api.main import app
from wallet_api.utils import events


# ────────────────────────────────────────────────────────────────────────────────
# IN-MEMORY WALLET STORE
# ────────────────────────────────────────────────────────────────────────────────
class InMemoryWalletStore:
    """WalletStore fake holding plain records; counts writes for assertions"""

    def __init__(self):
        self.wallets: Dict[uuid.UUID, SimpleNamespace] = {}
        self.sub_wallets: Dict[uuid.UUID, SimpleNamespace] = {}
        self.writes: List[Tuple[str, uuid.UUID, float]] = []

    def add_wallet(self, category: str, balance: float = 0.0) -> SimpleNamespace:
        wallet = SimpleNamespace(
            id=uuid.uuid4(),
            name=f"{category.title()} Wallet",
            category=category,
            color="gray",
            balance=balance,
        )
        self.wallets[wallet.id] = wallet
        return wallet

    def add_sub_wallet(
        self,
        parent_category: str,
        name: str,
        percentage: float,
        balance: float = 0.0,
        goal_target_amount: Optional[float] = None,
    ) -> SimpleNamespace:
        sub_wallet = SimpleNamespace(
            id=uuid.uuid4(),
            name=name,
            parent_category=parent_category,
            allocation_percentage=percentage,
            color="gray",
            balance=balance,
            order_position=len(self.sub_wallets),
            goal_enabled=goal_target_amount is not None,
            goal_target_amount=goal_target_amount,
        )
        self.sub_wallets[sub_wallet.id] = sub_wallet
        return sub_wallet

    def by_category(self, category: str) -> SimpleNamespace:
        return next(w for w in self.wallets.values() if w.category == category)

    def total(self) -> float:
        return sum(w.balance for w in self.wallets.values()) + sum(s.balance for s in self.sub_wallets.values())

    async def list_wallets(self):
        return list(self.wallets.values())

    async def list_sub_wallets(self):
        return list(self.sub_wallets.values())

    async def get(self, kind, record_id):
        if kind == "wallet":
            return self.wallets.get(record_id)
        return self.sub_wallets.get(record_id)

    async def update_balance(self, kind, record_id, balance):
        record = await self.get(kind, record_id)
        record.balance = balance
        self.writes.append((kind, record_id, balance))


@pytest.fixture
def store() -> InMemoryWalletStore:
    s = InMemoryWalletStore()
    for category in ("saving", "needs", "wants"):
        s.add_wallet(category)
    return s


@pytest.fixture
def distribution() -> dict:
    return {"saving": 50, "needs": 30, "wants": 20}


# ────────────────────────────────────────────────────────────────────────────────
# DATABASE & HTTP CLIENT
# ────────────────────────────────────────────────────────────────────────────────
@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)

    await engine.dispose()


@pytest.fixture
async def user(session_factory) -> User:
    async with session_factory() as session:
        new_user = User(
            id=uuid.uuid4(),
            email="owner@example.com",
            hashed_password="not-a-real-hash",
            is_active=True,
            is_superuser=False,
            is_verified=True,
            full_name="Wallet Owner",
            saving_percentage=50,
            needs_percentage=30,
            wants_percentage=20,
        )
        session.add(new_user)
        await session.commit()
        return new_user


@pytest.fixture
async def token(user) -> str:
    return await get_jwt_strategy().write_token(user)


@pytest.fixture
async def anon_client(session_factory):
    async def override_get_async_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_async_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def client(anon_client, token):
    anon_client.headers["Authorization"] = f"Bearer {token}"
    return anon_client


@pytest.fixture
def published():
    """Records every change event published during the test"""
    received = []

    def listener(user_id, event):
        received.append((user_id, event))

    events.subscribe(listener)
    yield received
    events.unsubscribe(listener)
