# wallet_api/models/wallet.py
import uuid
import enum
from sqlalchemy import Column, String, ForeignKey, Float, Boolean, Integer, DateTime, Uuid, UniqueConstraint, Index, text
from wallet_api.core.database import Base, utcnow


class WalletCategory(str, enum.Enum):
    saving = "saving"
    needs = "needs"
    wants = "wants"


class Wallet(Base):
    __tablename__ = "wallets"
    # One wallet per category per bank account, and per category in the default set
    __table_args__ = (
        UniqueConstraint("user_id", "bank_account_id", "category", name="uq_wallets_user_account_category"),
        Index(
            "uq_wallets_user_category_default",
            "user_id",
            "category",
            unique=True,
            sqlite_where=text("bank_account_id IS NULL"),
            postgresql_where=text("bank_account_id IS NULL"),
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    bank_account_id = Column(Uuid(as_uuid=True), ForeignKey("bank_accounts.id", ondelete="CASCADE"), nullable=True, index=True)
    name = Column(String(length=100), nullable=False)
    category = Column(String(length=20), nullable=False)
    color = Column(String(length=30), nullable=False, default="gray")
    # Unallocated remainder only; sub-wallet money is held on the sub-wallets
    balance = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Wallet name={self.name} category={self.category} balance={self.balance}>"


class SubWallet(Base):
    __tablename__ = "sub_wallets"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    bank_account_id = Column(Uuid(as_uuid=True), ForeignKey("bank_accounts.id", ondelete="CASCADE"), nullable=True, index=True)
    name = Column(String(length=100), nullable=False)
    parent_category = Column(String(length=20), nullable=False)
    parent_wallet_id = Column(Uuid(as_uuid=True), ForeignKey("wallets.id", ondelete="SET NULL"), nullable=True)
    # Share of the parent category's *new inflow*, not of its balance
    allocation_percentage = Column(Float, nullable=False)
    color = Column(String(length=30), nullable=False, default="gray")
    balance = Column(Float, nullable=False, default=0.0)
    order_position = Column(Integer, nullable=False, default=0)

    goal_enabled = Column(Boolean, nullable=False, default=False)
    goal_target_amount = Column(Float, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<SubWallet name={self.name} parent={self.parent_category} balance={self.balance}>"
