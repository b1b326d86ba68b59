# wallet_api/models/account.py
import uuid
from sqlalchemy import Column, String, ForeignKey, Float, Boolean, Date, DateTime, Uuid
from wallet_api.core.database import Base, utcnow


class BankAccount(Base):
    __tablename__ = "bank_accounts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=100), nullable=False)
    bank_name = Column(String(length=100), nullable=False)
    account_type = Column(String(length=30), nullable=False, default="savings")
    # Cash held in the account; moved by income, expenses and bank transfers
    balance = Column(Float, nullable=False, default=0.0)
    is_primary = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<BankAccount name={self.name} bank={self.bank_name} balance={self.balance}>"


class BankTransfer(Base):
    __tablename__ = "bank_transfers"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    from_account_id = Column(Uuid(as_uuid=True), ForeignKey("bank_accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    to_account_id = Column(Uuid(as_uuid=True), ForeignKey("bank_accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    description = Column(String(length=255), nullable=True)
    transfer_date = Column(Date, nullable=False)

    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<BankTransfer amount={self.amount} from={self.from_account_id} to={self.to_account_id}>"
