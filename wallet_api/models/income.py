# wallet_api/models/income.py
import uuid
from sqlalchemy import Column, String, ForeignKey, Float, Date, DateTime, JSON, Uuid
from wallet_api.core.database import Base, utcnow


class IncomeEntry(Base):
    __tablename__ = "income_entries"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Account the money came into (income) or went out of (expense)
    bank_account_id = Column(Uuid(as_uuid=True), ForeignKey("bank_accounts.id", ondelete="CASCADE"), nullable=True, index=True)
    source = Column(String(length=255), nullable=False)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False)
    category = Column(String(length=100), nullable=False)
    notes = Column(String(length=500), nullable=True)
    payment_method = Column(String(length=50), nullable=True)
    # Credits applied when the income was recorded; replayed on edit/delete
    allocations = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<IncomeEntry amount={self.amount} date={self.date} user_id={self.user_id}>"
