# wallet_api/models/udaar.py
import uuid
import enum
from sqlalchemy import Column, String, ForeignKey, Float, DateTime, JSON, Uuid
from wallet_api.core.database import Base, utcnow


class UdaarType(str, enum.Enum):
    gave = "gave"    # receivable: the user lent money
    took = "took"    # payable: the user borrowed money


class UdaarStatus(str, enum.Enum):
    pending = "pending"
    partially_paid = "partially_paid"
    paid = "paid"


class HistoryAction(str, enum.Enum):
    created = "created"
    edited = "edited"
    partial_payment = "partial_payment"
    marked_paid = "marked_paid"
    settled = "settled"


class UdaarEntry(Base):
    __tablename__ = "udaar_entries"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    person_name = Column(String(length=150), nullable=False, index=True)
    description = Column(String(length=255), nullable=False, default="")
    # Remaining amount; shrinks with every partial payment
    amount = Column(Float, nullable=False)
    original_amount = Column(Float, nullable=True)
    type = Column(String(length=10), nullable=False)
    date = Column(DateTime, nullable=False, default=utcnow)
    status = Column(String(length=20), nullable=False, default=UdaarStatus.pending.value)
    parent_transaction_id = Column(Uuid(as_uuid=True), ForeignKey("udaar_entries.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<UdaarEntry person={self.person_name} amount={self.amount} status={self.status}>"


class PaymentHistory(Base):
    __tablename__ = "payment_history"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # No FK: history outlives the entry it describes
    transaction_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    person_name = Column(String(length=150), nullable=False)
    action = Column(String(length=30), nullable=False)
    description = Column(String(length=255), nullable=False)
    amount = Column(Float, nullable=True)
    date = Column(DateTime, nullable=False, default=utcnow)
    details = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<PaymentHistory action={self.action} person={self.person_name} amount={self.amount}>"
