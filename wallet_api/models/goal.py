# wallet_api/models/goal.py
import uuid
from sqlalchemy import Column, String, Float, Date, DateTime, ForeignKey, Uuid
from wallet_api.core.database import Base, utcnow

class Goal(Base):
    __tablename__ = "goals"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(length=150), nullable=False)
    description = Column(String(length=500), nullable=True)
    target_amount = Column(Float, nullable=False)
    # Track how much is saved so far, updated by contributions
    saved_amount = Column(Float, nullable=False, default=0.0)
    target_date = Column(Date, nullable=True)
    wallet_category = Column(String(length=20), nullable=False)
    status = Column(String(length=20), nullable=False, default="active")

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Goal title={self.title} target={self.target_amount} user_id={self.user_id}>"
