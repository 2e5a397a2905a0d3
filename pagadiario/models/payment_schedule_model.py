# pagadiario/models/payment_schedule_model.py
import uuid

from sqlalchemy import (
    Column, String, Integer, Date, DateTime, Numeric, ForeignKey, UniqueConstraint
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from pagadiario.utils.database import Base


class PaymentSchedule(Base):
    __tablename__ = "payment_schedule"
    __table_args__ = (
        UniqueConstraint("debt_id", "installment_number", name="uq_payment_schedule_installment"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    debt_id = Column(String(36), ForeignKey("debts.id", ondelete="RESTRICT"), nullable=False, index=True)

    installment_number = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)

    # pending / paid / overdue
    status = Column(String(20), nullable=False, server_default="pending", index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    debt = relationship("Debt", back_populates="payment_schedule")
