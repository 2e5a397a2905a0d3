# pagadiario/models/debt_model.py
import uuid

from sqlalchemy import (
    Column,
    String,
    Date,
    DateTime,
    Numeric,
    ForeignKey,
    Index,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from pagadiario.utils.database import Base


class Debt(Base):
    __tablename__ = "debts"

    __table_args__ = (
        Index("ix_debts_client_status", "client_id", "status"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # RESTRICT: a client cannot be removed while it still owes anything
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)

    total_amount = Column(Numeric(12, 2), nullable=False)
    installment_amount = Column(Numeric(12, 2), nullable=False)

    # daily / weekly
    frequency = Column(String(10), nullable=False)
    start_date = Column(Date, nullable=False)

    # active / completed / cancelled
    status = Column(String(20), nullable=False, server_default="active", index=True)

    created_by = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    client = relationship("Client", back_populates="debts")
    payment_schedule = relationship(
        "PaymentSchedule",
        back_populates="debt",
        order_by="PaymentSchedule.installment_number",
        lazy="selectin",
    )
