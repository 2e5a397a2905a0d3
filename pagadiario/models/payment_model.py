# pagadiario/models/payment_model.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, DateTime, Numeric, Text, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship

from pagadiario.utils.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        # one recorded outcome per visit
        UniqueConstraint("route_assignment_id", name="uq_payments_route_assignment"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    route_assignment_id = Column(
        String(36), ForeignKey("route_assignments.id", ondelete="CASCADE"), nullable=True
    )
    payment_schedule_id = Column(
        String(36), ForeignKey("payment_schedule.id", ondelete="SET NULL"), nullable=True, index=True
    )

    amount_paid = Column(Numeric(12, 2), nullable=True)

    # paid / not_paid / client_absent
    payment_status = Column(String(20), nullable=False, index=True)

    evidence_photo_url = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    recorded_by = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    recorded_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    route_assignment = relationship("RouteAssignment", back_populates="payment")
