# pagadiario/models/route_model.py
import uuid

from sqlalchemy import (
    Column, String, Integer, Date, DateTime, ForeignKey, UniqueConstraint
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from pagadiario.utils.database import Base


class Route(Base):
    __tablename__ = "routes"
    __table_args__ = (
        UniqueConstraint("collector_id", "route_date", name="uq_routes_collector_date"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    collector_id = Column(String(36), ForeignKey("profiles.id", ondelete="RESTRICT"), nullable=False, index=True)
    route_date = Column(Date, nullable=False, index=True)

    # pending / in_progress / completed
    status = Column(String(20), nullable=False, server_default="pending")

    created_by = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    collector = relationship("Profile", foreign_keys=[collector_id])
    assignments = relationship(
        "RouteAssignment",
        back_populates="route",
        cascade="all, delete-orphan",
        order_by="RouteAssignment.visit_order",
        lazy="selectin",
        passive_deletes=True,
    )


class RouteAssignment(Base):
    __tablename__ = "route_assignments"
    __table_args__ = (
        UniqueConstraint("route_id", "client_id", name="uq_route_assignment_client"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    route_id = Column(String(36), ForeignKey("routes.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)

    # installment due on the route date (if any)
    payment_schedule_id = Column(String(36), ForeignKey("payment_schedule.id", ondelete="SET NULL"), nullable=True)
    visit_order = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    route = relationship("Route", back_populates="assignments")
    client = relationship("Client", lazy="joined")
    payment_schedule = relationship("PaymentSchedule")
    payment = relationship("Payment", back_populates="route_assignment", uselist=False)
