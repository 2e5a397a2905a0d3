# pagadiario/schemas/payment_schema.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class PaymentOut(BaseModel):
    id: str
    route_assignment_id: Optional[str] = None
    payment_schedule_id: Optional[str] = None
    amount_paid: Optional[float] = None
    payment_status: str
    evidence_photo_url: Optional[str] = None
    notes: Optional[str] = None
    recorded_by: Optional[str] = None
    recorded_at: datetime

    class Config:
        from_attributes = True
