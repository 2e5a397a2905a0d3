# pagadiario/schemas/route_schema.py

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel

from pagadiario.schemas.collector_schema import ProfileMiniOut
from pagadiario.schemas.debt_schema import ClientMiniOut


class RouteCreate(BaseModel):
    collector_id: Optional[str] = None
    route_date: Optional[date] = None
    client_ids: List[str] = []


class RouteStatusUpdate(BaseModel):
    status: str


class RouteAssignmentOut(BaseModel):
    id: str
    client_id: str
    payment_schedule_id: Optional[str] = None
    visit_order: Optional[int] = None
    client: Optional[ClientMiniOut] = None

    class Config:
        from_attributes = True


class RouteOut(BaseModel):
    id: str
    collector_id: str
    route_date: date
    status: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    collector: Optional[ProfileMiniOut] = None
    assignments: List[RouteAssignmentOut] = []

    class Config:
        from_attributes = True


class CollectorDailyRouteRowOut(BaseModel):
    route_assignment_id: str
    client_id: str
    client_name: str
    client_address: str
    client_phone: Optional[str] = None
    payment_schedule_id: Optional[str] = None
    amount_due: Optional[float] = None
    visit_order: Optional[int] = None
    payment_status: str
