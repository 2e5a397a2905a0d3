# pagadiario/schemas/report_schema.py

from datetime import date
from typing import Optional

from pydantic import BaseModel


class DailyCollectionSummaryOut(BaseModel):
    route_id: str
    route_date: date
    collector_id: str
    collector_name: Optional[str] = None
    total_clients: int
    clients_paid: int
    clients_not_paid: int
    clients_absent: int
    total_collected: float
    total_expected: float


class PaymentsByStatusOut(BaseModel):
    payment_status: str
    count: int
    total_amount: float


class CollectorPerformanceOut(BaseModel):
    collector_id: str
    collector_name: Optional[str] = None
    total_routes: int
    total_clients: int
    clients_paid: int
    collection_rate: float
    total_collected: float


class TotalMetricsOut(BaseModel):
    total_clients: int
    clients_paid: int
    clients_not_paid: int
    clients_absent: int
    total_collected: float
    total_expected: float
    collection_rate: float
    collection_efficiency: float
