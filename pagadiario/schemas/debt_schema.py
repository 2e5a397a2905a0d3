# pagadiario/schemas/debt_schema.py

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class DebtCreate(BaseModel):
    client_id: Optional[str] = None
    total_amount: Optional[Decimal] = None
    installment_amount: Optional[Decimal] = None
    frequency: Optional[str] = None
    start_date: Optional[date] = None


class DebtStatusUpdate(BaseModel):
    status: str


class ScheduleStatusUpdate(BaseModel):
    status: str


class ScheduleItemOut(BaseModel):
    id: str
    debt_id: str
    installment_number: int
    due_date: date
    amount: float
    status: str

    class Config:
        from_attributes = True


class ClientMiniOut(BaseModel):
    id: str
    name: str
    address: str
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class DebtOut(BaseModel):
    id: str
    client_id: str
    total_amount: float
    installment_amount: float
    frequency: str
    start_date: date
    status: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DebtWithScheduleOut(DebtOut):
    client: Optional[ClientMiniOut] = None
    payment_schedule: List[ScheduleItemOut] = []


class OverdueInstallmentOut(BaseModel):
    id: str
    debt_id: str
    installment_number: int
    due_date: date
    amount: float
    status: str
    client_id: str
    client_name: str
    client_address: str
    client_phone: Optional[str] = None


class DebtSummaryOut(BaseModel):
    total_debts: int
    active_debts: int
    total_active_debt: float
    pending_amount: float
    overdue_amount: float
    paid_amount: float


class ClientDebtSummaryOut(BaseModel):
    client_id: str
    client_name: str
    address: str
    phone: Optional[str] = None
    total_debts: int
    active_debts: int
    total_active_debt: float
    pending_amount: float


class OverdueUpdateResult(BaseModel):
    updated: int
