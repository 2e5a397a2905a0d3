# pagadiario/routers/debts_router.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from pagadiario.core.auth import require_admin
from pagadiario.core.security_log import SecurityLogger, get_security_log
from pagadiario.models.profile_model import Profile
from pagadiario.routers.deps import log_modification, unwrap
from pagadiario.schemas.debt_schema import (
    ClientDebtSummaryOut,
    DebtCreate,
    DebtStatusUpdate,
    DebtWithScheduleOut,
    OverdueInstallmentOut,
    OverdueUpdateResult,
    ScheduleItemOut,
    ScheduleStatusUpdate,
)
from pagadiario.services import debt_service
from pagadiario.utils.database import get_db

router = APIRouter(prefix="/debts", tags=["Debts"])


# =================================================
# 🔹 STATIC ROUTES (ALWAYS FIRST)
# =================================================
@router.get("/overdue", response_model=list[OverdueInstallmentOut])
def overdue_installments(
        request: Request,
        as_on: Optional[date] = Query(None),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(debt_service.get_overdue_payments(db, as_on), security_log, request, user)


@router.post("/overdue/refresh", response_model=OverdueUpdateResult)
def refresh_overdue(
        request: Request,
        as_on: Optional[date] = Query(None),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    updated = unwrap(debt_service.update_overdue_payments(db, as_on), security_log, request, user)
    return {"updated": updated}


@router.get("/summary", response_model=list[ClientDebtSummaryOut])
def client_debt_summary(
        request: Request,
        as_on: Optional[date] = Query(None),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(debt_service.get_client_debt_summary(db, as_on), security_log, request, user)


@router.patch("/schedule/{schedule_id}/status", response_model=ScheduleItemOut)
def update_installment_status(
        schedule_id: str,
        payload: ScheduleStatusUpdate,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    result = debt_service.update_payment_schedule_status(db, schedule_id, payload.status)
    item = unwrap(result, security_log, request, user)
    log_modification(security_log, request, user, "update_installment_status",
                     schedule_id=schedule_id, status=payload.status)
    return item


# =================================================
# 🔹 DEBTS
# =================================================
@router.post("", response_model=DebtWithScheduleOut, status_code=status.HTTP_201_CREATED)
def create_debt(
        payload: DebtCreate,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    result = debt_service.create_debt_with_schedule(db, payload.model_dump(), user)
    debt = unwrap(result, security_log, request, user)
    log_modification(security_log, request, user, "create_debt", debt_id=debt.id, client_id=debt.client_id)
    return debt


@router.get("", response_model=list[DebtWithScheduleOut])
def list_active_debts(
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(debt_service.get_all_active_debts_with_schedule(db), security_log, request, user)


@router.get("/{debt_id}", response_model=DebtWithScheduleOut)
def get_debt(
        debt_id: str,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(debt_service.get_debt(db, debt_id), security_log, request, user)


@router.patch("/{debt_id}/status", response_model=DebtWithScheduleOut)
def update_debt_status(
        debt_id: str,
        payload: DebtStatusUpdate,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    debt = unwrap(debt_service.update_debt_status(db, debt_id, payload.status), security_log, request, user)
    log_modification(security_log, request, user, "update_debt_status", debt_id=debt_id, status=payload.status)
    return debt


@router.get("/{debt_id}/schedule", response_model=list[ScheduleItemOut])
def get_schedule(
        debt_id: str,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(debt_service.get_debt_payment_schedule(db, debt_id), security_log, request, user)
