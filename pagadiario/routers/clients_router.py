# pagadiario/routers/clients_router.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from pagadiario.core.auth import require_admin
from pagadiario.core.security_log import SecurityLogger, get_security_log
from pagadiario.models.profile_model import Profile
from pagadiario.routers.deps import log_modification, unwrap
from pagadiario.schemas.client_schema import (
    ClientCountOut,
    ClientCreate,
    ClientOut,
    ClientUpdate,
    ClientWithDebtOut,
)
from pagadiario.schemas.debt_schema import DebtSummaryOut, DebtWithScheduleOut
from pagadiario.services import client_service, debt_service
from pagadiario.utils.database import get_db

router = APIRouter(prefix="/clients", tags=["Clients"])


# =================================================
# 🔹 STATIC ROUTES (ALWAYS FIRST)
# =================================================
@router.get("/count", response_model=ClientCountOut)
def clients_count(db: Session = Depends(get_db), user: Profile = Depends(require_admin)):
    result = client_service.get_clients_count(db)
    return {"count": result.data}


@router.get("/with-active-debts", response_model=list[ClientWithDebtOut])
def clients_with_active_debts(
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(client_service.get_clients_with_active_debts(db), security_log, request, user)


# =================================================
# 🔹 CRUD
# =================================================
@router.get("", response_model=list[ClientOut])
def list_clients(
        request: Request,
        search: Optional[str] = Query(None, description="Match on name, address or phone"),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(client_service.get_clients(db, search), security_log, request, user)


@router.get("/{client_id}", response_model=ClientOut)
def get_client(
        client_id: str,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(client_service.get_client(db, client_id), security_log, request, user)


@router.post("", response_model=ClientOut, status_code=status.HTTP_201_CREATED)
def create_client(
        payload: ClientCreate,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    client = unwrap(client_service.create_client(db, payload.model_dump(), user), security_log, request, user)
    log_modification(security_log, request, user, "create_client", client_id=client.id)
    return client


@router.put("/{client_id}", response_model=ClientOut)
def update_client(
        client_id: str,
        payload: ClientUpdate,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    result = client_service.update_client(db, client_id, payload.model_dump(exclude_unset=True))
    client = unwrap(result, security_log, request, user)
    log_modification(security_log, request, user, "update_client", client_id=client_id)
    return client


@router.delete("/{client_id}")
def delete_client(
        client_id: str,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    unwrap(client_service.delete_client(db, client_id), security_log, request, user)
    log_modification(security_log, request, user, "delete_client", client_id=client_id)
    return {"message": "Client deleted successfully"}


# =================================================
# 🔹 DEBTS OF A CLIENT
# =================================================
@router.get("/{client_id}/debts", response_model=list[DebtWithScheduleOut])
def client_debts(
        client_id: str,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(debt_service.get_client_debts_with_schedule(db, client_id), security_log, request, user)


@router.get("/{client_id}/debt-summary", response_model=DebtSummaryOut)
def client_debt_summary(
        client_id: str,
        request: Request,
        as_on: Optional[date] = Query(None),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    result = debt_service.calculate_client_debt_summary(db, client_id, as_on)
    return unwrap(result, security_log, request, user)
