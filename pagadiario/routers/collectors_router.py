# pagadiario/routers/collectors_router.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from pagadiario.core.auth import require_admin
from pagadiario.core.security_log import SecurityLogger, get_security_log
from pagadiario.models.profile_model import Profile
from pagadiario.routers.deps import log_modification, unwrap
from pagadiario.schemas.collector_schema import (
    CollectorCreate,
    CollectorStatsOut,
    CollectorUpdate,
    ProfileOut,
)
from pagadiario.services import collector_service
from pagadiario.utils.database import get_db

router = APIRouter(prefix="/collectors", tags=["Collectors"])


@router.get("", response_model=list[ProfileOut])
def list_collectors(
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(collector_service.get_all_collectors(db), security_log, request, user)


@router.get("/{collector_id}", response_model=ProfileOut)
def get_collector(
        collector_id: str,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(collector_service.get_collector(db, collector_id), security_log, request, user)


@router.post("", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
def create_collector(
        payload: CollectorCreate,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    result = collector_service.create_collector(db, payload.model_dump(), user)
    collector = unwrap(result, security_log, request, user)
    log_modification(security_log, request, user, "create_collector", collector_id=collector.id)
    return collector


@router.put("/{collector_id}", response_model=ProfileOut)
def update_collector(
        collector_id: str,
        payload: CollectorUpdate,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    result = collector_service.update_collector(db, collector_id, payload.model_dump(exclude_unset=True))
    collector = unwrap(result, security_log, request, user)
    log_modification(security_log, request, user, "update_collector", collector_id=collector_id)
    return collector


@router.delete("/{collector_id}")
def delete_collector(
        collector_id: str,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    unwrap(collector_service.delete_collector(db, collector_id), security_log, request, user)
    log_modification(security_log, request, user, "delete_collector", collector_id=collector_id)
    return {"message": "Collector deleted successfully"}


@router.get("/{collector_id}/stats", response_model=CollectorStatsOut)
def collector_stats(
        collector_id: str,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(collector_service.get_collector_stats(db, collector_id), security_log, request, user)
