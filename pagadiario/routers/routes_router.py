# pagadiario/routers/routes_router.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from pagadiario.core.auth import require_admin, require_collector
from pagadiario.core.roles import Role
from pagadiario.core.security_log import SecurityLogger, get_security_log
from pagadiario.models.profile_model import Profile
from pagadiario.routers.deps import log_modification, unwrap
from pagadiario.schemas.route_schema import (
    CollectorDailyRouteRowOut,
    RouteCreate,
    RouteOut,
    RouteStatusUpdate,
)
from pagadiario.services import route_service
from pagadiario.utils.database import get_db

router = APIRouter(prefix="/routes", tags=["Routes"])


# =================================================
# 🔹 STATIC ROUTES (ALWAYS FIRST)
# =================================================
@router.get("/my/daily", response_model=list[CollectorDailyRouteRowOut])
def my_daily_route(
        request: Request,
        route_date: Optional[date] = Query(None),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_collector),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(route_service.get_collector_daily_route(db, user.id, route_date), security_log, request, user)


@router.get("/collector/{collector_id}/daily", response_model=list[CollectorDailyRouteRowOut])
def collector_daily_route(
        collector_id: str,
        request: Request,
        route_date: Optional[date] = Query(None),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    result = route_service.get_collector_daily_route(db, collector_id, route_date)
    return unwrap(result, security_log, request, user)


# =================================================
# 🔹 ROUTES
# =================================================
@router.post("", response_model=RouteOut, status_code=status.HTTP_201_CREATED)
def create_route(
        payload: RouteCreate,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    route = unwrap(route_service.create_route(db, payload.model_dump(), user), security_log, request, user)
    log_modification(security_log, request, user, "create_route", route_id=route.id,
                     collector_id=route.collector_id)
    return route


@router.get("", response_model=list[RouteOut])
def list_routes(
        request: Request,
        collector_id: Optional[str] = Query(None),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(route_service.get_all_routes(db, collector_id), security_log, request, user)


@router.get("/{route_id}", response_model=RouteOut)
def get_route(
        route_id: str,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_collector),
        security_log: SecurityLogger = Depends(get_security_log),
):
    route = unwrap(route_service.get_route(db, route_id), security_log, request, user)
    if user.role != Role.ADMIN.value and route.collector_id != user.id:
        raise HTTPException(403, "This route is not assigned to you")
    return route


@router.patch("/{route_id}/status", response_model=RouteOut)
def update_route_status(
        route_id: str,
        payload: RouteStatusUpdate,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_collector),
        security_log: SecurityLogger = Depends(get_security_log),
):
    current = unwrap(route_service.get_route(db, route_id), security_log, request, user)
    if user.role != Role.ADMIN.value and current.collector_id != user.id:
        raise HTTPException(403, "This route is not assigned to you")

    route = unwrap(route_service.update_route_status(db, route_id, payload.status), security_log, request, user)
    log_modification(security_log, request, user, "update_route_status", route_id=route_id, status=payload.status)
    return route


@router.delete("/{route_id}")
def delete_route(
        route_id: str,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    unwrap(route_service.delete_route(db, route_id), security_log, request, user)
    log_modification(security_log, request, user, "delete_route", route_id=route_id)
    return {"message": "Route deleted successfully"}
