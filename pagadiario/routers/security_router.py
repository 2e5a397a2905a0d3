# pagadiario/routers/security_router.py
from fastapi import APIRouter, Depends, Query

from pagadiario.core.auth import require_admin
from pagadiario.core.security_log import SecurityLogger, get_security_log
from pagadiario.models.profile_model import Profile
from pagadiario.schemas.security_schema import SecurityLogEntryOut

router = APIRouter(prefix="/security", tags=["Security"])


@router.get("/logs", response_model=list[SecurityLogEntryOut])
def recent_logs(
        limit: int = Query(100, ge=1, le=1000),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return [e.to_dict() for e in security_log.get_recent_logs(limit)]


@router.delete("/logs")
def clear_logs(
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    security_log.clear_logs()
    return {"message": "Security logs cleared"}
