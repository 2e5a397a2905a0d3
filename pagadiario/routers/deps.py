# pagadiario/routers/deps.py
"""Glue between service results and HTTP responses."""

from typing import Optional

from fastapi import HTTPException, Request, UploadFile

from pagadiario.core.config import MAX_EVIDENCE_BYTES
from pagadiario.core.security_log import SecurityEventType, SecurityLogLevel, SecurityLogger
from pagadiario.models.profile_model import Profile
from pagadiario.services.payment_service import EvidencePhoto
from pagadiario.services.result import (
    CONFLICT,
    FORBIDDEN,
    INVALID,
    NOT_FOUND,
    UNAUTHENTICATED,
    ServiceResult,
)

STATUS_BY_CODE = {
    NOT_FOUND: 404,
    CONFLICT: 409,
    FORBIDDEN: 403,
    INVALID: 422,
    UNAUTHENTICATED: 401,
}


def _context(request: Request, user: Optional[Profile]) -> dict:
    return {
        "user_id": user.id if user else None,
        "user_role": user.role if user else None,
        "ip": request.client.host if request.client else None,
        "path": request.url.path,
    }


def unwrap(
        result: ServiceResult,
        security_log: SecurityLogger,
        request: Request,
        user: Optional[Profile] = None,
):
    """Return result.data, or raise the HTTPException matching result.code."""
    if result.success:
        return result.data

    status_code = STATUS_BY_CODE.get(result.code, 500)

    if result.code == INVALID:
        security_log.log(
            SecurityLogLevel.INFO,
            SecurityEventType.INVALID_INPUT,
            details={"errors": result.data or {}},
            success=False,
            **_context(request, user),
        )
        raise HTTPException(status_code, detail={"message": result.error, "errors": result.data or {}})

    if result.code == FORBIDDEN:
        security_log.log(
            SecurityLogLevel.WARNING,
            SecurityEventType.UNAUTHORIZED_ACCESS,
            details={"reason": result.error},
            success=False,
            **_context(request, user),
        )

    raise HTTPException(status_code, detail=result.error)


def log_modification(
        security_log: SecurityLogger,
        request: Request,
        user: Profile,
        action: str,
        **details,
) -> None:
    security_log.log(
        SecurityLogLevel.INFO,
        SecurityEventType.DATA_MODIFICATION,
        details={"action": action, **details},
        success=True,
        **_context(request, user),
    )


def log_upload(security_log: SecurityLogger, request: Request, user: Profile, photo: EvidencePhoto) -> None:
    security_log.log(
        SecurityLogLevel.INFO,
        SecurityEventType.FILE_UPLOAD,
        details={"filename": photo.filename, "content_type": photo.content_type, "size": len(photo.content)},
        success=True,
        **_context(request, user),
    )


def photo_from_upload(upload: Optional[UploadFile]) -> Optional[EvidencePhoto]:
    if upload is None or not upload.filename:
        return None
    return EvidencePhoto(
        filename=upload.filename,
        content_type=upload.content_type or "",
        # one byte past the limit is enough to reject it
        content=upload.file.read(MAX_EVIDENCE_BYTES + 1),
    )
