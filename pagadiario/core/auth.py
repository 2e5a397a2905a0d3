# pagadiario/core/auth.py
"""
Bearer-token authentication and role gating.

Tokens are HS256 JWTs issued by the auth provider; ``sub`` carries the
profile id. The role always comes from the ``profiles`` row, never from the
token, so demoting a user takes effect immediately.

Usage in routes:
    @router.get("/clients")
    def list_clients(user: Profile = Depends(require_roles(Role.ADMIN))):
        ...
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from loguru import logger
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from pagadiario.core.config import (
    AUTH_MAX_RETRIES,
    AUTH_RETRY_BASE_DELAY,
    JWT_ALGO,
    JWT_EXPIRE_MINUTES,
    JWT_SECRET,
)
from pagadiario.core.exceptions import AccessDeniedError
from pagadiario.core.roles import Role, require_role
from pagadiario.core.security_log import (
    SecurityEventType,
    SecurityLogLevel,
    SecurityLogger,
    get_security_log,
)
from pagadiario.models.profile_model import Profile
from pagadiario.utils.database import get_db
from pagadiario.utils.retry import retry_with_backoff

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(profile_id: str, role: str, expires_minutes: int = JWT_EXPIRE_MINUTES) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    payload = {
        "sub": str(profile_id),
        "role": role,
        "type": "access",
        "exp": expire,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGO)


def decode_access_token(token: str) -> Optional[str]:
    """Return the profile id carried by `token`, or None if it is not valid."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGO])
    except JWTError:
        return None
    return payload.get("sub")


def _client_info(request: Request) -> dict:
    return {
        "ip": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
        "path": request.url.path,
    }


def _load_profile(db: Session, profile_id: str) -> Optional[Profile]:
    def _get():
        try:
            return db.get(Profile, profile_id)
        except OperationalError:
            db.rollback()
            raise

    return retry_with_backoff(
        _get,
        max_retries=AUTH_MAX_RETRIES,
        base_delay=AUTH_RETRY_BASE_DELAY,
        retry_on=(OperationalError,),
    )


def get_current_user(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        db: Session = Depends(get_db),
        security_log: SecurityLogger = Depends(get_security_log),
) -> Profile:
    info = _client_info(request)

    profile_id = decode_access_token(credentials.credentials) if credentials else None
    if not profile_id:
        security_log.log(
            SecurityLogLevel.WARNING,
            SecurityEventType.UNAUTHORIZED_ACCESS,
            details={"reason": "missing or invalid token"},
            success=False,
            **info,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        profile = _load_profile(db, profile_id)
    except OperationalError:
        logger.exception("Profile lookup failed for {}", profile_id)
        security_log.log(
            SecurityLogLevel.ERROR,
            SecurityEventType.LOGIN_FAILURE,
            user_id=profile_id,
            details={"reason": "network error"},
            success=False,
            **info,
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Connection error. Check your network connection and try again.",
        )

    if not profile:
        security_log.log(
            SecurityLogLevel.WARNING,
            SecurityEventType.UNAUTHORIZED_ACCESS,
            user_id=profile_id,
            details={"reason": "unknown profile"},
            success=False,
            **info,
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User without access to the system")

    request.state.profile = profile
    return profile


def require_roles(required: Role):
    """Dependency factory: the current user must satisfy `required`."""

    def dependency(
            request: Request,
            user: Profile = Depends(get_current_user),
            security_log: SecurityLogger = Depends(get_security_log),
    ) -> Profile:
        try:
            require_role(user.role, required, security_log, user_id=user.id, **_client_info(request))
        except AccessDeniedError as e:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
        return user

    return dependency


require_admin = require_roles(Role.ADMIN)
require_collector = require_roles(Role.COLLECTOR)
