from enum import Enum
from typing import Optional, Union

from pagadiario.core.exceptions import AccessDeniedError
from pagadiario.core.security_log import SecurityEventType, SecurityLogLevel, SecurityLogger


class Role(str, Enum):
    ADMIN = "admin"
    COLLECTOR = "collector"


# role -> every role it satisfies (reflexive)
ROLE_GRANTS = {
    Role.ADMIN: frozenset({Role.ADMIN, Role.COLLECTOR}),
    Role.COLLECTOR: frozenset({Role.COLLECTOR}),
}


def has_permission(user_role: Union[Role, str], required_role: Union[Role, str]) -> bool:
    """True when `user_role` is at or above `required_role`."""
    try:
        user_role = Role(user_role)
        required_role = Role(required_role)
    except ValueError:
        return False
    return required_role in ROLE_GRANTS[user_role]


def require_role(
        user_role: Optional[Union[Role, str]],
        required_role: Union[Role, str],
        security_log: Optional[SecurityLogger] = None,
        **context,
) -> None:
    if not user_role:
        raise AccessDeniedError("User role not found")

    if not has_permission(user_role, required_role):
        required = Role(required_role).value
        actual = getattr(user_role, "value", user_role)
        if security_log is not None:
            security_log.log(
                SecurityLogLevel.WARNING,
                SecurityEventType.ROLE_VIOLATION,
                user_role=actual,
                details={"required_role": required, "actual_role": actual},
                success=False,
                **context,
            )
        raise AccessDeniedError(f"Access denied. Required role: {required}")
