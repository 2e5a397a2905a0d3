import pytest

from pagadiario.core.exceptions import AccessDeniedError
from pagadiario.core.roles import Role, has_permission, require_role
from pagadiario.core.security_log import SecurityEventType, SecurityLogger


@pytest.mark.parametrize(
    "user_role, required, expected",
    [
        ("admin", "admin", True),
        ("admin", "collector", True),
        ("collector", "collector", True),
        ("collector", "admin", False),
        (Role.ADMIN, Role.COLLECTOR, True),
        ("superuser", "collector", False),
        ("collector", "superuser", False),
    ],
)
def test_has_permission(user_role, required, expected):
    assert has_permission(user_role, required) is expected


def test_require_role_passes_silently():
    log = SecurityLogger(10)
    require_role("admin", "collector", log)
    assert len(log) == 0


def test_require_role_missing_role():
    with pytest.raises(AccessDeniedError, match="User role not found"):
        require_role(None, "collector")


def test_require_role_logs_violation():
    log = SecurityLogger(10)

    with pytest.raises(AccessDeniedError, match="Access denied. Required role: admin"):
        require_role("collector", "admin", log, user_id="u-1", path="/clients")

    (entry,) = log.get_recent_logs()
    assert entry.event == SecurityEventType.ROLE_VIOLATION
    assert entry.success is False
    assert entry.user_id == "u-1"
    assert entry.details == {"required_role": "admin", "actual_role": "collector"}
