import pytest

from pagadiario.core.security_log import SecurityEventType, SecurityLogLevel, SecurityLogger


def _log(logger, n):
    for i in range(n):
        logger.log(SecurityLogLevel.INFO, SecurityEventType.DATA_ACCESS, details={"i": i})


def test_entries_are_bounded_and_oldest_dropped():
    log = SecurityLogger(max_entries=3)
    _log(log, 5)

    assert len(log) == 3
    assert [e.details["i"] for e in log.get_recent_logs()] == [2, 3, 4]


def test_recent_logs_limit():
    log = SecurityLogger(max_entries=10)
    _log(log, 6)

    assert [e.details["i"] for e in log.get_recent_logs(2)] == [4, 5]
    assert log.get_recent_logs(0) == []
    assert len(log.get_recent_logs(100)) == 6


def test_clear_logs():
    log = SecurityLogger(max_entries=10)
    _log(log, 2)
    log.clear_logs()

    assert log.get_recent_logs() == []


def test_entry_fields_and_dict():
    log = SecurityLogger(max_entries=10)
    entry = log.log(
        "WARNING",
        "UNAUTHORIZED_ACCESS",
        user_id="abc",
        ip="10.0.0.1",
        path="/payments",
        success=False,
    )

    assert entry.level is SecurityLogLevel.WARNING
    assert entry.timestamp
    d = entry.to_dict()
    assert d["event"] == "UNAUTHORIZED_ACCESS"
    assert d["level"] == "WARNING"
    assert d["ip"] == "10.0.0.1"


def test_unknown_event_rejected():
    with pytest.raises(ValueError):
        SecurityLogger(5).log(SecurityLogLevel.INFO, "NOT_AN_EVENT")


def test_max_entries_must_be_positive():
    with pytest.raises(ValueError):
        SecurityLogger(0)
