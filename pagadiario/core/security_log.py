# pagadiario/core/security_log.py
"""
In-memory security audit trail.

One SecurityLogger instance is created per application (see main.py), kept
on ``app.state`` and handed to request handlers through ``get_security_log``.
Entries live in a bounded buffer: once ``max_entries`` is reached the oldest
entries are dropped. Nothing is persisted across restarts; every event is
also written to loguru so log shipping keeps a durable copy.
"""

import json
import threading
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi import Request
from loguru import logger

from pagadiario.core.config import SECURITY_LOG_MAX_ENTRIES


class SecurityLogLevel(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SecurityEventType(str, Enum):
    LOGIN_ATTEMPT = "LOGIN_ATTEMPT"
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILURE = "LOGIN_FAILURE"
    LOGOUT = "LOGOUT"
    UNAUTHORIZED_ACCESS = "UNAUTHORIZED_ACCESS"
    ROLE_VIOLATION = "ROLE_VIOLATION"
    INVALID_INPUT = "INVALID_INPUT"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    SUSPICIOUS_ACTIVITY = "SUSPICIOUS_ACTIVITY"
    DATA_ACCESS = "DATA_ACCESS"
    DATA_MODIFICATION = "DATA_MODIFICATION"
    FILE_UPLOAD = "FILE_UPLOAD"


@dataclass
class SecurityLogEntry:
    timestamp: str
    level: SecurityLogLevel
    event: SecurityEventType
    user_id: Optional[str] = None
    user_role: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    path: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    success: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["level"] = self.level.value
        d["event"] = self.event.value
        return d


class SecurityLogger:
    def __init__(self, max_entries: int = SECURITY_LOG_MAX_ENTRIES):
        if max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        self.max_entries = max_entries
        self._entries: deque = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def log(
            self,
            level: SecurityLogLevel,
            event: SecurityEventType,
            *,
            user_id: Optional[str] = None,
            user_role: Optional[str] = None,
            ip: Optional[str] = None,
            user_agent: Optional[str] = None,
            path: Optional[str] = None,
            details: Optional[Dict[str, Any]] = None,
            success: Optional[bool] = None,
    ) -> SecurityLogEntry:
        entry = SecurityLogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=SecurityLogLevel(level),
            event=SecurityEventType(event),
            user_id=user_id,
            user_role=user_role,
            ip=ip,
            user_agent=user_agent,
            path=path,
            details=details,
            success=success,
        )

        # uvicorn runs sync handlers in a threadpool
        with self._lock:
            self._entries.append(entry)

        logger.log(
            entry.level.value,
            "[SECURITY] {} - user={} path={} details={}",
            entry.event.value,
            user_id or "anonymous",
            path or "-",
            json.dumps(details or {}, default=str),
        )
        return entry

    def get_recent_logs(self, limit: int = 100) -> List[SecurityLogEntry]:
        if limit <= 0:
            return []
        with self._lock:
            entries = list(self._entries)
        return entries[-limit:]

    def clear_logs(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def get_security_log(request: Request) -> SecurityLogger:
    return request.app.state.security_log
