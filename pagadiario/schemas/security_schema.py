# pagadiario/schemas/security_schema.py

from typing import Any, Dict, Optional

from pydantic import BaseModel


class SecurityLogEntryOut(BaseModel):
    timestamp: str
    level: str
    event: str
    user_id: Optional[str] = None
    user_role: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    path: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    success: Optional[bool] = None
