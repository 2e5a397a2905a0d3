# pagadiario/schemas/client_schema.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


# Field rules (required, allowed characters) live in utils/validators.py so
# that form errors come back per field instead of as a pydantic 422.
class ClientCreate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None


class ClientUpdate(ClientCreate):
    pass


class ClientOut(BaseModel):
    id: str
    name: str
    address: str
    phone: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ClientWithDebtOut(BaseModel):
    id: str
    name: str
    address: str
    phone: Optional[str] = None
    total_active_debt: float
    pending_amount: float


class ClientCountOut(BaseModel):
    count: int
