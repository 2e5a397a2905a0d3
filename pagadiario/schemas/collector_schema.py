# pagadiario/schemas/collector_schema.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CollectorCreate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None


class CollectorUpdate(CollectorCreate):
    pass


class ProfileMiniOut(BaseModel):
    id: str
    full_name: str
    email: str

    class Config:
        from_attributes = True


class ProfileOut(ProfileMiniOut):
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CollectorStatsOut(BaseModel):
    total_routes: int
    completed_routes: int
    total_collected: float
    average_collection_rate: float
