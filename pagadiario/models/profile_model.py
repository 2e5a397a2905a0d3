# pagadiario/models/profile_model.py
import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func

from pagadiario.utils.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(254), unique=True, nullable=False)
    full_name = Column(String(100), nullable=False)

    # admin / collector
    role = Column(String(20), nullable=False, server_default="collector", index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
