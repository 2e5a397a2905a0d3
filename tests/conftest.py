"""Shared test fixtures for the Paga Diario test suite."""

import os
import tempfile
from datetime import date
from decimal import Decimal

# must be set before anything from pagadiario is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["EVIDENCE_DIR"] = tempfile.mkdtemp(prefix="evidence-")

import pytest
from fastapi.testclient import TestClient

from main import app
from pagadiario.core.auth import create_access_token
from pagadiario.core.security_log import SecurityLogger
from pagadiario.models.client_model import Client
from pagadiario.models.profile_model import Profile
from pagadiario.services import debt_service, route_service
from pagadiario.utils.database import Base, SessionLocal, engine
from pagadiario.utils.storage import EvidenceStorage


@pytest.fixture(autouse=True)
def _schema():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def security_log():
    log = SecurityLogger(max_entries=200)
    app.state.security_log = log
    return log


@pytest.fixture
def storage(tmp_path):
    store = EvidenceStorage(tmp_path / "evidence", "/evidence")
    app.state.evidence_storage = store
    return store


@pytest.fixture
def api(security_log, storage):
    return TestClient(app)


@pytest.fixture
def admin(db) -> Profile:
    profile = Profile(email="admin@pagadiario.test", full_name="Ana Admin", role="admin")
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture
def collector(db) -> Profile:
    profile = Profile(email="cobrador@pagadiario.test", full_name="Carlos Cobrador", role="collector")
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def auth_headers(profile: Profile) -> dict:
    return {"Authorization": f"Bearer {create_access_token(profile.id, profile.role)}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def client_row(db, admin) -> Client:
    client = Client(name="Juan Pérez", address="Calle 10 #45, Centro", phone="+57 300-123-4567", created_by=admin.id)
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


@pytest.fixture
def debt(db, admin, client_row):
    """1000 paid 300 a day starting 2024-01-01."""
    result = debt_service.create_debt_with_schedule(
        db,
        {
            "client_id": client_row.id,
            "total_amount": Decimal("1000"),
            "installment_amount": Decimal("300"),
            "frequency": "daily",
            "start_date": date(2024, 1, 1),
        },
        admin,
    )
    assert result.success, result.error
    return result.data


@pytest.fixture
def route(db, admin, collector, client_row, debt):
    result = route_service.create_route(
        db,
        {"collector_id": collector.id, "route_date": date(2024, 1, 1), "client_ids": [client_row.id]},
        admin,
    )
    assert result.success, result.error
    return result.data


@pytest.fixture
def jpeg_photo():
    from pagadiario.services.payment_service import EvidencePhoto

    return EvidencePhoto(filename="recibo.jpg", content_type="image/jpeg", content=b"\xff\xd8\xff" + b"\x00" * 64)
