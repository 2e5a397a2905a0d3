import io

from fastapi import UploadFile
from sqlalchemy.exc import OperationalError
from starlette.datastructures import Headers

from pagadiario.core.auth import create_access_token
from pagadiario.core.config import MAX_EVIDENCE_BYTES
from pagadiario.core.security_log import SecurityEventType
from pagadiario.routers.deps import photo_from_upload


def _events(security_log):
    return [e.event for e in security_log.get_recent_logs()]


def test_root(api):
    assert api.get("/").json() == {"message": "Paga Diario Backend is running!!"}


def test_missing_token_is_401_and_logged(api, security_log):
    response = api.get("/clients")

    assert response.status_code == 401
    assert _events(security_log) == [SecurityEventType.UNAUTHORIZED_ACCESS]


def test_garbage_token_is_401(api):
    response = api.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_unknown_profile_is_403(api):
    token = create_access_token("123e4567-e89b-42d3-a456-426614174000", "admin")
    headers = {"Authorization": f"Bearer {token}"}
    assert api.get("/auth/me", headers=headers).status_code == 403


def test_me(headers_for, api, collector):
    body = api.get("/auth/me", headers=headers_for(collector)).json()

    assert body["id"] == collector.id
    assert body["role"] == "collector"


def test_profile_lookup_outage_is_503(headers_for, api, collector, security_log, monkeypatch):
    def _down(db, profile_id):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr("pagadiario.core.auth._load_profile", _down)

    response = api.get("/auth/me", headers=headers_for(collector))

    assert response.status_code == 503
    assert _events(security_log) == [SecurityEventType.LOGIN_FAILURE]


def test_collector_cannot_reach_admin_routes(headers_for, api, collector, security_log):
    response = api.get("/clients", headers=headers_for(collector))

    assert response.status_code == 403
    assert response.json()["detail"] == "Access denied. Required role: admin"
    (entry,) = security_log.get_recent_logs()
    assert entry.event == SecurityEventType.ROLE_VIOLATION
    assert entry.user_id == collector.id
    assert entry.path == "/clients"


def test_admin_creates_client_and_debt(headers_for, api, admin, security_log):
    headers = headers_for(admin)

    client = api.post(
        "/clients",
        json={"name": "Juan Pérez", "address": "Calle 10 #45", "phone": "300 123 4567"},
        headers=headers,
    )
    assert client.status_code == 201
    client_id = client.json()["id"]

    debt = api.post(
        "/debts",
        json={
            "client_id": client_id,
            "total_amount": "1000",
            "installment_amount": "300",
            "frequency": "daily",
            "start_date": "2024-01-01",
        },
        headers=headers,
    )
    assert debt.status_code == 201
    body = debt.json()
    assert [i["amount"] for i in body["payment_schedule"]] == [300.0, 300.0, 300.0, 100.0]
    assert body["payment_schedule"][-1]["due_date"] == "2024-01-04"
    assert body["client"]["name"] == "Juan Pérez"

    assert api.get("/clients/count", headers=headers).json() == {"count": 1}
    assert SecurityEventType.DATA_MODIFICATION in _events(security_log)


def test_invalid_client_is_422_with_field_errors(headers_for, api, admin, security_log):
    response = api.post("/clients", json={"name": "", "address": "Calle 1"}, headers=headers_for(admin))

    assert response.status_code == 422
    assert response.json()["detail"]["errors"] == {"name": "Name is required"}
    assert _events(security_log) == [SecurityEventType.INVALID_INPUT]


def test_unknown_client_is_404(headers_for, api, admin):
    response = api.get("/clients/123e4567-e89b-42d3-a456-426614174000", headers=headers_for(admin))
    assert response.status_code == 404


def test_collector_records_payment_with_photo(headers_for, api, collector, route, security_log, storage):
    assignment_id = route.assignments[0].id
    headers = headers_for(collector)

    response = api.post(
        "/payments",
        data={"route_assignment_id": assignment_id, "payment_status": "paid", "amount_paid": "300"},
        files={"evidence_photo": ("recibo.jpg", b"\xff\xd8\xff\x00", "image/jpeg")},
        headers=headers,
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["amount_paid"] == 300.0
    assert body["evidence_photo_url"].startswith("/evidence/")
    assert SecurityEventType.FILE_UPLOAD in _events(security_log)

    again = api.post(
        "/payments",
        data={"route_assignment_id": assignment_id, "payment_status": "not_paid"},
        headers=headers,
    )
    assert again.status_code == 409

    daily = api.get("/routes/my/daily", params={"route_date": "2024-01-01"}, headers=headers).json()
    assert daily[0]["payment_status"] == "paid"


def test_payment_rejects_bad_photo_type(headers_for, api, collector, route):
    response = api.post(
        "/payments",
        data={"route_assignment_id": route.assignments[0].id, "payment_status": "not_paid"},
        files={"evidence_photo": ("nota.txt", b"hola", "text/plain")},
        headers=headers_for(collector),
    )

    assert response.status_code == 422
    assert "evidence_photo" in response.json()["detail"]["errors"]


def test_upload_is_read_only_up_to_the_limit():
    upload = UploadFile(
        file=io.BytesIO(b"\xff" * (MAX_EVIDENCE_BYTES + 4096)),
        filename="grande.jpg",
        headers=Headers({"content-type": "image/jpeg"}),
    )

    photo = photo_from_upload(upload)

    assert len(photo.content) == MAX_EVIDENCE_BYTES + 1
    assert photo.content_type == "image/jpeg"


def test_oversized_photo_is_rejected(headers_for, api, collector, route, storage):
    response = api.post(
        "/payments",
        data={"route_assignment_id": route.assignments[0].id, "payment_status": "not_paid"},
        files={"evidence_photo": ("grande.jpg", b"\xff" * (MAX_EVIDENCE_BYTES + 10), "image/jpeg")},
        headers=headers_for(collector),
    )

    assert response.status_code == 422
    assert "evidence_photo" in response.json()["detail"]["errors"]
    assert not storage.directory.exists() or list(storage.directory.iterdir()) == []


def test_collector_cannot_open_another_route(headers_for, api, db, route):
    from pagadiario.models.profile_model import Profile

    other = Profile(email="otro@pagadiario.test", full_name="Otro Cobrador", role="collector")
    db.add(other)
    db.commit()

    response = api.get(f"/routes/{route.id}", headers=headers_for(other))
    assert response.status_code == 403


def test_security_logs_admin_only(headers_for, api, admin, collector, security_log):
    api.get("/clients", headers=headers_for(collector))

    logs = api.get("/security/logs", params={"limit": 5}, headers=headers_for(admin)).json()
    assert logs[0]["event"] == "ROLE_VIOLATION"

    assert api.delete("/security/logs", headers=headers_for(admin)).status_code == 200
    assert len(security_log) == 0
