from datetime import datetime, timedelta, timezone

import pytest

from pagadiario.models.client_model import Client
from pagadiario.models.payment_model import Payment
from pagadiario.models.payment_schedule_model import PaymentSchedule
from pagadiario.models.profile_model import Profile
from pagadiario.services import debt_service, payment_service
from pagadiario.services.payment_service import EvidencePhoto
from pagadiario.services.result import CONFLICT, FORBIDDEN, INVALID, NOT_FOUND


@pytest.fixture
def assignment(route):
    return route.assignments[0]


@pytest.fixture
def other_collector(db):
    profile = Profile(email="otro@pagadiario.test", full_name="Otro Cobrador", role="collector")
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def _paid(assignment, amount="300"):
    return {"route_assignment_id": assignment.id, "payment_status": "paid", "amount_paid": amount}


def _photo_files(storage):
    return list(storage.directory.iterdir()) if storage.directory.exists() else []


def test_route_links_current_installment(assignment, debt):
    assert assignment.payment_schedule_id == debt.payment_schedule[0].id
    assert assignment.visit_order == 1


def test_record_paid_marks_installment(db, collector, storage, assignment, jpeg_photo):
    result = payment_service.record_payment(db, _paid(assignment), collector, storage, jpeg_photo)

    assert result.success, result.error
    payment = result.data
    assert payment.payment_schedule_id == assignment.payment_schedule_id
    assert payment.evidence_photo_url.startswith("/evidence/")
    assert payment.evidence_photo_url.endswith("-recibo.jpg")
    assert len(_photo_files(storage)) == 1
    assert db.get(PaymentSchedule, assignment.payment_schedule_id).status == "paid"


def test_duplicate_payment_is_conflict_and_photo_removed(db, collector, storage, assignment, jpeg_photo):
    first = payment_service.record_payment(db, _paid(assignment), collector, storage)
    assert first.success

    second = payment_service.record_payment(
        db,
        {"route_assignment_id": assignment.id, "payment_status": "client_absent"},
        collector,
        storage,
        jpeg_photo,
    )

    assert second.code == CONFLICT
    assert second.error == "A payment record already exists for this visit"
    assert _photo_files(storage) == []
    assert db.query(Payment).count() == 1


def test_unpaid_outcome_leaves_installment_pending(db, collector, storage, assignment):
    result = payment_service.record_payment(
        db,
        {"route_assignment_id": assignment.id, "payment_status": "not_paid", "notes": "  Volver <mañana>  "},
        collector,
        storage,
    )

    assert result.data.amount_paid is None
    assert result.data.notes == "Volver mañana"
    assert db.get(PaymentSchedule, assignment.payment_schedule_id).status == "pending"


def test_record_payment_rejects_bad_input(db, collector, storage, assignment):
    result = payment_service.record_payment(db, _paid(assignment, amount="0"), collector, storage)
    assert result.code == INVALID
    assert "amount_paid" in result.data

    bad_photo = EvidencePhoto(filename="virus.exe", content_type="application/octet-stream", content=b"MZ")
    result = payment_service.record_payment(db, _paid(assignment), collector, storage, bad_photo)
    assert result.code == INVALID
    assert _photo_files(storage) == []


def test_record_payment_on_someone_elses_route(db, other_collector, storage, assignment):
    result = payment_service.record_payment(db, _paid(assignment), other_collector, storage)
    assert result.code == FORBIDDEN


def test_record_payment_unknown_assignment(db, collector, storage):
    result = payment_service.record_payment(
        db,
        {"route_assignment_id": "123e4567-e89b-42d3-a456-426614174000", "payment_status": "not_paid"},
        collector,
        storage,
    )
    assert result.code == NOT_FOUND


def test_update_payment_status_change_reverts_installment(db, collector, storage, assignment):
    payment = payment_service.record_payment(db, _paid(assignment), collector, storage).data

    result = payment_service.update_payment(db, payment.id, {"payment_status": "client_absent"}, collector, storage)

    assert result.success, result.error
    assert result.data.payment_status == "client_absent"
    assert result.data.amount_paid is None
    assert db.get(PaymentSchedule, assignment.payment_schedule_id).status == "pending"


def test_update_payment_replaces_photo(db, collector, storage, assignment, jpeg_photo):
    payment = payment_service.record_payment(db, _paid(assignment), collector, storage, jpeg_photo).data
    old_url = payment.evidence_photo_url

    new_photo = EvidencePhoto(filename="nuevo.png", content_type="image/png", content=b"\x89PNG")
    result = payment_service.update_payment(db, payment.id, {}, collector, storage, new_photo)

    assert result.data.evidence_photo_url != old_url
    assert [p.name for p in _photo_files(storage)] == [result.data.evidence_photo_url.rsplit("/", 1)[-1]]


def test_only_recorder_updates(db, collector, other_collector, storage, assignment):
    payment = payment_service.record_payment(db, _paid(assignment), collector, storage).data

    result = payment_service.update_payment(db, payment.id, {"notes": "hola"}, other_collector, storage)
    assert result.code == FORBIDDEN


def test_delete_window_for_recorder(db, collector, storage, assignment, jpeg_photo):
    payment = payment_service.record_payment(db, _paid(assignment), collector, storage, jpeg_photo).data
    recorded_at = payment_service._as_utc(payment.recorded_at)

    late = payment_service.delete_payment(db, payment.id, collector, storage, now=recorded_at + timedelta(hours=25))
    assert late.code == FORBIDDEN

    result = payment_service.delete_payment(db, payment.id, collector, storage, now=recorded_at + timedelta(hours=23))
    assert result.success
    assert db.query(Payment).count() == 0
    assert _photo_files(storage) == []
    assert db.get(PaymentSchedule, assignment.payment_schedule_id).status == "pending"


def test_admin_deletes_any_time(db, admin, collector, storage, assignment):
    payment = payment_service.record_payment(db, _paid(assignment), collector, storage).data

    later = datetime.now(timezone.utc) + timedelta(days=30)
    assert payment_service.delete_payment(db, payment.id, admin, storage, now=later).success


def test_collector_payments_for_day(db, collector, other_collector, storage, assignment, route):
    payment_service.record_payment(db, _paid(assignment), collector, storage)

    assert len(payment_service.get_collector_payments(db, collector.id, route.route_date).data) == 1
    assert payment_service.get_collector_payments(db, other_collector.id, route.route_date).data == []
    assert payment_service.get_payment_by_assignment(db, assignment.id, collector).data.payment_status == "paid"


@pytest.fixture
def foreign_debt(db, admin):
    other = Client(name="Pedro Gómez", address="Carrera 5 #12", created_by=admin.id)
    db.add(other)
    db.commit()
    return debt_service.create_debt_with_schedule(
        db,
        {"client_id": other.id, "total_amount": "400", "installment_amount": "200", "frequency": "daily",
         "start_date": "2024-01-01"},
        admin,
    ).data


def test_installment_of_another_client_is_rejected(db, collector, storage, assignment, foreign_debt, jpeg_photo):
    foreign_item = foreign_debt.payment_schedule[1]
    data = {**_paid(assignment), "payment_schedule_id": foreign_item.id}

    result = payment_service.record_payment(db, data, collector, storage, jpeg_photo)

    assert result.code == INVALID
    assert "payment_schedule_id" in result.data
    assert _photo_files(storage) == []
    db.expire_all()
    assert db.get(PaymentSchedule, foreign_item.id).status == "pending"
    assert db.query(Payment).count() == 0


def test_installment_of_same_client_can_be_chosen(db, collector, storage, assignment, debt):
    second = debt.payment_schedule[1]
    data = {**_paid(assignment), "payment_schedule_id": second.id}

    payment = payment_service.record_payment(db, data, collector, storage).data

    assert payment.payment_schedule_id == second.id
    assert db.get(PaymentSchedule, second.id).status == "paid"
    assert db.get(PaymentSchedule, assignment.payment_schedule_id).status == "pending"


def test_update_cannot_move_to_foreign_installment(db, collector, storage, assignment, foreign_debt):
    payment = payment_service.record_payment(db, _paid(assignment), collector, storage).data

    result = payment_service.update_payment(
        db, payment.id, {"payment_schedule_id": foreign_debt.payment_schedule[0].id}, collector, storage
    )

    assert result.code == INVALID
    db.expire_all()
    assert db.get(PaymentSchedule, foreign_debt.payment_schedule[0].id).status == "pending"


def test_update_moves_paid_mark_to_new_installment(db, collector, storage, assignment, debt):
    payment = payment_service.record_payment(db, _paid(assignment), collector, storage).data
    first_id, second_id = debt.payment_schedule[0].id, debt.payment_schedule[1].id

    result = payment_service.update_payment(db, payment.id, {"payment_schedule_id": second_id}, collector, storage)

    assert result.data.payment_schedule_id == second_id
    assert db.get(PaymentSchedule, first_id).status == "pending"
    assert db.get(PaymentSchedule, second_id).status == "paid"


def test_payment_by_assignment_is_limited_to_route_owner(db, admin, collector, other_collector, storage, assignment):
    payment_service.record_payment(db, _paid(assignment), collector, storage)

    assert payment_service.get_payment_by_assignment(db, assignment.id, other_collector).code == FORBIDDEN
    assert payment_service.get_payment_by_assignment(db, assignment.id, admin).data.payment_status == "paid"
    assert payment_service.get_payment_by_assignment(db, "123e4567-e89b-42d3-a456-426614174000", admin).code == NOT_FOUND
