from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from pagadiario.core.config import PAYMENT_DELETE_WINDOW_HOURS
from pagadiario.core.exceptions import SanitizationError
from pagadiario.core.roles import Role
from pagadiario.models.debt_model import Debt
from pagadiario.models.payment_model import Payment
from pagadiario.models.payment_schedule_model import PaymentSchedule
from pagadiario.models.profile_model import Profile
from pagadiario.models.route_model import Route, RouteAssignment
from pagadiario.services.result import (
    CONFLICT,
    FORBIDDEN,
    INVALID,
    NOT_FOUND,
    ServiceResult,
    is_unique_violation,
    store_error,
)
from pagadiario.utils.sanitizers import sanitize_amount, sanitize_string, validate_file_upload
from pagadiario.utils.storage import EvidenceStorage
from pagadiario.utils.validators import validate_payment_form


@dataclass
class EvidencePhoto:
    filename: str
    content_type: str
    content: bytes


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were written as UTC
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def _store_photo(storage: EvidenceStorage, photo: Optional[EvidencePhoto]):
    """Returns (url, None) or (None, ServiceResult error)."""
    if photo is None:
        return None, None
    try:
        validate_file_upload(photo.filename, photo.content_type, len(photo.content))
    except SanitizationError as e:
        return None, ServiceResult.fail("Invalid evidence photo", INVALID, data={"evidence_photo": str(e)})
    try:
        return storage.upload(photo.filename, photo.content), None
    except OSError as e:
        logger.exception("Error storing evidence photo {}", photo.filename)
        return None, ServiceResult.fail(f"Error uploading photo: {e}", INVALID)


def _set_installment_status(db: Session, schedule_id: Optional[str], status: str) -> None:
    if not schedule_id:
        return
    item = db.get(PaymentSchedule, schedule_id)
    if item:
        item.status = status


def _resolve_schedule_id(db: Session, client_id: Optional[str], requested: Optional[str], current: Optional[str]):
    """Returns (schedule_id, None) or (None, ServiceResult error)."""
    if not requested or requested == current:
        return current, None
    item = (
        db.query(PaymentSchedule)
        .join(Debt, Debt.id == PaymentSchedule.debt_id)
        .filter(PaymentSchedule.id == requested, Debt.client_id == client_id)
        .first()
    )
    if not item:
        return None, ServiceResult.fail(
            "Invalid payment data", INVALID,
            data={"payment_schedule_id": "Installment does not belong to this client"},
        )
    return item.id, None


def _clean_amount(status: str, amount):
    if status == "paid":
        return sanitize_amount(amount)
    return sanitize_amount(amount) if amount not in (None, "") else None


def _clean_notes(notes):
    if not notes:
        return None
    return sanitize_string(notes, 1000) or None


# =================================================
# 🔹 RECORD
# =================================================
def record_payment(
        db: Session,
        data: dict,
        user: Profile,
        storage: EvidenceStorage,
        photo: Optional[EvidencePhoto] = None,
) -> ServiceResult:
    """
    One outcome per visit. The unique constraint on
    payments.route_assignment_id decides races; the loser gets a conflict and
    its uploaded photo is removed.
    """
    validation = validate_payment_form(data)
    if not validation.is_valid:
        return ServiceResult.fail("Invalid payment data", INVALID, data=validation.errors)

    assignment = db.get(RouteAssignment, data["route_assignment_id"])
    if not assignment:
        return ServiceResult.fail("Route assignment not found", NOT_FOUND)

    if user.role != Role.ADMIN.value and assignment.route.collector_id != user.id:
        return ServiceResult.fail("This visit is not on your route", FORBIDDEN)

    try:
        amount = _clean_amount(data["payment_status"], data.get("amount_paid"))
    except SanitizationError as e:
        return ServiceResult.fail("Invalid payment data", INVALID, data={"amount_paid": str(e)})

    schedule_id, error = _resolve_schedule_id(
        db, assignment.client_id, data.get("payment_schedule_id"), assignment.payment_schedule_id
    )
    if error:
        return error

    photo_url, error = _store_photo(storage, photo)
    if error:
        return error

    payment = Payment(
        route_assignment_id=assignment.id,
        payment_schedule_id=schedule_id,
        amount_paid=amount,
        payment_status=data["payment_status"],
        evidence_photo_url=photo_url,
        notes=_clean_notes(data.get("notes")),
        recorded_by=user.id,
    )

    try:
        db.add(payment)
        if payment.payment_status == "paid":
            _set_installment_status(db, schedule_id, "paid")
        db.commit()
    except IntegrityError as e:
        db.rollback()
        storage.remove(photo_url)
        if is_unique_violation(e):
            logger.warning("Duplicate payment for assignment {} by {}", assignment.id, user.id)
            return ServiceResult.fail("A payment record already exists for this visit", CONFLICT)
        logger.exception("Error recording payment")
        return store_error(e)
    except SQLAlchemyError as e:
        db.rollback()
        storage.remove(photo_url)
        logger.exception("Error recording payment")
        return store_error(e)

    db.refresh(payment)
    logger.info(
        "Payment {} recorded for assignment {}: {} {}",
        payment.id, assignment.id, payment.payment_status, payment.amount_paid,
    )
    return ServiceResult.ok(payment)


# =================================================
# 🔹 UPDATE
# =================================================
def update_payment(
        db: Session,
        payment_id: str,
        data: dict,
        user: Profile,
        storage: EvidenceStorage,
        photo: Optional[EvidencePhoto] = None,
) -> ServiceResult:
    payment = db.get(Payment, payment_id)
    if not payment:
        return ServiceResult.fail("Payment not found", NOT_FOUND)

    if payment.recorded_by != user.id:
        return ServiceResult.fail("You do not have permission to modify this payment", FORBIDDEN)

    changes = {k: v for k, v in data.items() if v is not None}
    if changes.get("payment_status", "paid") != "paid" and "amount_paid" not in changes:
        # an unpaid outcome carries no amount
        changes["amount_paid"] = None
    merged = {
        "route_assignment_id": payment.route_assignment_id,
        "payment_status": payment.payment_status,
        "amount_paid": payment.amount_paid,
        "notes": payment.notes,
        **changes,
    }
    validation = validate_payment_form(merged)
    if not validation.is_valid:
        return ServiceResult.fail("Invalid payment data", INVALID, data=validation.errors)

    try:
        amount = _clean_amount(merged["payment_status"], merged.get("amount_paid"))
    except SanitizationError as e:
        return ServiceResult.fail("Invalid payment data", INVALID, data={"amount_paid": str(e)})

    client_id = payment.route_assignment.client_id if payment.route_assignment else None
    schedule_id, error = _resolve_schedule_id(
        db, client_id, changes.get("payment_schedule_id"), payment.payment_schedule_id
    )
    if error:
        return error

    new_url, error = _store_photo(storage, photo)
    if error:
        return error

    old_url = payment.evidence_photo_url
    was_paid = payment.payment_status == "paid"
    old_schedule_id = payment.payment_schedule_id

    payment.payment_status = merged["payment_status"]
    payment.amount_paid = amount
    payment.payment_schedule_id = schedule_id
    if "notes" in changes:
        payment.notes = _clean_notes(changes["notes"])
    if new_url:
        payment.evidence_photo_url = new_url

    is_paid = payment.payment_status == "paid"
    if was_paid and (not is_paid or schedule_id != old_schedule_id):
        _set_installment_status(db, old_schedule_id, "pending")
    if is_paid:
        _set_installment_status(db, schedule_id, "paid")

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        storage.remove(new_url)
        logger.exception("Error updating payment {}", payment_id)
        return store_error(e)

    if new_url and old_url:
        storage.remove(old_url)

    db.refresh(payment)
    logger.info("Payment {} updated by {}", payment_id, user.id)
    return ServiceResult.ok(payment)


# =================================================
# 🔹 DELETE
# =================================================
def delete_payment(
        db: Session,
        payment_id: str,
        user: Profile,
        storage: EvidenceStorage,
        now: Optional[datetime] = None,
) -> ServiceResult:
    """Admins always; the recorder only within PAYMENT_DELETE_WINDOW_HOURS."""
    payment = db.get(Payment, payment_id)
    if not payment:
        return ServiceResult.fail("Payment not found", NOT_FOUND)

    now = now or datetime.now(timezone.utc)
    is_admin = user.role == Role.ADMIN.value
    is_owner = payment.recorded_by == user.id
    within_window = now - _as_utc(payment.recorded_at) <= timedelta(hours=PAYMENT_DELETE_WINDOW_HOURS)

    if not is_admin and (not is_owner or not within_window):
        return ServiceResult.fail("You do not have permission to delete this payment", FORBIDDEN)

    photo_url = payment.evidence_photo_url
    if payment.payment_status == "paid":
        _set_installment_status(db, payment.payment_schedule_id, "pending")

    try:
        db.delete(payment)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error deleting payment {}", payment_id)
        return store_error(e)

    storage.remove(photo_url)
    logger.info("Payment {} deleted by {}", payment_id, user.id)
    return ServiceResult.ok()


# =================================================
# 🔹 QUERIES
# =================================================
def get_payment_by_assignment(db: Session, assignment_id: str, user: Profile) -> ServiceResult:
    assignment = db.get(RouteAssignment, assignment_id)
    if not assignment:
        return ServiceResult.fail("Route assignment not found", NOT_FOUND)

    if user.role != Role.ADMIN.value and assignment.route.collector_id != user.id:
        return ServiceResult.fail("This visit is not on your route", FORBIDDEN)

    payment = db.query(Payment).filter(Payment.route_assignment_id == assignment_id).first()
    return ServiceResult.ok(payment)


def get_collector_payments(db: Session, collector_id: str, route_date: Optional[date] = None) -> ServiceResult:
    route_date = route_date or date.today()
    payments = (
        db.query(Payment)
        .join(RouteAssignment, RouteAssignment.id == Payment.route_assignment_id)
        .join(Route, Route.id == RouteAssignment.route_id)
        .filter(Route.collector_id == collector_id, Route.route_date == route_date)
        .order_by(Payment.recorded_at.desc())
        .all()
    )
    return ServiceResult.ok(payments)
