from datetime import date
from decimal import Decimal
from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pagadiario.models.client_model import Client
from pagadiario.models.debt_model import Debt
from pagadiario.models.payment_schedule_model import PaymentSchedule
from pagadiario.models.profile_model import Profile
from pagadiario.services.result import INVALID, NOT_FOUND, ServiceResult, store_error
from pagadiario.utils.sanitizers import sanitize_amount
from pagadiario.utils.schedule import generate_payment_schedule, money
from pagadiario.utils.validators import validate_debt_form

DEBT_STATUSES = ("active", "completed", "cancelled")
SCHEDULE_STATUSES = ("pending", "paid", "overdue")
UNPAID_STATUSES = ("pending", "overdue")


def _as_date(value) -> date:
    return value if isinstance(value, date) else date.fromisoformat(str(value))


# =================================================
# 🔹 CREATION
# =================================================
def create_debt_with_schedule(db: Session, data: dict, user: Profile) -> ServiceResult:
    """
    Debt row + every installment row in ONE transaction: either the debt is
    created with its complete schedule or nothing is written.
    """
    validation = validate_debt_form(data)
    if not validation.is_valid:
        return ServiceResult.fail("Invalid debt data", INVALID, data=validation.errors)

    try:
        start_date = _as_date(data["start_date"])
    except ValueError:
        return ServiceResult.fail("Invalid debt data", INVALID, data={"start_date": "Invalid date"})

    if not db.get(Client, data["client_id"]):
        return ServiceResult.fail("Client not found", NOT_FOUND)

    total = sanitize_amount(data["total_amount"])
    installment = sanitize_amount(data["installment_amount"])

    debt = Debt(
        client_id=data["client_id"],
        total_amount=total,
        installment_amount=installment,
        frequency=data["frequency"],
        start_date=start_date,
        status="active",
        created_by=user.id,
    )

    try:
        db.add(debt)
        db.flush()

        for item in generate_payment_schedule(total, installment, debt.frequency, start_date):
            db.add(
                PaymentSchedule(
                    debt_id=debt.id,
                    installment_number=item.installment_number,
                    due_date=item.due_date,
                    amount=item.amount,
                    status="pending",
                )
            )

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error creating debt for client {}", data["client_id"])
        return store_error(e)

    db.refresh(debt)
    logger.info(
        "Debt {} created for client {}: {} in {} {} installments",
        debt.id, debt.client_id, total, len(debt.payment_schedule), debt.frequency,
    )
    return ServiceResult.ok(debt)


# =================================================
# 🔹 QUERIES
# =================================================
def get_debt(db: Session, debt_id: str) -> ServiceResult:
    debt = db.get(Debt, debt_id)
    if not debt:
        return ServiceResult.fail("Debt not found", NOT_FOUND)
    return ServiceResult.ok(debt)


def get_client_debts_with_schedule(db: Session, client_id: str) -> ServiceResult:
    debts = (
        db.query(Debt)
        .filter(Debt.client_id == client_id)
        .order_by(Debt.created_at.desc())
        .all()
    )
    return ServiceResult.ok(debts)


def get_all_active_debts_with_schedule(db: Session) -> ServiceResult:
    debts = (
        db.query(Debt)
        .filter(Debt.status == "active")
        .order_by(Debt.created_at.desc())
        .all()
    )
    return ServiceResult.ok(debts)


def get_debt_payment_schedule(db: Session, debt_id: str) -> ServiceResult:
    if not db.get(Debt, debt_id):
        return ServiceResult.fail("Debt not found", NOT_FOUND)

    items = (
        db.query(PaymentSchedule)
        .filter(PaymentSchedule.debt_id == debt_id)
        .order_by(PaymentSchedule.due_date.asc())
        .all()
    )
    return ServiceResult.ok(items)


def get_overdue_payments(db: Session, today: Optional[date] = None) -> ServiceResult:
    today = today or date.today()
    rows = (
        db.query(PaymentSchedule, Debt, Client)
        .join(Debt, Debt.id == PaymentSchedule.debt_id)
        .join(Client, Client.id == Debt.client_id)
        .filter(PaymentSchedule.status.in_(UNPAID_STATUSES), PaymentSchedule.due_date < today)
        .order_by(PaymentSchedule.due_date.asc())
        .all()
    )
    return ServiceResult.ok(
        [
            {
                "id": item.id,
                "debt_id": debt.id,
                "installment_number": item.installment_number,
                "due_date": item.due_date,
                "amount": float(item.amount),
                "status": item.status,
                "client_id": client.id,
                "client_name": client.name,
                "client_address": client.address,
                "client_phone": client.phone,
            }
            for item, debt, client in rows
        ]
    )


# =================================================
# 🔹 STATUS CHANGES
# =================================================
def update_debt_status(db: Session, debt_id: str, status: str) -> ServiceResult:
    if status not in DEBT_STATUSES:
        return ServiceResult.fail(f"Invalid debt status: {status}", INVALID)

    debt = db.get(Debt, debt_id)
    if not debt:
        return ServiceResult.fail("Debt not found", NOT_FOUND)

    debt.status = status
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error updating debt status {}", debt_id)
        return store_error(e)

    db.refresh(debt)
    logger.info("Debt {} -> {}", debt_id, status)
    return ServiceResult.ok(debt)


def update_payment_schedule_status(db: Session, schedule_id: str, status: str) -> ServiceResult:
    if status not in SCHEDULE_STATUSES:
        return ServiceResult.fail(f"Invalid installment status: {status}", INVALID)

    item = db.get(PaymentSchedule, schedule_id)
    if not item:
        return ServiceResult.fail("Installment not found", NOT_FOUND)

    item.status = status
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error updating installment {}", schedule_id)
        return store_error(e)

    db.refresh(item)
    return ServiceResult.ok(item)


def update_overdue_payments(db: Session, today: Optional[date] = None) -> ServiceResult:
    """Flip every pending installment due before `today` to overdue."""
    today = today or date.today()
    try:
        count = (
            db.query(PaymentSchedule)
            .filter(PaymentSchedule.status == "pending", PaymentSchedule.due_date < today)
            .update({PaymentSchedule.status: "overdue"}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error updating overdue installments")
        return store_error(e)

    if count:
        logger.info("Marked {} installments overdue (as of {})", count, today)
    return ServiceResult.ok(count)


# =================================================
# 🔹 SUMMARIES
# =================================================
def _summarize(debts, today: date) -> dict:
    summary = {
        "total_debts": len(debts),
        "active_debts": 0,
        "total_active_debt": Decimal("0.00"),
        "pending_amount": Decimal("0.00"),
        "overdue_amount": Decimal("0.00"),
        "paid_amount": Decimal("0.00"),
    }

    for debt in debts:
        if debt.status != "active":
            continue
        summary["active_debts"] += 1
        summary["total_active_debt"] += money(debt.total_amount)

        for item in debt.payment_schedule:
            amount = money(item.amount)
            if item.status in UNPAID_STATUSES:
                summary["pending_amount"] += amount
                if item.status == "overdue" or item.due_date < today:
                    summary["overdue_amount"] += amount
            elif item.status == "paid":
                summary["paid_amount"] += amount

    for key in ("total_active_debt", "pending_amount", "overdue_amount", "paid_amount"):
        summary[key] = float(summary[key])
    return summary


def calculate_client_debt_summary(db: Session, client_id: str, today: Optional[date] = None) -> ServiceResult:
    if not db.get(Client, client_id):
        return ServiceResult.fail("Client not found", NOT_FOUND)

    debts = db.query(Debt).filter(Debt.client_id == client_id).all()
    return ServiceResult.ok(_summarize(debts, today or date.today()))


def get_client_debt_summary(db: Session, today: Optional[date] = None) -> ServiceResult:
    today = today or date.today()
    rows = []
    for client in db.query(Client).order_by(Client.name.asc()).all():
        summary = _summarize(list(client.debts), today)
        rows.append(
            {
                "client_id": client.id,
                "client_name": client.name,
                "address": client.address,
                "phone": client.phone,
                "total_debts": summary["total_debts"],
                "active_debts": summary["active_debts"],
                "total_active_debt": summary["total_active_debt"],
                "pending_amount": summary["pending_amount"],
            }
        )
    return ServiceResult.ok(rows)
