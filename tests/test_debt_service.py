from datetime import date
from decimal import Decimal

from pagadiario.models.debt_model import Debt
from pagadiario.services import debt_service
from pagadiario.services.result import INVALID, NOT_FOUND

UNKNOWN_CLIENT = "123e4567-e89b-42d3-a456-426614174000"


def test_debt_created_with_full_schedule(debt):
    assert debt.status == "active"
    assert [item.amount for item in debt.payment_schedule] == [
        Decimal("300.00"),
        Decimal("300.00"),
        Decimal("300.00"),
        Decimal("100.00"),
    ]
    assert debt.payment_schedule[-1].due_date == date(2024, 1, 4)
    assert all(item.status == "pending" for item in debt.payment_schedule)


def test_invalid_debt_writes_nothing(db, admin, client_row):
    result = debt_service.create_debt_with_schedule(
        db,
        {"client_id": client_row.id, "total_amount": "abc", "installment_amount": "10", "frequency": "daily",
         "start_date": "2024-01-01"},
        admin,
    )

    assert result.code == INVALID
    assert result.data == {"total_amount": "Invalid amount format"}
    assert db.query(Debt).count() == 0


def test_debt_for_unknown_client(db, admin):
    result = debt_service.create_debt_with_schedule(
        db,
        {"client_id": UNKNOWN_CLIENT, "total_amount": "100", "installment_amount": "10", "frequency": "weekly",
         "start_date": "2024-01-01"},
        admin,
    )

    assert result.code == NOT_FOUND
    assert db.query(Debt).count() == 0


def test_overdue_listing_and_refresh(db, debt):
    overdue = debt_service.get_overdue_payments(db, date(2024, 1, 3)).data

    assert [row["installment_number"] for row in overdue] == [1, 2]
    assert overdue[0]["client_name"] == "Juan Pérez"
    assert overdue[0]["amount"] == 300.0

    assert debt_service.update_overdue_payments(db, date(2024, 1, 3)).data == 2
    db.expire_all()
    statuses = [item.status for item in debt_service.get_debt_payment_schedule(db, debt.id).data]
    assert statuses == ["overdue", "overdue", "pending", "pending"]

    # already overdue rows are not counted again
    assert debt_service.update_overdue_payments(db, date(2024, 1, 3)).data == 0


def test_client_summary(db, debt, client_row):
    first = debt.payment_schedule[0]
    debt_service.update_payment_schedule_status(db, first.id, "paid")

    summary = debt_service.calculate_client_debt_summary(db, client_row.id, date(2024, 1, 3)).data

    assert summary["total_debts"] == 1
    assert summary["active_debts"] == 1
    assert summary["total_active_debt"] == 1000.0
    assert summary["paid_amount"] == 300.0
    assert summary["pending_amount"] == 700.0
    assert summary["overdue_amount"] == 300.0


def test_status_updates_validate_values(db, debt):
    assert debt_service.update_debt_status(db, debt.id, "closed").code == INVALID
    assert debt_service.update_debt_status(db, debt.id, "completed").data.status == "completed"
    assert debt_service.update_payment_schedule_status(db, debt.payment_schedule[0].id, "lost").code == INVALID
    assert debt_service.update_debt_status(db, UNKNOWN_CLIENT, "active").code == NOT_FOUND


def test_active_debts_listing(db, debt):
    assert [d.id for d in debt_service.get_all_active_debts_with_schedule(db).data] == [debt.id]

    debt_service.update_debt_status(db, debt.id, "cancelled")
    assert debt_service.get_all_active_debts_with_schedule(db).data == []
