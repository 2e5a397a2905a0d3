from datetime import date

from pagadiario.models.client_model import Client
from pagadiario.services import debt_service, payment_service, report_service, route_service
from pagadiario.services.report_service import ReportFilters


def _second_client_on_route(db, admin, collector):
    other = Client(name="Pedro Gómez", address="Carrera 5 #12", created_by=admin.id)
    db.add(other)
    db.commit()
    debt_service.create_debt_with_schedule(
        db,
        {"client_id": other.id, "total_amount": "200", "installment_amount": "200", "frequency": "weekly",
         "start_date": date(2024, 1, 1)},
        admin,
    )
    return other


def test_totals_and_performance(db, admin, collector, storage, client_row, debt):
    other = _second_client_on_route(db, admin, collector)
    route = route_service.create_route(
        db, {"collector_id": collector.id, "route_date": date(2024, 1, 1), "client_ids": [client_row.id, other.id]},
        admin,
    ).data

    first, second = route.assignments
    payment_service.record_payment(
        db, {"route_assignment_id": first.id, "payment_status": "paid", "amount_paid": "300"}, collector, storage
    )
    payment_service.record_payment(
        db, {"route_assignment_id": second.id, "payment_status": "not_paid"}, collector, storage
    )
    db.expire_all()

    totals = report_service.get_total_metrics(db, ReportFilters()).data
    assert totals["total_clients"] == 2
    assert totals["clients_paid"] == 1
    assert totals["clients_not_paid"] == 1
    assert totals["total_expected"] == 500.0
    assert totals["total_collected"] == 300.0
    assert totals["collection_rate"] == 50.0
    assert totals["collection_efficiency"] == 60.0

    (perf,) = report_service.get_collector_performance(db, ReportFilters()).data
    assert perf["collector_name"] == "Carlos Cobrador"
    assert perf["collection_rate"] == 50.0

    by_status = {r["payment_status"]: r for r in report_service.get_payments_by_status(db, ReportFilters()).data}
    assert by_status["paid"]["total_amount"] == 300.0
    assert by_status["not_paid"]["count"] == 1


def test_filters_by_date(db, route):
    assert len(report_service.get_daily_collection_summary(db, ReportFilters(start_date=date(2024, 1, 1))).data) == 1
    assert report_service.get_daily_collection_summary(db, ReportFilters(start_date=date(2024, 1, 2))).data == []


def test_empty_totals_have_zero_rates(db):
    totals = report_service.get_total_metrics(db, ReportFilters()).data

    assert totals["collection_rate"] == 0.0
    assert totals["collection_efficiency"] == 0.0
