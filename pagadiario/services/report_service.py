from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from pagadiario.models.payment_model import Payment
from pagadiario.models.route_model import Route
from pagadiario.services.result import ServiceResult
from pagadiario.utils.schedule import money


@dataclass
class ReportFilters:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    collector_id: Optional[str] = None


def _pct(part, whole) -> float:
    return round(float(part) / float(whole) * 100, 2) if whole else 0.0


def _daily_rows(db: Session, filters: ReportFilters):
    q = db.query(Route)
    if filters.start_date:
        q = q.filter(Route.route_date >= filters.start_date)
    if filters.end_date:
        q = q.filter(Route.route_date <= filters.end_date)
    if filters.collector_id:
        q = q.filter(Route.collector_id == filters.collector_id)

    rows = []
    for route in q.order_by(Route.route_date.desc()).all():
        row = {
            "route_id": route.id,
            "route_date": route.route_date,
            "collector_id": route.collector_id,
            "collector_name": route.collector.full_name if route.collector else None,
            "total_clients": len(route.assignments),
            "clients_paid": 0,
            "clients_not_paid": 0,
            "clients_absent": 0,
            "total_collected": Decimal("0.00"),
            "total_expected": Decimal("0.00"),
        }
        for a in route.assignments:
            if a.payment_schedule is not None:
                row["total_expected"] += money(a.payment_schedule.amount)
            if a.payment is None:
                continue
            status = a.payment.payment_status
            if status == "paid":
                row["clients_paid"] += 1
                row["total_collected"] += money(a.payment.amount_paid)
            elif status == "not_paid":
                row["clients_not_paid"] += 1
            elif status == "client_absent":
                row["clients_absent"] += 1
        rows.append(row)
    return rows


def _floats(row: dict) -> dict:
    return {k: float(v) if isinstance(v, Decimal) else v for k, v in row.items()}


def get_daily_collection_summary(db: Session, filters: ReportFilters) -> ServiceResult:
    return ServiceResult.ok([_floats(r) for r in _daily_rows(db, filters)])


def get_payments_by_status(db: Session, filters: ReportFilters) -> ServiceResult:
    q = db.query(Payment)
    if filters.start_date:
        q = q.filter(Payment.recorded_at >= datetime.combine(filters.start_date, time.min, tzinfo=timezone.utc))
    if filters.end_date:
        q = q.filter(Payment.recorded_at <= datetime.combine(filters.end_date, time.max, tzinfo=timezone.utc))
    if filters.collector_id:
        q = q.filter(Payment.recorded_by == filters.collector_id)

    aggregated = {}
    for payment in q.all():
        bucket = aggregated.setdefault(
            payment.payment_status,
            {"payment_status": payment.payment_status, "count": 0, "total_amount": Decimal("0.00")},
        )
        bucket["count"] += 1
        bucket["total_amount"] += money(payment.amount_paid)

    return ServiceResult.ok([_floats(b) for b in aggregated.values()])


def get_collector_performance(db: Session, filters: ReportFilters) -> ServiceResult:
    aggregated = {}
    for row in _daily_rows(db, filters):
        c = aggregated.setdefault(
            row["collector_id"],
            {
                "collector_id": row["collector_id"],
                "collector_name": row["collector_name"],
                "total_routes": 0,
                "total_clients": 0,
                "clients_paid": 0,
                "collection_rate": 0.0,
                "total_collected": Decimal("0.00"),
            },
        )
        c["total_routes"] += 1
        c["total_clients"] += row["total_clients"]
        c["clients_paid"] += row["clients_paid"]
        c["total_collected"] += row["total_collected"]

    collectors = []
    for c in aggregated.values():
        c["collection_rate"] = _pct(c["clients_paid"], c["total_clients"])
        collectors.append(_floats(c))
    return ServiceResult.ok(collectors)


def get_total_metrics(db: Session, filters: ReportFilters) -> ServiceResult:
    totals = {
        "total_clients": 0,
        "clients_paid": 0,
        "clients_not_paid": 0,
        "clients_absent": 0,
        "total_collected": Decimal("0.00"),
        "total_expected": Decimal("0.00"),
    }
    for row in _daily_rows(db, filters):
        for key in totals:
            totals[key] += row[key]

    totals["collection_rate"] = _pct(totals["clients_paid"], totals["total_clients"])
    totals["collection_efficiency"] = _pct(totals["total_collected"], totals["total_expected"])
    return ServiceResult.ok(_floats(totals))
