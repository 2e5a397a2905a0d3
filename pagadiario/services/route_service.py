from datetime import date
from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from pagadiario.core.roles import Role
from pagadiario.models.client_model import Client
from pagadiario.models.debt_model import Debt
from pagadiario.models.payment_schedule_model import PaymentSchedule
from pagadiario.models.profile_model import Profile
from pagadiario.models.route_model import Route, RouteAssignment
from pagadiario.services.result import (
    CONFLICT,
    INVALID,
    NOT_FOUND,
    ServiceResult,
    is_unique_violation,
    store_error,
)
from pagadiario.utils.validators import validate_route_form

# forward-only lifecycle
ROUTE_STATUSES = ("pending", "in_progress", "completed")


def _as_date(value) -> date:
    return value if isinstance(value, date) else date.fromisoformat(str(value))


def current_installment(db: Session, client_id: str, route_date: date) -> Optional[PaymentSchedule]:
    """Oldest unpaid installment of an active debt that is due by `route_date`."""
    return (
        db.query(PaymentSchedule)
        .join(Debt, Debt.id == PaymentSchedule.debt_id)
        .filter(
            Debt.client_id == client_id,
            Debt.status == "active",
            PaymentSchedule.status.in_(("pending", "overdue")),
            PaymentSchedule.due_date <= route_date,
        )
        .order_by(PaymentSchedule.due_date.asc(), PaymentSchedule.installment_number.asc())
        .first()
    )


def create_route(db: Session, data: dict, user: Profile) -> ServiceResult:
    validation = validate_route_form(data)
    if not validation.is_valid:
        return ServiceResult.fail("Invalid route data", INVALID, data=validation.errors)

    try:
        route_date = _as_date(data["route_date"])
    except ValueError:
        return ServiceResult.fail("Invalid route data", INVALID, data={"route_date": "Invalid date"})

    collector = db.get(Profile, data["collector_id"])
    if not collector or collector.role != Role.COLLECTOR.value:
        return ServiceResult.fail("Collector not found", NOT_FOUND)

    client_ids = list(data["client_ids"])
    found = {cid for (cid,) in db.query(Client.id).filter(Client.id.in_(client_ids)).all()}
    missing = [cid for cid in client_ids if cid not in found]
    if missing:
        return ServiceResult.fail(f"Clients not found: {', '.join(missing)}", NOT_FOUND)

    route = Route(collector_id=collector.id, route_date=route_date, status="pending", created_by=user.id)
    try:
        db.add(route)
        db.flush()

        for index, client_id in enumerate(client_ids):
            installment = current_installment(db, client_id, route_date)
            db.add(
                RouteAssignment(
                    route_id=route.id,
                    client_id=client_id,
                    payment_schedule_id=installment.id if installment else None,
                    visit_order=index + 1,
                )
            )

        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            logger.warning("Route already exists for collector {} on {}", collector.id, route_date)
            return ServiceResult.fail(
                "A route is already assigned to this collector on the selected date", CONFLICT
            )
        logger.exception("Error creating route")
        return store_error(e)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error creating route")
        return store_error(e)

    db.refresh(route)
    logger.info("Route {} created for {} on {} ({} visits)", route.id, collector.id, route_date, len(client_ids))
    return ServiceResult.ok(route)


def get_all_routes(db: Session, collector_id: Optional[str] = None) -> ServiceResult:
    q = db.query(Route)
    if collector_id:
        q = q.filter(Route.collector_id == collector_id)
    return ServiceResult.ok(q.order_by(Route.route_date.desc()).all())


def get_route(db: Session, route_id: str) -> ServiceResult:
    route = db.get(Route, route_id)
    if not route:
        return ServiceResult.fail("Route not found", NOT_FOUND)
    return ServiceResult.ok(route)


def update_route_status(db: Session, route_id: str, status: str) -> ServiceResult:
    if status not in ROUTE_STATUSES:
        return ServiceResult.fail(f"Invalid route status: {status}", INVALID)

    route = db.get(Route, route_id)
    if not route:
        return ServiceResult.fail("Route not found", NOT_FOUND)

    if ROUTE_STATUSES.index(status) < ROUTE_STATUSES.index(route.status):
        return ServiceResult.fail(f"Route cannot go back from {route.status} to {status}", CONFLICT)

    route.status = status
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error updating route {}", route_id)
        return store_error(e)

    db.refresh(route)
    return ServiceResult.ok(route)


def delete_route(db: Session, route_id: str) -> ServiceResult:
    route = db.get(Route, route_id)
    if not route:
        return ServiceResult.fail("Route not found", NOT_FOUND)

    if route.status != "pending":
        return ServiceResult.fail("Only pending routes can be deleted", CONFLICT)

    # a recorded visit keeps its route
    if any(a.payment is not None for a in route.assignments):
        return ServiceResult.fail("A route with recorded payments cannot be deleted", CONFLICT)

    try:
        db.delete(route)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error deleting route {}", route_id)
        return store_error(e)

    logger.info("Route {} deleted", route_id)
    return ServiceResult.ok()


def get_collector_daily_route(db: Session, collector_id: str, route_date: Optional[date] = None) -> ServiceResult:
    route_date = route_date or date.today()
    route = (
        db.query(Route)
        .filter(Route.collector_id == collector_id, Route.route_date == route_date)
        .first()
    )
    if not route:
        return ServiceResult.ok([])

    rows = []
    for a in route.assignments:
        installment = a.payment_schedule
        rows.append(
            {
                "route_assignment_id": a.id,
                "client_id": a.client_id,
                "client_name": a.client.name,
                "client_address": a.client.address,
                "client_phone": a.client.phone,
                "payment_schedule_id": a.payment_schedule_id,
                "amount_due": float(installment.amount) if installment else None,
                "visit_order": a.visit_order,
                "payment_status": a.payment.payment_status if a.payment else "pending",
            }
        )
    return ServiceResult.ok(rows)
