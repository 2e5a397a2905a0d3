from loguru import logger
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pagadiario.core.roles import Role
from pagadiario.models.payment_model import Payment
from pagadiario.models.profile_model import Profile
from pagadiario.models.route_model import Route, RouteAssignment
from pagadiario.services.result import CONFLICT, FORBIDDEN, INVALID, NOT_FOUND, ServiceResult, store_error
from pagadiario.utils.sanitizers import sanitize_email, sanitize_name
from pagadiario.utils.validators import validate_collector_form


def _collector_query(db: Session):
    return db.query(Profile).filter(Profile.role == Role.COLLECTOR.value)


def _email_taken(db: Session, email: str, exclude_id: str = None) -> bool:
    q = db.query(Profile.id).filter(func.lower(Profile.email) == email)
    if exclude_id:
        q = q.filter(Profile.id != exclude_id)
    return q.first() is not None


def get_all_collectors(db: Session) -> ServiceResult:
    return ServiceResult.ok(_collector_query(db).order_by(Profile.full_name.asc()).all())


def get_collector(db: Session, collector_id: str) -> ServiceResult:
    collector = _collector_query(db).filter(Profile.id == collector_id).first()
    if not collector:
        return ServiceResult.fail("Collector not found", NOT_FOUND)
    return ServiceResult.ok(collector)


def create_collector(db: Session, data: dict, user: Profile) -> ServiceResult:
    if user.role != Role.ADMIN.value:
        return ServiceResult.fail("You do not have permission to create collectors", FORBIDDEN)

    validation = validate_collector_form(data)
    if not validation.is_valid:
        return ServiceResult.fail("Invalid collector data", INVALID, data=validation.errors)

    email = sanitize_email(data["email"])
    if _email_taken(db, email):
        return ServiceResult.fail("A user with this email already exists", CONFLICT)

    collector = Profile(
        email=email,
        full_name=sanitize_name(data["full_name"]),
        role=Role.COLLECTOR.value,
    )
    try:
        db.add(collector)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error creating collector {}", email)
        return store_error(e)

    db.refresh(collector)
    logger.info("Collector {} created by {}", collector.id, user.id)
    return ServiceResult.ok(collector)


def update_collector(db: Session, collector_id: str, data: dict) -> ServiceResult:
    collector = _collector_query(db).filter(Profile.id == collector_id).first()
    if not collector:
        return ServiceResult.fail("Collector not found", NOT_FOUND)

    merged = {
        "full_name": collector.full_name,
        "email": collector.email,
        **{k: v for k, v in data.items() if v is not None},
    }
    validation = validate_collector_form(merged)
    if not validation.is_valid:
        return ServiceResult.fail("Invalid collector data", INVALID, data=validation.errors)

    email = sanitize_email(merged["email"])
    if _email_taken(db, email, exclude_id=collector_id):
        return ServiceResult.fail("A user with this email already exists", CONFLICT)

    collector.email = email
    collector.full_name = sanitize_name(merged["full_name"])
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error updating collector {}", collector_id)
        return store_error(e)

    db.refresh(collector)
    return ServiceResult.ok(collector)


def delete_collector(db: Session, collector_id: str) -> ServiceResult:
    collector = _collector_query(db).filter(Profile.id == collector_id).first()
    if not collector:
        return ServiceResult.fail("Collector not found", NOT_FOUND)

    pending = (
        db.query(Route.id)
        .filter(Route.collector_id == collector_id, Route.status == "pending")
        .first()
    )
    if pending:
        return ServiceResult.fail("A collector with active routes cannot be deleted", CONFLICT)

    try:
        db.delete(collector)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error deleting collector {}", collector_id)
        return store_error(e)

    logger.info("Collector {} deleted", collector_id)
    return ServiceResult.ok()


def get_collector_stats(db: Session, collector_id: str) -> ServiceResult:
    if not _collector_query(db).filter(Profile.id == collector_id).first():
        return ServiceResult.fail("Collector not found", NOT_FOUND)

    routes = db.query(Route.status).filter(Route.collector_id == collector_id).all()
    total_routes = len(routes)
    completed_routes = sum(1 for (status,) in routes if status == "completed")

    total_visits = (
        db.query(func.count(RouteAssignment.id))
        .join(Route, Route.id == RouteAssignment.route_id)
        .filter(Route.collector_id == collector_id)
        .scalar()
    ) or 0

    paid_count, total_collected = (
        db.query(func.count(Payment.id), func.coalesce(func.sum(Payment.amount_paid), 0))
        .join(RouteAssignment, RouteAssignment.id == Payment.route_assignment_id)
        .join(Route, Route.id == RouteAssignment.route_id)
        .filter(Route.collector_id == collector_id, Payment.payment_status == "paid")
        .one()
    )

    return ServiceResult.ok(
        {
            "total_routes": total_routes,
            "completed_routes": completed_routes,
            "total_collected": float(total_collected or 0),
            "average_collection_rate": round(paid_count / total_visits * 100, 2) if total_visits else 0.0,
        }
    )
