from decimal import Decimal
from typing import Optional

from loguru import logger
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pagadiario.models.client_model import Client
from pagadiario.models.debt_model import Debt
from pagadiario.models.profile_model import Profile
from pagadiario.services.result import CONFLICT, INVALID, NOT_FOUND, ServiceResult, store_error
from pagadiario.utils.sanitizers import sanitize_address, sanitize_name, sanitize_phone
from pagadiario.utils.schedule import money
from pagadiario.utils.validators import validate_client_form


def _clean(data: dict) -> dict:
    phone = data.get("phone")
    return {
        "name": sanitize_name(data["name"]),
        "address": sanitize_address(data["address"]),
        "phone": sanitize_phone(phone) if phone and phone.strip() else None,
    }


def get_clients(db: Session, search: Optional[str] = None) -> ServiceResult:
    q = db.query(Client)
    if search and search.strip():
        term = f"%{search.strip()}%"
        q = q.filter(or_(Client.name.ilike(term), Client.address.ilike(term), Client.phone.ilike(term)))
    return ServiceResult.ok(q.order_by(Client.name.asc()).all())


def get_client(db: Session, client_id: str) -> ServiceResult:
    client = db.get(Client, client_id)
    if not client:
        return ServiceResult.fail("Client not found", NOT_FOUND)
    return ServiceResult.ok(client)


def create_client(db: Session, data: dict, user: Profile) -> ServiceResult:
    validation = validate_client_form(data)
    if not validation.is_valid:
        return ServiceResult.fail("Invalid client data", INVALID, data=validation.errors)

    client = Client(**_clean(data), created_by=user.id)
    try:
        db.add(client)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error creating client")
        return store_error(e)

    db.refresh(client)
    logger.info("Client {} created by {}", client.id, user.id)
    return ServiceResult.ok(client)


def update_client(db: Session, client_id: str, data: dict) -> ServiceResult:
    client = db.get(Client, client_id)
    if not client:
        return ServiceResult.fail("Client not found", NOT_FOUND)

    # partial update: validate the merged record
    merged = {
        "name": client.name,
        "address": client.address,
        "phone": client.phone,
        **{k: v for k, v in data.items() if v is not None},
    }
    validation = validate_client_form(merged)
    if not validation.is_valid:
        return ServiceResult.fail("Invalid client data", INVALID, data=validation.errors)

    for key, value in _clean(merged).items():
        setattr(client, key, value)

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error updating client {}", client_id)
        return store_error(e)

    db.refresh(client)
    return ServiceResult.ok(client)


def delete_client(db: Session, client_id: str) -> ServiceResult:
    client = db.get(Client, client_id)
    if not client:
        return ServiceResult.fail("Client not found", NOT_FOUND)

    has_debts = db.query(Debt.id).filter(Debt.client_id == client_id).first()
    if has_debts:
        return ServiceResult.fail("The client cannot be deleted because it has associated debts", CONFLICT)

    try:
        db.delete(client)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error deleting client {}", client_id)
        return store_error(e)

    logger.info("Client {} deleted", client_id)
    return ServiceResult.ok()


def get_clients_count(db: Session) -> ServiceResult:
    return ServiceResult.ok(db.query(func.count(Client.id)).scalar() or 0)


def get_clients_with_active_debts(db: Session) -> ServiceResult:
    clients = (
        db.query(Client)
        .join(Debt, Debt.client_id == Client.id)
        .filter(Debt.status == "active")
        .distinct()
        .order_by(Client.name.asc())
        .all()
    )

    rows = []
    for client in clients:
        active = [d for d in client.debts if d.status == "active"]
        pending = sum(
            (
                money(item.amount)
                for d in active
                for item in d.payment_schedule
                if item.status != "paid"
            ),
            Decimal("0.00"),
        )
        rows.append(
            {
                "id": client.id,
                "name": client.name,
                "address": client.address,
                "phone": client.phone,
                "total_active_debt": float(sum((money(d.total_amount) for d in active), Decimal("0.00"))),
                "pending_amount": float(pending),
            }
        )
    return ServiceResult.ok(rows)
