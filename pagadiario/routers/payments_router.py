# pagadiario/routers/payments_router.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from pagadiario.core.auth import require_admin, require_collector
from pagadiario.core.security_log import SecurityLogger, get_security_log
from pagadiario.models.profile_model import Profile
from pagadiario.routers.deps import log_modification, log_upload, photo_from_upload, unwrap
from pagadiario.schemas.payment_schema import PaymentOut
from pagadiario.services import payment_service
from pagadiario.utils.database import get_db
from pagadiario.utils.storage import EvidenceStorage, get_evidence_storage

router = APIRouter(prefix="/payments", tags=["Payments"])


# =================================================
# 🔹 STATIC ROUTES (ALWAYS FIRST)
# =================================================
@router.get("/mine", response_model=list[PaymentOut])
def my_payments(
        request: Request,
        route_date: Optional[date] = Query(None),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_collector),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(payment_service.get_collector_payments(db, user.id, route_date), security_log, request, user)


@router.get("/collector/{collector_id}", response_model=list[PaymentOut])
def collector_payments(
        collector_id: str,
        request: Request,
        route_date: Optional[date] = Query(None),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
        security_log: SecurityLogger = Depends(get_security_log),
):
    result = payment_service.get_collector_payments(db, collector_id, route_date)
    return unwrap(result, security_log, request, user)


@router.get("/by-assignment/{assignment_id}", response_model=Optional[PaymentOut])
def payment_by_assignment(
        assignment_id: str,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_collector),
        security_log: SecurityLogger = Depends(get_security_log),
):
    return unwrap(payment_service.get_payment_by_assignment(db, assignment_id, user), security_log, request, user)


# =================================================
# 🔹 RECORD / UPDATE / DELETE
# =================================================
@router.post("", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def record_payment(
        request: Request,
        route_assignment_id: Optional[str] = Form(None),
        payment_status: Optional[str] = Form(None),
        amount_paid: Optional[str] = Form(None),
        payment_schedule_id: Optional[str] = Form(None),
        notes: Optional[str] = Form(None),
        evidence_photo: Optional[UploadFile] = File(None),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_collector),
        security_log: SecurityLogger = Depends(get_security_log),
        storage: EvidenceStorage = Depends(get_evidence_storage),
):
    data = {
        "route_assignment_id": route_assignment_id,
        "payment_status": payment_status,
        "amount_paid": amount_paid,
        "payment_schedule_id": payment_schedule_id,
        "notes": notes,
    }
    photo = photo_from_upload(evidence_photo)

    result = payment_service.record_payment(db, data, user, storage, photo)
    payment = unwrap(result, security_log, request, user)

    if photo is not None:
        log_upload(security_log, request, user, photo)
    log_modification(security_log, request, user, "record_payment", payment_id=payment.id,
                     route_assignment_id=payment.route_assignment_id, payment_status=payment.payment_status)
    return payment


@router.put("/{payment_id}", response_model=PaymentOut)
def update_payment(
        payment_id: str,
        request: Request,
        payment_status: Optional[str] = Form(None),
        amount_paid: Optional[str] = Form(None),
        payment_schedule_id: Optional[str] = Form(None),
        notes: Optional[str] = Form(None),
        evidence_photo: Optional[UploadFile] = File(None),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_collector),
        security_log: SecurityLogger = Depends(get_security_log),
        storage: EvidenceStorage = Depends(get_evidence_storage),
):
    data = {
        "payment_status": payment_status,
        "amount_paid": amount_paid,
        "payment_schedule_id": payment_schedule_id,
        "notes": notes,
    }
    photo = photo_from_upload(evidence_photo)

    result = payment_service.update_payment(db, payment_id, data, user, storage, photo)
    payment = unwrap(result, security_log, request, user)

    if photo is not None:
        log_upload(security_log, request, user, photo)
    log_modification(security_log, request, user, "update_payment", payment_id=payment_id)
    return payment


@router.delete("/{payment_id}")
def delete_payment(
        payment_id: str,
        request: Request,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_collector),
        security_log: SecurityLogger = Depends(get_security_log),
        storage: EvidenceStorage = Depends(get_evidence_storage),
):
    unwrap(payment_service.delete_payment(db, payment_id, user, storage), security_log, request, user)
    log_modification(security_log, request, user, "delete_payment", payment_id=payment_id)
    return {"message": "Payment deleted successfully"}
