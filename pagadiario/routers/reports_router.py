# pagadiario/routers/reports_router.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pagadiario.core.auth import require_admin
from pagadiario.models.profile_model import Profile
from pagadiario.schemas.report_schema import (
    CollectorPerformanceOut,
    DailyCollectionSummaryOut,
    PaymentsByStatusOut,
    TotalMetricsOut,
)
from pagadiario.services import report_service
from pagadiario.services.report_service import ReportFilters
from pagadiario.utils.database import get_db

router = APIRouter(prefix="/reports", tags=["Reports"])


def report_filters(
        start_date: Optional[date] = Query(None),
        end_date: Optional[date] = Query(None),
        collector_id: Optional[str] = Query(None),
) -> ReportFilters:
    return ReportFilters(start_date=start_date, end_date=end_date, collector_id=collector_id)


@router.get("/daily-summary", response_model=list[DailyCollectionSummaryOut])
def daily_summary(
        filters: ReportFilters = Depends(report_filters),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
):
    return report_service.get_daily_collection_summary(db, filters).data


@router.get("/payments-by-status", response_model=list[PaymentsByStatusOut])
def payments_by_status(
        filters: ReportFilters = Depends(report_filters),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
):
    return report_service.get_payments_by_status(db, filters).data


@router.get("/collector-performance", response_model=list[CollectorPerformanceOut])
def collector_performance(
        filters: ReportFilters = Depends(report_filters),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
):
    return report_service.get_collector_performance(db, filters).data


@router.get("/totals", response_model=TotalMetricsOut)
def total_metrics(
        filters: ReportFilters = Depends(report_filters),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin),
):
    return report_service.get_total_metrics(db, filters).data
