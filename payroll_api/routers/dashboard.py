"""
Dashboard Router

Admin-only aggregate metrics over processed payroll.
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from payroll_api.core.exceptions import ValidationFailedError
from payroll_api.core.schemas import ApiResponse
from payroll_api.database import get_db
from payroll_api.routers.auth_deps import require_admin
from payroll_api.schemas.dashboard import (
    DashboardMetrics, DashboardStats, EmployeesPaid, MonthlyReport, PayrollTotal, PendingApprovals,
)
from payroll_api.services import dashboard_service

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(require_admin())]
)


@router.get("/metrics", response_model=ApiResponse[DashboardMetrics])
def get_metrics(
    month: Optional[int] = None,
    year: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """
    All dashboard metrics for the given period (defaults to the current month).
    """
    return ApiResponse.ok(dashboard_service.get_dashboard_metrics(db, month, year))


@router.get("/payroll-total/{month}/{year}", response_model=ApiResponse[PayrollTotal])
def get_payroll_total(month: int, year: int, db: Session = Depends(get_db)):
    return ApiResponse.ok(dashboard_service.get_payroll_total(db, month, year))


@router.get("/employees-paid/{month}/{year}", response_model=ApiResponse[EmployeesPaid])
def get_employees_paid(month: int, year: int, db: Session = Depends(get_db)):
    return ApiResponse.ok(dashboard_service.get_employees_paid_count(db, month, year))


@router.get("/pending-approvals", response_model=ApiResponse[PendingApprovals])
def get_pending_approvals(
    month: Optional[int] = None,
    year: Optional[int] = None,
    db: Session = Depends(get_db)
):
    return ApiResponse.ok(dashboard_service.get_pending_approvals_count(db, month, year))


@router.get("/stats", response_model=ApiResponse[DashboardStats])
def get_stats(db: Session = Depends(get_db)):
    """
    Legacy summary kept for older dashboard clients.
    """
    return ApiResponse.ok(dashboard_service.get_legacy_stats(db))


@router.get("/reports", response_model=ApiResponse[MonthlyReport])
def get_reports(
    report_type: str = Query("monthly", alias="type"),
    year: Optional[int] = None,
    db: Session = Depends(get_db)
):
    if report_type != "monthly":
        raise ValidationFailedError('Unsupported report type. Currently only "monthly" is supported.')
    return ApiResponse.ok(dashboard_service.get_monthly_report(db, year or datetime.now().year))
