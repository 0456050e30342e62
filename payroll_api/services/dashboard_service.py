"""
Dashboard Service

Aggregate queries over payroll snapshots for the admin dashboard.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from payroll_api.core.config import settings
from payroll_api.models.employee import Employee
from payroll_api.models.payroll import Payroll
from payroll_api.services.payroll_service import MONTH_NAMES, validate_payroll_period

logger = logging.getLogger(__name__)


def _resolve_period(month: Optional[int], year: Optional[int]) -> tuple[int, int]:
    """Fill in the current month/year for missing values, then validate."""
    now = datetime.now()
    target_month = month if month is not None else now.month
    target_year = year if year is not None else now.year
    validate_payroll_period(target_month, target_year)
    return target_month, target_year


def get_payroll_total(db: Session, month: int, year: int) -> Dict[str, Any]:
    """Sum of net salary over payroll rows of exactly this period."""
    validate_payroll_period(month, year)

    total, count = db.query(
        func.coalesce(func.sum(Payroll.net_salary), 0.0),
        func.count(Payroll.id)
    ).filter(
        Payroll.month == month,
        Payroll.year == year
    ).one()

    return {
        "amount": float(total),
        "currency": settings.dashboard_currency,
        "month": month,
        "year": year,
        "employee_count": count
    }


def get_employees_paid_count(db: Session, month: int, year: int) -> Dict[str, Any]:
    validate_payroll_period(month, year)

    paid = db.query(func.count(func.distinct(Payroll.employee_id))).filter(
        Payroll.month == month,
        Payroll.year == year
    ).scalar() or 0

    return {
        "count": paid,
        "total_employees": db.query(Employee).count(),
        "month": month,
        "year": year
    }


def get_pending_approvals_count(db: Session, month: Optional[int] = None, year: Optional[int] = None) -> Dict[str, Any]:
    """Employees that have no payroll row for the period yet."""
    target_month, target_year = _resolve_period(month, year)

    total_employees = db.query(Employee).count()
    processed = db.query(func.count(func.distinct(Payroll.employee_id))).filter(
        Payroll.month == target_month,
        Payroll.year == target_year
    ).scalar() or 0

    return {
        "count": max(0, total_employees - processed),
        "types": ["payroll"],
        "month": target_month,
        "year": target_year,
        "total_employees": total_employees,
        "processed_employees": processed
    }


def get_recent_activity(db: Session, limit: int = 5) -> List[Dict[str, Any]]:
    payrolls = (
        db.query(Payroll)
        .options(joinedload(Payroll.employee).joinedload(Employee.user))
        .order_by(Payroll.created_at.desc(), Payroll.id.desc())
        .limit(limit)
        .all()
    )

    activities = []
    for p in payrolls:
        name = p.employee.user.name if p.employee and p.employee.user else "Unknown Employee"
        activities.append({
            "id": p.id,
            "description": f"Payroll processed for {name}",
            "amount": p.net_salary,
            "month": p.month,
            "year": p.year,
            "created_at": p.created_at,
            "type": "payroll"
        })
    return activities


def get_monthly_report(db: Session, year: int) -> Dict[str, Any]:
    """Twelve monthly buckets for a year, zero-filled where nothing was processed."""
    validate_payroll_period(1, year)

    rows = db.query(
        Payroll.month,
        func.sum(Payroll.net_salary),
        func.count(Payroll.id),
        func.avg(Payroll.net_salary)
    ).filter(
        Payroll.year == year
    ).group_by(Payroll.month).all()
    by_month = {month: (total, count, avg) for month, total, count, avg in rows}

    data = []
    for index, month_name in enumerate(MONTH_NAMES):
        total, count, avg = by_month.get(index + 1, (0.0, 0, 0.0))
        data.append({
            "month": index + 1,
            "month_name": month_name,
            "total_amount": float(total or 0.0),
            "employee_count": count or 0,
            "average_salary": float(avg or 0.0)
        })

    total_amount = sum(entry["total_amount"] for entry in data)
    return {
        "year": year,
        "data": data,
        "summary": {
            "total_amount": total_amount,
            "total_employee_payments": sum(entry["employee_count"] for entry in data),
            "average_monthly_payroll": total_amount / 12
        }
    }


def get_dashboard_metrics(db: Session, month: Optional[int] = None, year: Optional[int] = None) -> Dict[str, Any]:
    target_month, target_year = _resolve_period(month, year)

    return {
        "payroll_total": get_payroll_total(db, target_month, target_year),
        "employees_paid": get_employees_paid_count(db, target_month, target_year),
        "pending_approvals": get_pending_approvals_count(db, target_month, target_year),
        "last_updated": datetime.now(timezone.utc)
    }


def get_legacy_stats(db: Session) -> Dict[str, Any]:
    """Summary in the shape older dashboard clients expect."""
    metrics = get_dashboard_metrics(db)
    return {
        "total_employees": metrics["employees_paid"]["total_employees"],
        "monthly_payroll": metrics["payroll_total"]["amount"],
        "pending_approvals": metrics["pending_approvals"]["count"],
        "last_payroll_run": {
            "month": metrics["payroll_total"]["month"],
            "year": metrics["payroll_total"]["year"]
        },
        "recent_activity": get_recent_activity(db, 5)
    }
