"""
Payroll Service Layer

This module provides the business logic layer for payroll operations,
keeping the router focused on HTTP request/response handling.

Architecture:
- Router -> Service (this module) -> Models
- A payroll row is a snapshot of the employee's salary components at the
  time it was processed; later employee edits never touch it.
"""

import logging
import math
from datetime import datetime
from html import escape
from numbers import Real
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from payroll_api.core.config import settings
from payroll_api.core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from payroll_api.models.employee import Employee
from payroll_api.models.payroll import Payroll

logger = logging.getLogger(__name__)

MONTH_NAMES = ["January", "February", "March", "April", "May", "June",
               "July", "August", "September", "October", "November", "December"]


def validate_payroll_period(month: Any, year: Any) -> None:
    """
    Validate a payroll period.

    Month must be an integer in 1..12; year an integer between the first
    supported payroll year and next calendar year.

    Raises:
        ValidationFailedError: If either value is out of range
    """
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise ValidationFailedError("Month must be an integer between 1 and 12")

    max_year = datetime.now().year + 1
    if isinstance(year, bool) or not isinstance(year, int) or not settings.min_payroll_year <= year <= max_year:
        raise ValidationFailedError(
            f"Year must be an integer between {settings.min_payroll_year} and {max_year}"
        )


def _check_amount(label: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"{label} must be a non-negative number")
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"{label} must be a non-negative number")


def calculate_salary(base_salary: Any, allowance: Any, deduction: Any) -> Dict[str, float]:
    """
    Compute gross and net salary from the three components.

    gross = base + allowance; net = gross - deduction.

    Raises:
        ValueError: If any component is negative, non-finite or not a number
    """
    _check_amount("Base salary", base_salary)
    _check_amount("Allowance", allowance)
    _check_amount("Deduction", deduction)

    gross_salary = base_salary + allowance
    net_salary = gross_salary - deduction

    return {
        "base_salary": float(base_salary),
        "allowance": float(allowance),
        "deduction": float(deduction),
        "gross_salary": float(gross_salary),
        "net_salary": float(net_salary),
    }


def process_employee_payroll(db: Session, employee_id: int, month: int, year: int) -> Payroll:
    """
    Process payroll for a single employee and persist the snapshot.

    Args:
        db: Database session
        employee_id: ID of the employee
        month: Payroll month (1-12)
        year: Payroll year

    Returns:
        The created Payroll row

    Raises:
        NotFoundError: Unknown employee
        ConflictError: A row already exists for this employee and period
        ValueError: Stored salary components are invalid
    """
    employee = db.get(Employee, employee_id)
    if not employee:
        raise NotFoundError(f"Employee with ID {employee_id} not found")

    existing = db.query(Payroll).filter(
        Payroll.employee_id == employee_id,
        Payroll.month == month,
        Payroll.year == year
    ).first()
    if existing:
        raise ConflictError(f"Payroll already exists for employee {employee_id} for {month}/{year}")

    salary = calculate_salary(employee.base_salary, employee.allowance, employee.deduction)

    payroll = Payroll(employee_id=employee_id, month=month, year=year, **salary)
    db.add(payroll)
    try:
        db.commit()
    except IntegrityError:
        # The unique constraint caught a concurrent run for the same period
        db.rollback()
        raise ConflictError(f"Payroll already exists for employee {employee_id} for {month}/{year}")
    except SQLAlchemyError:
        # Leave the session usable for the rest of a batch
        db.rollback()
        raise
    db.refresh(payroll)

    logger.info(
        f"Processed payroll {payroll.id} for employee {employee_id} ({month}/{year})",
        extra={"net_salary": payroll.net_salary}
    )
    return payroll


def run_payroll_for_all(db: Session, month: int, year: int) -> Dict[str, Any]:
    """
    Calculate payroll for every employee.

    Each employee is processed independently; a failure is recorded in the
    results and the batch carries on.

    Returns:
        Dict with processed_count, failed_count, total_employees, results, message
    """
    validate_payroll_period(month, year)

    employee_ids = [row.id for row in db.query(Employee.id).order_by(Employee.id).all()]

    if not employee_ids:
        return {
            "message": "No employees found to process payroll",
            "processed_count": 0,
            "failed_count": 0,
            "total_employees": 0,
            "results": []
        }

    results = []
    processed_count = 0
    failed_count = 0

    for employee_id in employee_ids:
        try:
            payroll = process_employee_payroll(db, employee_id, month, year)
            results.append({
                "employee_id": employee_id,
                "success": True,
                "payroll": payroll_to_dict(payroll),
                "message": "Payroll processed successfully"
            })
            processed_count += 1
        except Exception as e:
            detail = getattr(e, "message", None) or str(e)
            logger.warning(f"Payroll failed for employee {employee_id} ({month}/{year}): {detail}")
            results.append({
                "employee_id": employee_id,
                "success": False,
                "error": detail,
                "message": f"Failed to process payroll: {detail}"
            })
            failed_count += 1

    logger.info(
        f"Payroll run {month}/{year} finished",
        extra={"processed": processed_count, "failed": failed_count}
    )
    return {
        "message": f"Payroll processing completed. {processed_count} successful, {failed_count} failed.",
        "processed_count": processed_count,
        "failed_count": failed_count,
        "total_employees": len(employee_ids),
        "results": results
    }


def get_employee_payroll_history(
    db: Session,
    employee_id: int,
    limit: int = 50,
    skip: int = 0,
    period_from: Optional[Tuple[int, int]] = None,
    period_to: Optional[Tuple[int, int]] = None
) -> List[Dict[str, Any]]:
    """
    Get payroll history for an employee, most recent period first.

    Args:
        db: Database session
        employee_id: ID of the employee
        limit: Maximum number of rows
        skip: Number of rows to skip
        period_from: Optional inclusive (year, month) lower bound
        period_to: Optional inclusive (year, month) upper bound

    Returns:
        List of payroll records as dicts
    """
    if not db.get(Employee, employee_id):
        raise NotFoundError(f"Employee with ID {employee_id} not found")

    query = db.query(Payroll).filter(Payroll.employee_id == employee_id)

    period_key = Payroll.year * 100 + Payroll.month
    if period_from:
        query = query.filter(period_key >= period_from[0] * 100 + period_from[1])
    if period_to:
        query = query.filter(period_key <= period_to[0] * 100 + period_to[1])

    payrolls = (
        query.order_by(Payroll.year.desc(), Payroll.month.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return [payroll_to_dict(p) for p in payrolls]


def build_history_response(employee: Employee, records: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "employee": {
            "id": employee.id,
            "name": employee.user.name,
            "email": employee.user.email,
        },
        "payroll_records": records,
        "count": len(records),
    }


def get_payroll(db: Session, payroll_id: int) -> Payroll:
    payroll = db.get(Payroll, payroll_id)
    if not payroll:
        raise NotFoundError(f"Payroll record {payroll_id} not found")
    return payroll


def payroll_to_dict(payroll: Payroll) -> Dict[str, Any]:
    """Convert Payroll model to dict representation."""
    return {
        "id": payroll.id,
        "employee_id": payroll.employee_id,
        "month": payroll.month,
        "year": payroll.year,
        "base_salary": payroll.base_salary,
        "allowance": payroll.allowance,
        "deduction": payroll.deduction,
        "gross_salary": payroll.gross_salary,
        "net_salary": payroll.net_salary,
        "created_at": payroll.created_at,
        "updated_at": payroll.updated_at,
    }


def generate_payslip_html(payroll: Payroll, currency: Optional[str] = None) -> str:
    """
    Render a printable HTML payslip for one payroll snapshot.
    """
    currency = currency or settings.dashboard_currency
    user = payroll.employee.user
    month_name = MONTH_NAMES[payroll.month - 1] if 1 <= payroll.month <= 12 else str(payroll.month)
    generated_on = payroll.created_at.strftime('%B %d, %Y') if payroll.created_at else 'N/A'

    def money(value: float) -> str:
        return f"{currency} {value:,.2f}"

    return f"""<!DOCTYPE html>
<html>
<head>
    <title>Payslip - {month_name} {payroll.year}</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 40px; color: #333; }}
        .header {{ text-align: center; margin-bottom: 30px; border-bottom: 2px solid #2563eb; padding-bottom: 20px; }}
        .header h1 {{ color: #2563eb; margin: 0; }}
        .info-box {{ background: #f8fafc; padding: 15px; border-radius: 8px; margin-bottom: 20px; }}
        .info-box p {{ margin: 5px 0; font-size: 13px; }}
        table {{ width: 100%; border-collapse: collapse; margin: 20px 0; }}
        th, td {{ padding: 12px; text-align: left; border-bottom: 1px solid #e2e8f0; }}
        th {{ background: #f1f5f9; color: #1e40af; }}
        .amount {{ text-align: right; }}
        .total-row {{ background: #2563eb; color: white; font-weight: bold; }}
        .footer {{ margin-top: 40px; text-align: center; color: #666; font-size: 12px; }}
    </style>
</head>
<body>
    <div class="header">
        <h1>PAYSLIP</h1>
        <p>{month_name} {payroll.year}</p>
    </div>
    <div class="info-box">
        <p><strong>Name:</strong> {escape(user.name)}</p>
        <p><strong>Email:</strong> {escape(user.email)}</p>
        <p><strong>Employee ID:</strong> {payroll.employee_id}</p>
    </div>
    <table>
        <thead>
            <tr><th>Description</th><th class="amount">Amount</th></tr>
        </thead>
        <tbody>
            <tr><td>Base Salary</td><td class="amount">{money(payroll.base_salary)}</td></tr>
            <tr><td>Allowance</td><td class="amount">+ {money(payroll.allowance)}</td></tr>
            <tr><td>Gross Salary</td><td class="amount">{money(payroll.gross_salary)}</td></tr>
            <tr><td>Deduction</td><td class="amount">- {money(payroll.deduction)}</td></tr>
            <tr class="total-row"><td>NET PAY</td><td class="amount">{money(payroll.net_salary)}</td></tr>
        </tbody>
    </table>
    <div class="footer">
        <p>This is a computer-generated document. No signature required.</p>
        <p>Generated on: {generated_on}</p>
    </div>
</body>
</html>
"""
