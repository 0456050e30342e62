"""
Payroll Router

Handles HTTP endpoints for payroll operations.
All business logic is delegated to the payroll service layer.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from payroll_api.core.config import settings
from payroll_api.core.exceptions import ValidationFailedError
from payroll_api.core.schemas import ApiResponse
from payroll_api.database import get_db
from payroll_api.models.user import User
from payroll_api.routers.auth_deps import check_employee_access, get_current_user, require_admin
from payroll_api.schemas.payroll import PayrollHistoryResponse, PayrollRecord, PayrollRunRequest, PayrollRunResult
from payroll_api.services import employee_service, payroll_service

router = APIRouter(
    prefix="/payroll",
    tags=["payroll"]
)


class HistoryParams:
    """Paging and optional inclusive period window shared by the history endpoints."""

    def __init__(
        self,
        limit: int = Query(settings.default_history_limit, ge=1, le=500),
        skip: int = Query(0, ge=0),
        from_year: Optional[int] = Query(None, alias="fromYear"),
        from_month: Optional[int] = Query(None, alias="fromMonth", ge=1, le=12),
        to_year: Optional[int] = Query(None, alias="toYear"),
        to_month: Optional[int] = Query(None, alias="toMonth", ge=1, le=12),
    ):
        errors = []
        if from_month is not None and from_year is None:
            errors.append({"field": "fromYear", "msg": "fromYear is required when fromMonth is given"})
        if to_month is not None and to_year is None:
            errors.append({"field": "toYear", "msg": "toYear is required when toMonth is given"})
        if errors:
            raise ValidationFailedError(errors=errors)

        self.limit = limit
        self.skip = skip
        self.period_from = (from_year, from_month or 1) if from_year is not None else None
        self.period_to = (to_year, to_month or 12) if to_year is not None else None


def _history(db: Session, employee, params: HistoryParams):
    records = payroll_service.get_employee_payroll_history(
        db,
        employee.id,
        limit=params.limit,
        skip=params.skip,
        period_from=params.period_from,
        period_to=params.period_to
    )
    return payroll_service.build_history_response(employee, records)


@router.get("/my-payroll", response_model=ApiResponse[PayrollHistoryResponse])
def get_my_payroll(
    params: HistoryParams = Depends(),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Payroll history for the caller's own employee record.
    """
    employee = employee_service.get_employee_for_user(db, current_user.id)
    return ApiResponse.ok(_history(db, employee, params), "Payroll history retrieved successfully")


@router.post("/run", response_model=ApiResponse[PayrollRunResult])
def run_payroll(
    request: PayrollRunRequest,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin())
):
    """
    Run payroll for all employees for one month.
    Individual failures (e.g. an already processed period) do not stop the batch.
    """
    if not request.month or not request.year:
        raise ValidationFailedError("Month and year are required")

    result = payroll_service.run_payroll_for_all(db, request.month, request.year)
    message = result.pop("message")
    return ApiResponse.ok(result, message)


@router.post("/run/{employee_id}", response_model=ApiResponse[PayrollRecord])
def run_employee_payroll(
    employee_id: int,
    request: PayrollRunRequest,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin())
):
    """
    Process payroll for a single employee.
    """
    if not request.month or not request.year:
        raise ValidationFailedError("Month and year are required")

    payroll_service.validate_payroll_period(request.month, request.year)
    payroll = payroll_service.process_employee_payroll(db, employee_id, request.month, request.year)
    return ApiResponse.ok(payroll_service.payroll_to_dict(payroll), "Payroll processed successfully")


@router.get("/payslip/{payroll_id}", response_class=HTMLResponse)
def get_payslip(
    payroll_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Printable HTML payslip for one payroll record.
    """
    payroll = payroll_service.get_payroll(db, payroll_id)
    check_employee_access(current_user, payroll.employee)
    return HTMLResponse(
        content=payroll_service.generate_payslip_html(payroll),
        headers={
            "Content-Disposition": f"inline; filename=payslip_{payroll.year}_{payroll.month:02d}_{payroll_id}.html"
        }
    )


@router.get("/{employee_id}", response_model=ApiResponse[PayrollHistoryResponse])
def get_payroll_history(
    employee_id: int,
    params: HistoryParams = Depends(),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get payroll history for an employee.
    Employees may only read their own history; admins may read anyone's.
    """
    employee = employee_service.get_employee(db, employee_id)
    check_employee_access(current_user, employee)
    return ApiResponse.ok(_history(db, employee, params), "Payroll history retrieved successfully")
