"""
Employee Router

Admin-managed salary records. Employees can read their own record.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from payroll_api.core.schemas import ApiResponse
from payroll_api.database import get_db
from payroll_api.models.user import User
from payroll_api.routers.auth_deps import get_current_user, require_admin
from payroll_api.schemas.employee import EmployeeCreate, EmployeeListResponse, EmployeeResponse, EmployeeUpdate
from payroll_api.services import employee_service

router = APIRouter(
    prefix="/employee",
    tags=["employee"]
)


@router.get("/me", response_model=ApiResponse[EmployeeResponse])
def get_my_employee_record(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return ApiResponse.ok(employee_service.get_employee_profile(db, current_user.id))


@router.post("/add", response_model=ApiResponse[EmployeeResponse], status_code=status.HTTP_201_CREATED)
def add_employee(
    payload: EmployeeCreate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin())
):
    employee = employee_service.create_employee(
        db,
        payload.user_id,
        payload.base_salary,
        allowance=payload.allowance,
        deduction=payload.deduction
    )
    return ApiResponse.ok(employee, "Employee created successfully")


@router.get("", response_model=ApiResponse[EmployeeListResponse])
def list_employees(
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin())
):
    employees = employee_service.list_employees(db)
    return ApiResponse.ok({"employees": employees, "count": len(employees)})


@router.put("/{employee_id}", response_model=ApiResponse[EmployeeResponse])
def update_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin())
):
    employee = employee_service.update_employee(db, employee_id, payload.model_dump(exclude_none=True))
    return ApiResponse.ok(employee, "Employee updated successfully")
