"""
Employee Service Layer

Create, list and update employee salary records. Gross and net figures are
derived from the stored components and never persisted here.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from payroll_api.core.exceptions import ConflictError, NotFoundError
from payroll_api.models.employee import Employee
from payroll_api.models.user import User

logger = logging.getLogger(__name__)


def create_employee(
    db: Session,
    user_id: int,
    base_salary: float,
    allowance: Optional[float] = None,
    deduction: Optional[float] = None
) -> Dict[str, Any]:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    if db.query(Employee).filter(Employee.user_id == user_id).first():
        raise ConflictError("Employee record already exists for this user")

    employee = Employee(
        user_id=user_id,
        base_salary=base_salary,
        allowance=allowance or 0.0,
        deduction=deduction or 0.0,
    )
    db.add(employee)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent insert for the same user
        db.rollback()
        raise ConflictError("Employee record already exists for this user")
    db.refresh(employee)

    logger.info(f"Created employee {employee.id} for user {user_id}")
    return _employee_to_dict(employee)


def list_employees(db: Session) -> List[Dict[str, Any]]:
    employees = (
        db.query(Employee)
        .options(joinedload(Employee.user))
        .order_by(Employee.created_at.desc(), Employee.id.desc())
        .all()
    )
    return [_employee_to_dict(e) for e in employees]


def get_employee(db: Session, employee_id: int) -> Employee:
    employee = db.get(Employee, employee_id)
    if not employee:
        raise NotFoundError("Employee not found")
    return employee


def get_employee_for_user(db: Session, user_id: int) -> Employee:
    employee = db.query(Employee).filter(Employee.user_id == user_id).first()
    if not employee:
        raise NotFoundError("Employee record not found for this user")
    return employee


def get_employee_profile(db: Session, user_id: int) -> Dict[str, Any]:
    return _employee_to_dict(get_employee_for_user(db, user_id))


def update_employee(db: Session, employee_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
    """Apply a partial salary update. Only keys present in `changes` are touched."""
    employee = get_employee(db, employee_id)
    for field in ("base_salary", "allowance", "deduction"):
        if changes.get(field) is not None:
            setattr(employee, field, changes[field])
    db.commit()
    db.refresh(employee)

    logger.info(f"Updated employee {employee_id}: {sorted(changes)}")
    return _employee_to_dict(employee)


def _employee_to_dict(employee: Employee) -> Dict[str, Any]:
    """Convert Employee model to dict representation, flattening the linked user."""
    return {
        "id": employee.id,
        "user_id": employee.user_id,
        "user_name": employee.user.name,
        "user_email": employee.user.email,
        "user_role": employee.user.role,
        "base_salary": employee.base_salary,
        "allowance": employee.allowance,
        "deduction": employee.deduction,
        "gross_salary": employee.gross_salary,
        "net_salary": employee.net_salary,
        "created_at": employee.created_at,
        "updated_at": employee.updated_at,
    }
