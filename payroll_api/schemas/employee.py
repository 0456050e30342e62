from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import BeforeValidator, Field, model_validator

from payroll_api.core.schemas import CamelModel
from payroll_api.models.user import UserRole


def _require_number(value: Any) -> Any:
    # JSON booleans are ints in Python; numeric strings would be coerced otherwise
    if value is None:
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a number")
    return value


SalaryAmount = Annotated[float, BeforeValidator(_require_number), Field(ge=0, allow_inf_nan=False)]


class EmployeeCreate(CamelModel):
    user_id: int
    base_salary: SalaryAmount
    allowance: Optional[SalaryAmount] = None
    deduction: Optional[SalaryAmount] = None


class EmployeeUpdate(CamelModel):
    base_salary: Optional[SalaryAmount] = None
    allowance: Optional[SalaryAmount] = None
    deduction: Optional[SalaryAmount] = None

    @model_validator(mode="after")
    def at_least_one_field(self):
        if self.base_salary is None and self.allowance is None and self.deduction is None:
            raise ValueError("At least one field (baseSalary, allowance, deduction) must be provided")
        return self


class EmployeeResponse(CamelModel):
    id: int
    user_id: int
    user_name: str
    user_email: str
    user_role: UserRole
    base_salary: float
    allowance: float
    deduction: float
    gross_salary: float
    net_salary: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EmployeeListResponse(CamelModel):
    employees: List[EmployeeResponse]
    count: int
