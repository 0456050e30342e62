from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, StrictInt

from payroll_api.core.schemas import CamelModel


class PayrollRunRequest(BaseModel):
    # Optional so a missing field maps to the single "Month and year are required" message;
    # strict so JSON booleans and numeric strings are rejected rather than coerced
    month: Optional[StrictInt] = None
    year: Optional[StrictInt] = None


class PayrollRecord(CamelModel):
    id: int
    employee_id: int
    month: int
    year: int
    base_salary: float
    allowance: float
    deduction: float
    gross_salary: float
    net_salary: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PayrollRunItem(CamelModel):
    employee_id: int
    success: bool
    message: str
    payroll: Optional[PayrollRecord] = None
    error: Optional[str] = None


class PayrollRunResult(CamelModel):
    processed_count: int
    failed_count: int
    total_employees: int
    results: List[PayrollRunItem]


class EmployeeSummary(CamelModel):
    id: int
    name: str
    email: str


class PayrollHistoryResponse(CamelModel):
    employee: EmployeeSummary
    payroll_records: List[PayrollRecord]
    count: int
