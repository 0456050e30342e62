from datetime import datetime
from typing import List, Optional

from payroll_api.core.schemas import CamelModel


class PayrollTotal(CamelModel):
    amount: float
    currency: str
    month: int
    year: int
    employee_count: int


class EmployeesPaid(CamelModel):
    count: int
    total_employees: int
    month: int
    year: int


class PendingApprovals(CamelModel):
    count: int
    types: List[str]
    month: int
    year: int
    total_employees: int
    processed_employees: int


class DashboardMetrics(CamelModel):
    payroll_total: PayrollTotal
    employees_paid: EmployeesPaid
    pending_approvals: PendingApprovals
    last_updated: datetime


class RecentActivity(CamelModel):
    id: int
    description: str
    amount: float
    month: int
    year: int
    created_at: Optional[datetime] = None
    type: str = "payroll"


class PayrollPeriod(CamelModel):
    month: int
    year: int


class DashboardStats(CamelModel):
    total_employees: int
    monthly_payroll: float
    pending_approvals: int
    last_payroll_run: PayrollPeriod
    recent_activity: List[RecentActivity]


class MonthlyReportEntry(CamelModel):
    month: int
    month_name: str
    total_amount: float
    employee_count: int
    average_salary: float


class MonthlyReportSummary(CamelModel):
    total_amount: float
    total_employee_payments: int
    average_monthly_payroll: float


class MonthlyReport(CamelModel):
    year: int
    data: List[MonthlyReportEntry]
    summary: MonthlyReportSummary
