import math
import pytest
from datetime import datetime
from payroll_api.core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from sqlalchemy.exc import OperationalError
from payroll_api.models.payroll import Payroll
from payroll_api.services import payroll_service

def test_calculate_salary_example():
    result = payroll_service.calculate_salary(50000, 5000, 2000)
    assert result["gross_salary"] == 55000
    assert result["net_salary"] == 53000

@pytest.mark.parametrize("base, allowance, deduction", [
    (0, 0, 0),
    (1000.5, 0, 0),
    (100, 20, 500),
    (123456.78, 9876.54, 1.23),
])
def test_calculate_salary_properties(base, allowance, deduction):
    result = payroll_service.calculate_salary(base, allowance, deduction)
    assert math.isclose(result["gross_salary"], base + allowance)
    assert math.isclose(result["net_salary"], result["gross_salary"] - deduction)
    assert result["net_salary"] <= result["gross_salary"]

@pytest.mark.parametrize("components", [
    (-1, 0, 0),
    (100, -5, 0),
    (100, 0, -5),
    (float("nan"), 0, 0),
    (float("inf"), 0, 0),
    ("100", 0, 0),
    (True, 0, 0),
])
def test_calculate_salary_rejects_invalid(components):
    with pytest.raises(ValueError):
        payroll_service.calculate_salary(*components)

@pytest.mark.parametrize("month, year", [(0, 2024), (13, 2024), (6, 2019), (6, datetime.now().year + 2), ("6", 2024)])
def test_validate_payroll_period_rejects(month, year):
    with pytest.raises(ValidationFailedError):
        payroll_service.validate_payroll_period(month, year)

def test_process_employee_payroll_snapshot(db_session, employee):
    payroll = payroll_service.process_employee_payroll(db_session, employee.id, 3, 2024)
    assert payroll.base_salary == 50000
    assert payroll.gross_salary == 55000
    assert payroll.net_salary == 53000

    # Later salary edits must not touch the stored snapshot
    employee.base_salary = 90000
    db_session.commit()
    db_session.refresh(payroll)
    assert payroll.base_salary == 50000
    assert payroll.net_salary == 53000

def test_process_employee_payroll_duplicate_period(db_session, employee):
    payroll_service.process_employee_payroll(db_session, employee.id, 3, 2024)
    with pytest.raises(ConflictError):
        payroll_service.process_employee_payroll(db_session, employee.id, 3, 2024)
    assert db_session.query(Payroll).count() == 1

def test_process_employee_payroll_unknown_employee(db_session):
    with pytest.raises(NotFoundError):
        payroll_service.process_employee_payroll(db_session, 9999, 3, 2024)

def test_run_payroll_for_all(db_session, employee, other_employee):
    result = payroll_service.run_payroll_for_all(db_session, 5, 2024)
    assert result["total_employees"] == 2
    assert result["processed_count"] == 2
    assert result["failed_count"] == 0
    assert len(result["results"]) == 2
    assert all(item["success"] for item in result["results"])

def test_run_payroll_rerun_fails_every_employee(db_session, employee, other_employee):
    payroll_service.run_payroll_for_all(db_session, 5, 2024)
    before = [(p.id, p.net_salary) for p in db_session.query(Payroll).order_by(Payroll.id)]

    result = payroll_service.run_payroll_for_all(db_session, 5, 2024)
    assert result["processed_count"] == 0
    assert result["failed_count"] == 2
    assert len(result["results"]) == 2
    assert all(not item["success"] and item["error"] for item in result["results"])

    after = [(p.id, p.net_salary) for p in db_session.query(Payroll).order_by(Payroll.id)]
    assert before == after

def test_run_payroll_no_employees(db_session):
    result = payroll_service.run_payroll_for_all(db_session, 5, 2024)
    assert result["total_employees"] == 0
    assert result["results"] == []
    assert result["message"] == "No employees found to process payroll"

def test_run_payroll_partial_failure(db_session, employee, other_employee):
    payroll_service.process_employee_payroll(db_session, employee.id, 7, 2024)
    result = payroll_service.run_payroll_for_all(db_session, 7, 2024)
    assert result["processed_count"] == 1
    assert result["failed_count"] == 1
    failed = [item for item in result["results"] if not item["success"]]
    assert failed[0]["employee_id"] == employee.id

def test_history_ordering_paging_and_window(db_session, employee):
    for month, year in [(1, 2023), (12, 2023), (2, 2024), (11, 2022)]:
        payroll_service.process_employee_payroll(db_session, employee.id, month, year)

    records = payroll_service.get_employee_payroll_history(db_session, employee.id)
    assert [(r["year"], r["month"]) for r in records] == [(2024, 2), (2023, 12), (2023, 1), (2022, 11)]

    page = payroll_service.get_employee_payroll_history(db_session, employee.id, limit=2, skip=1)
    assert [(r["year"], r["month"]) for r in page] == [(2023, 12), (2023, 1)]

    window = payroll_service.get_employee_payroll_history(
        db_session, employee.id, period_from=(2023, 1), period_to=(2023, 12)
    )
    assert [(r["year"], r["month"]) for r in window] == [(2023, 12), (2023, 1)]

def test_payslip_html(db_session, employee):
    payroll = payroll_service.process_employee_payroll(db_session, employee.id, 3, 2024)
    html = payroll_service.generate_payslip_html(payroll, currency="USD")
    assert "March 2024" in html
    assert "Jane Doe" in html
    assert "USD 53,000.00" in html

def test_run_payroll_recovers_from_database_error(db_session, employee, other_employee, monkeypatch):
    real_commit = db_session.commit
    calls = {"count": 0}

    def flaky_commit():
        calls["count"] += 1
        if calls["count"] == 1:
            raise OperationalError("COMMIT", {}, Exception("database is locked"))
        return real_commit()

    monkeypatch.setattr(db_session, "commit", flaky_commit)
    result = payroll_service.run_payroll_for_all(db_session, 8, 2024)

    assert result["processed_count"] == 1
    assert result["failed_count"] == 1
    assert result["results"][0]["success"] is False
    assert result["results"][1]["success"] is True

    # The failed employee's staged row was discarded, not flushed with the next commit
    rows = db_session.query(Payroll).all()
    assert [r.employee_id for r in rows] == [other_employee.id]
