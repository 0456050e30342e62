import pytest
from fastapi import status
from payroll_api.core.exceptions import ValidationFailedError
from payroll_api.services import dashboard_service, payroll_service

@pytest.fixture
def processed(db_session, employee, other_employee):
    """Two employees paid for 3/2024, one also paid for 4/2024 and 3/2023."""
    payroll_service.process_employee_payroll(db_session, employee.id, 3, 2024)
    payroll_service.process_employee_payroll(db_session, other_employee.id, 3, 2024)
    payroll_service.process_employee_payroll(db_session, employee.id, 4, 2024)
    payroll_service.process_employee_payroll(db_session, employee.id, 3, 2023)

def test_payroll_total_matches_exact_period(db_session, processed):
    total = dashboard_service.get_payroll_total(db_session, 3, 2024)
    assert total["amount"] == 53000 + 39000
    assert total["employee_count"] == 2
    assert total["currency"] == "INR"

    empty = dashboard_service.get_payroll_total(db_session, 5, 2024)
    assert empty["amount"] == 0
    assert empty["employee_count"] == 0

def test_employees_paid_and_pending(db_session, processed):
    paid = dashboard_service.get_employees_paid_count(db_session, 4, 2024)
    assert paid["count"] == 1
    assert paid["total_employees"] == 2

    pending = dashboard_service.get_pending_approvals_count(db_session, 4, 2024)
    assert pending["count"] == 1
    assert pending["processed_employees"] == 1
    assert pending["types"] == ["payroll"]

def test_invalid_period(db_session):
    with pytest.raises(ValidationFailedError):
        dashboard_service.get_payroll_total(db_session, 13, 2024)

def test_monthly_report(db_session, processed):
    report = dashboard_service.get_monthly_report(db_session, 2024)
    assert len(report["data"]) == 12
    march = report["data"][2]
    assert march["month_name"] == "March"
    assert march["total_amount"] == 92000
    assert march["employee_count"] == 2
    assert march["average_salary"] == 46000
    assert report["data"][0]["total_amount"] == 0
    assert report["summary"]["total_amount"] == 92000 + 53000
    assert report["summary"]["total_employee_payments"] == 3

def test_recent_activity(db_session, processed):
    activity = dashboard_service.get_recent_activity(db_session, limit=3)
    assert len(activity) == 3
    assert activity[0]["description"].startswith("Payroll processed for ")

def test_dashboard_requires_admin(client, employee_user, auth_headers):
    response = client.get("/api/dashboard/metrics", headers=auth_headers(employee_user))
    assert response.status_code == status.HTTP_403_FORBIDDEN

def test_dashboard_requires_token(client):
    response = client.get("/api/dashboard/stats")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

def test_metrics_endpoint(client, admin_user, processed, auth_headers):
    response = client.get("/api/dashboard/metrics?month=3&year=2024", headers=auth_headers(admin_user))
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["payrollTotal"]["amount"] == 92000
    assert data["employeesPaid"]["count"] == 2
    assert data["pendingApprovals"]["count"] == 0
    assert "lastUpdated" in data

def test_period_endpoints(client, admin_user, processed, auth_headers):
    headers = auth_headers(admin_user)
    total = client.get("/api/dashboard/payroll-total/4/2024", headers=headers).json()["data"]
    assert total["amount"] == 53000
    assert total["employeeCount"] == 1

    paid = client.get("/api/dashboard/employees-paid/4/2024", headers=headers).json()["data"]
    assert paid == {"count": 1, "totalEmployees": 2, "month": 4, "year": 2024}

    bad = client.get("/api/dashboard/payroll-total/0/2024", headers=headers)
    assert bad.status_code == status.HTTP_400_BAD_REQUEST

def test_stats_endpoint(client, admin_user, processed, auth_headers):
    response = client.get("/api/dashboard/stats", headers=auth_headers(admin_user))
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["totalEmployees"] == 2
    assert len(data["recentActivity"]) == 4

def test_reports_endpoint(client, admin_user, processed, auth_headers):
    headers = auth_headers(admin_user)
    response = client.get("/api/dashboard/reports?type=monthly&year=2024", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["data"][2]["monthName"] == "March"

    unsupported = client.get("/api/dashboard/reports?type=weekly&year=2024", headers=headers)
    assert unsupported.status_code == status.HTTP_400_BAD_REQUEST
