"""
Adds sample payroll history for the first employee so the dashboard
year selector has several years to show. Existing periods are skipped.
"""
import sys
import os
import logging

sys.path.append(os.getcwd())

from payroll_api.database import SessionLocal, init_db
from payroll_api.models.employee import Employee
from payroll_api.models.payroll import Payroll
from payroll_api.services.payroll_service import calculate_salary

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

# (year, month, net salary)
SAMPLE_PERIODS = [
    (2025, 12, 15000), (2025, 11, 14500), (2025, 10, 14000), (2025, 9, 13500), (2025, 8, 13000),
    (2024, 12, 12500), (2024, 11, 12000), (2024, 10, 11500), (2024, 9, 11000), (2024, 8, 10500),
    (2024, 7, 10000),
    (2023, 12, 9500), (2023, 11, 9000), (2023, 10, 8500), (2023, 9, 8000),
]

def add_sample_payroll(db, employee_id: int) -> int:
    """Stage sample rows for one employee, skipping periods that already exist."""
    added = 0
    for year, month, net in SAMPLE_PERIODS:
        existing = db.query(Payroll).filter(
            Payroll.employee_id == employee_id,
            Payroll.month == month,
            Payroll.year == year
        ).first()
        if existing:
            logger.info(f"Skipped {month}/{year} (already exists)")
            continue

        # Components as shares of the target net: base 80%, allowance 30%, deduction 10%
        salary = calculate_salary(round(net * 0.8, 2), round(net * 0.3, 2), round(net * 0.1, 2))
        db.add(Payroll(employee_id=employee_id, month=month, year=year, **salary))
        added += 1
        logger.info(f"Added payroll for {month}/{year}: {salary['net_salary']:.2f}")
    return added

def seed():
    init_db()
    db = SessionLocal()
    try:
        employee = db.query(Employee).order_by(Employee.id).first()
        if not employee:
            logger.warning("No employee found. Please create an employee first.")
            return

        logger.info(f"Found employee: {employee.id}")
        added = add_sample_payroll(db, employee.id)
        db.commit()
        logger.info(f"Sample data added: {added} new payroll record(s).")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    seed()
