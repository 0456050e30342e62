import math
import pytest
from payroll_api.models.payroll import Payroll
from scripts.seed_sample_payroll import SAMPLE_PERIODS, add_sample_payroll

def test_sample_payroll_rows_are_consistent(db_session, employee):
    added = add_sample_payroll(db_session, employee.id)
    db_session.commit()
    assert added == len(SAMPLE_PERIODS)

    for row in db_session.query(Payroll).all():
        assert row.gross_salary == row.base_salary + row.allowance
        assert row.net_salary == row.gross_salary - row.deduction
        assert row.net_salary <= row.gross_salary

    target = {(year, month): net for year, month, net in SAMPLE_PERIODS}
    row = db_session.query(Payroll).filter(Payroll.year == 2025, Payroll.month == 11).one()
    assert math.isclose(row.net_salary, target[(2025, 11)])

def test_sample_payroll_skips_existing_periods(db_session, employee):
    add_sample_payroll(db_session, employee.id)
    db_session.commit()
    assert add_sample_payroll(db_session, employee.id) == 0
