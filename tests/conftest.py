import pytest
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from payroll_api.database import Base, get_db
from payroll_api.main import app
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Fresh schema for every test; services commit, so tables are rebuilt rather than rolled back."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)

def _make_user(db_session, name, email, password, role):
    from payroll_api.models.user import User
    from payroll_api.services import auth as auth_service

    user = User(
        name=name,
        email=email,
        hashed_password=auth_service.get_password_hash(password),
        role=role,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user

@pytest.fixture(scope="function")
def make_user(db_session):
    """Create an account with an arbitrary stored email."""
    def _make(name, email, password, role):
        return _make_user(db_session, name, email, password, role)
    return _make

@pytest.fixture(scope="function")
def session_factory():
    return TestingSessionLocal

@pytest.fixture(scope="function")
def admin_user(db_session):
    """Create a default admin user for tests."""
    from payroll_api.models.user import UserRole
    return _make_user(db_session, "System Admin", "admin@alphacorp.com", "AdminPassword123!", UserRole.ADMIN)

@pytest.fixture(scope="function")
def employee_user(db_session):
    """Create a plain employee-role account."""
    from payroll_api.models.user import UserRole
    return _make_user(db_session, "Jane Doe", "jane@alphacorp.com", "JanePassword123!", UserRole.EMPLOYEE)

@pytest.fixture(scope="function")
def other_employee_user(db_session):
    from payroll_api.models.user import UserRole
    return _make_user(db_session, "John Roe", "john@alphacorp.com", "JohnPassword123!", UserRole.EMPLOYEE)

@pytest.fixture(scope="function")
def employee(db_session, employee_user):
    """Salary record for employee_user: 50000 base, 5000 allowance, 2000 deduction."""
    from payroll_api.models.employee import Employee

    record = Employee(user_id=employee_user.id, base_salary=50000.0, allowance=5000.0, deduction=2000.0)
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record

@pytest.fixture(scope="function")
def other_employee(db_session, other_employee_user):
    from payroll_api.models.employee import Employee

    record = Employee(user_id=other_employee_user.id, base_salary=40000.0, allowance=0.0, deduction=1000.0)
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record

@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens for a user."""
    from payroll_api.services.auth import token_for_user

    def _get_token(user):
        return token_for_user(user)
    return _get_token

@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _auth_headers(user):
        return {"Authorization": f"Bearer {get_token(user)}"}
    return _auth_headers

@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
