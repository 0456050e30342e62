import pytest
from datetime import timedelta
from payroll_api.core.exceptions import AuthenticationError, ConflictError, ValidationFailedError
from payroll_api.services import auth as auth_service
from payroll_api.models.user import User, UserRole

def test_password_hashing():
    """Test that password hashing and verification works correctly."""
    password = "MySecurePassword123!"
    hashed = auth_service.get_password_hash(password)
    assert hashed != password
    assert auth_service.verify_password(password, hashed)
    assert not auth_service.verify_password("WrongPassword", hashed)

def test_register_user_normalizes_email(db_session):
    user = auth_service.register_user(db_session, "New User", "  NewUser@Example.com ", "Password123!")

    saved_user = db_session.query(User).filter(User.email == "newuser@example.com").first()
    assert saved_user is not None
    assert saved_user.id == user.id
    assert saved_user.role == UserRole.EMPLOYEE
    assert auth_service.verify_password("Password123!", saved_user.hashed_password)

def test_register_duplicate_email(db_session, employee_user):
    with pytest.raises(ConflictError) as exc:
        auth_service.register_user(db_session, "Copy", employee_user.email.upper(), "Password123!")
    assert exc.value.status_code == 409
    assert exc.value.message == "User with this email already exists"

def test_authenticate_user(db_session, employee_user):
    user = auth_service.authenticate_user(db_session, "JANE@alphacorp.com", "JanePassword123!")
    assert user.id == employee_user.id

    with pytest.raises(AuthenticationError):
        auth_service.authenticate_user(db_session, employee_user.email, "nope")
    with pytest.raises(AuthenticationError):
        auth_service.authenticate_user(db_session, "ghost@alphacorp.com", "JanePassword123!")

def test_token_round_trip(admin_user):
    token = auth_service.token_for_user(admin_user)
    claims = auth_service.decode_access_token(token)
    assert claims["sub"] == admin_user.email
    assert claims["user_id"] == admin_user.id
    assert claims["role"] == "admin"
    assert claims["type"] == "access"

def test_expired_and_garbage_tokens():
    expired = auth_service.create_access_token({"sub": "x@alphacorp.com"}, expires_delta=timedelta(seconds=-5))
    assert auth_service.decode_access_token(expired) == {"error": "TOKEN_EXPIRED"}
    assert auth_service.decode_access_token("not-a-jwt") is None

def test_change_password(db_session, employee_user):
    with pytest.raises(ValidationFailedError):
        auth_service.change_password(db_session, employee_user, "wrong", "NewPassword1")

    auth_service.change_password(db_session, employee_user, "JanePassword123!", "NewPassword1")
    assert auth_service.verify_password("NewPassword1", employee_user.hashed_password)

def test_list_employee_users_flags_records(db_session, admin_user, employee, other_employee_user):
    users = auth_service.list_employee_users(db_session)
    by_email = {u["email"]: u for u in users}
    assert admin_user.email not in by_email
    assert by_email["jane@alphacorp.com"]["has_employee_record"] is True
    assert by_email["john@alphacorp.com"]["has_employee_record"] is False

def test_user_settings_defaults_and_merge(db_session, employee_user):
    defaults = auth_service.get_user_settings(employee_user)
    assert defaults["currency"] == "USD"
    assert defaults["theme"] == "dark"

    stored = auth_service.update_user_settings(db_session, employee_user, {"currency": "INR"})
    assert stored["currency"] == "INR"
    assert stored["theme"] == "dark"
    assert stored["notifications"]["email"] is True

def test_normalize_email():
    assert auth_service.normalize_email("  Boss@AlphaCorp.com ") == "boss@alphacorp.com"
    with pytest.raises(ValidationFailedError) as exc:
        auth_service.normalize_email("not-an-email")
    assert exc.value.errors[0]["field"] == "email"

def test_bootstrap_admin_normalizes_email(db_session, session_factory, monkeypatch):
    from payroll_api.core import init_system
    from payroll_api.core.config import settings

    monkeypatch.setattr(init_system, "SessionLocal", session_factory)
    monkeypatch.setattr(settings, "bootstrap_admin_email", "Root@AlphaCorp.com")
    monkeypatch.setattr(settings, "bootstrap_admin_password", "RootPassword1")
    init_system.init_system_data()

    admin = db_session.query(User).filter(User.email == "root@alphacorp.com").one()
    assert admin.role == UserRole.ADMIN
    assert auth_service.authenticate_user(db_session, "ROOT@alphacorp.com", "RootPassword1").id == admin.id
