import pytest
import os

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_ON_STARTUP"] = "false"

from app.database import Base, SessionLocal, engine, get_db
from app.main import app
from app.models.leave_type import LeaveType, LeaveTypeCategory
from app.models.user import User, UserRole
from app.services import auth as auth_service
from app.services.email import EmailService, get_email_service
from fastapi.testclient import TestClient

DEFAULT_PASSWORD = "Password123!"


class FakeEmailService(EmailService):
    """Records outgoing mail instead of talking to SMTP."""

    def __init__(self):
        super().__init__()
        self.sent = []

    def send_email(self, to, subject, body_text, body_html=None):
        self.sent.append({"to": to, "subject": subject, "body": body_text})
        return True

    def send_password_reset_email(self, to, code):
        self.sent.append({"to": to, "code": code})
        return True


@pytest.fixture(scope="function")
def db_session():
    """Fresh schema per test on the shared in-memory engine."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def email_outbox():
    return FakeEmailService()


@pytest.fixture(scope="function")
def client(db_session, email_outbox):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_outbox
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def make_user(db_session):
    """Factory creating users with a known password."""
    def _make_user(email, role=UserRole.EMPLOYEE, name=None, password=DEFAULT_PASSWORD):
        user = User(
            email=email,
            hashed_password=auth_service.get_password_hash(password),
            role=role,
            name=name or email.split("@")[0].title(),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture(scope="function")
def admin_user(make_user):
    return make_user("admin@alphacorp.com", UserRole.ADMIN, "System Admin")


@pytest.fixture(scope="function")
def manager_user(make_user):
    return make_user("manager@alphacorp.com", UserRole.MANAGER, "Mona Manager")


@pytest.fixture(scope="function")
def employee_user(make_user):
    return make_user("employee@alphacorp.com", UserRole.EMPLOYEE, "Eli Employee")


@pytest.fixture(scope="function")
def other_employee(make_user):
    return make_user("colleague@alphacorp.com", UserRole.EMPLOYEE, "Cora Colleague")


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens."""
    def _get_token(user):
        return auth_service.create_token_for_user(user)
    return _get_token


@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _auth_headers(user):
        return {"Authorization": f"Bearer {get_token(user)}"}
    return _auth_headers


@pytest.fixture(scope="function")
def annual_leave(db_session):
    leave_type = LeaveType(type=LeaveTypeCategory.ANNUAL, name="Annual Leave", description="Paid time off accrued annually.")
    db_session.add(leave_type)
    db_session.commit()
    db_session.refresh(leave_type)
    return leave_type
