import pytest
from datetime import timedelta
from app.services import auth as auth_service
from app.models.user import User, UserRole

def test_password_hashing():
    """Test that password hashing and verification works correctly."""
    password = "MySecurePassword123!"
    hashed = auth_service.get_password_hash(password)
    assert hashed != password
    assert auth_service.verify_password(password, hashed)
    assert not auth_service.verify_password("WrongPassword", hashed)

def test_verify_password_with_malformed_hash():
    assert not auth_service.verify_password("anything", "not-a-bcrypt-hash")

def test_create_user(db_session):
    """Test creating a new user directly through the model."""
    email = "newuser@alphacorp.com"
    password = "Password123!"

    user = User(
        email=email,
        name="New User",
        hashed_password=auth_service.get_password_hash(password),
        role=UserRole.EMPLOYEE,
    )
    db_session.add(user)
    db_session.commit()

    saved_user = db_session.query(User).filter(User.email == email).first()
    assert saved_user is not None
    assert saved_user.email == email
    assert auth_service.verify_password(password, saved_user.hashed_password)

def test_access_token_round_trip():
    token = auth_service.create_access_token({"sub": "42", "role": "ADMIN"})
    payload = auth_service.decode_access_token(token)
    assert payload["sub"] == "42"
    assert payload["role"] == "ADMIN"
    assert payload["type"] == "access"

def test_expired_token_is_reported():
    token = auth_service.create_access_token({"sub": "1"}, expires_delta=timedelta(seconds=-5))
    assert auth_service.decode_access_token(token) == {"error": "TOKEN_EXPIRED"}

def test_tampered_token_is_rejected():
    token = auth_service.create_access_token({"sub": "1"})
    assert auth_service.decode_access_token(token + "x") is None

def test_reset_token_is_not_an_access_token():
    reset = auth_service.create_password_reset_token(7, "abc")
    assert auth_service.verify_password_reset_token(reset) == (7, "abc")
    assert auth_service.decode_access_token(reset).get("type") is None

    access = auth_service.create_access_token({"sub": "7"})
    assert auth_service.verify_password_reset_token(access) is None

def test_reset_code_format():
    code = auth_service.generate_reset_code()
    assert len(code) == 6
    assert code.isdigit()
