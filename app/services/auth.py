"""
Credential and token helpers.

Password hashing uses passlib's bcrypt scheme; tokens are HS256 JWTs signed with
``settings.secret_key``. Access tokens carry ``type=access``; password-reset
tokens carry ``purpose=password_reset`` and a shorter expiry.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PASSWORD_RESET_PURPOSE = "password_reset"


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed hash in the database
        logger.warning("Password verification failed: unrecognized hash format")
        return False


def _encode(data: Dict[str, Any], expires_delta: timedelta) -> str:
    to_encode = data.copy()
    to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create an access JWT. ``data`` should hold ``sub`` (user id as string) and ``role``."""
    payload = {**data, "type": "access"}
    return _encode(payload, expires_delta or timedelta(minutes=settings.access_token_expire_minutes))


def create_token_for_user(user) -> str:
    return create_access_token({"sub": str(user.id), "role": user.role.value})


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode a JWT.
    Returns the payload, ``{"error": "TOKEN_EXPIRED"}`` for an expired token,
    or ``None`` when the token is invalid.
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        return {"error": "TOKEN_EXPIRED"}
    except JWTError:
        return None


def new_reset_token_id() -> str:
    return secrets.token_urlsafe(16)


def create_password_reset_token(user_id: int, jti: str) -> str:
    """Reset token bound to ``jti``; it is accepted only while the user still holds that id."""
    return _encode(
        {"sub": str(user_id), "purpose": PASSWORD_RESET_PURPOSE, "jti": jti},
        timedelta(minutes=settings.reset_token_expire_minutes),
    )


def verify_password_reset_token(token: str) -> Optional[Tuple[int, str]]:
    """Return ``(user_id, jti)`` for a valid reset token, else None."""
    payload = decode_access_token(token)
    if not payload or "error" in payload:
        return None
    if payload.get("purpose") != PASSWORD_RESET_PURPOSE:
        return None
    if not payload.get("jti"):
        return None
    try:
        return int(payload["sub"]), payload["jti"]
    except (KeyError, TypeError, ValueError):
        return None


def generate_reset_code() -> str:
    """Six-digit one-time code."""
    return str(secrets.randbelow(900000) + 100000)


def reset_code_expiry() -> datetime:
    # Naive UTC, matching the column type
    return datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(minutes=settings.reset_code_expire_minutes)
