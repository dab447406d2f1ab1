"""
Authentication and role-gate dependencies.

``get_current_user`` is the authentication gate: it verifies the bearer token
and loads the user. ``require_permission`` is the role gate: it looks the
action up in the policy table of ``app.core.permissions``.
"""
import logging
from typing import Callable

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AuthenticationError
from app.core.permissions import ensure_allowed
from app.database import get_db
from app.models.user import User
from app.schemas.auth import TokenData
from app.services import auth as auth_service

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_prefix}/auth/login")


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """
    Extracts and validates the current user from the JWT token.
    """
    payload = auth_service.decode_access_token(token)

    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise AuthenticationError("Unauthorized access - invalid token.")

    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise AuthenticationError("Unauthorized access - token expired.")

    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise AuthenticationError("Invalid token type")

    try:
        token_data = TokenData(user_id=int(payload.get("sub")), role=payload.get("role"))
    except (TypeError, ValueError):
        logger.warning("Authentication failed: Missing subject in token")
        raise AuthenticationError("Missing subject in token")

    user = db.get(User, token_data.user_id)
    if user is None:
        logger.warning(f"Authentication failed: User {token_data.user_id} not found in database")
        raise AuthenticationError("Unauthorized access - user not found.")
    return user


def require_permission(action: str) -> Callable:
    """
    Dependency factory that checks the policy table for ``action``.

    Usage:
        @router.post("/create")
        def create(user: User = Depends(require_permission("leave_type.manage"))):
            ...
    """
    def permission_checker(current_user: User = Depends(get_current_user)) -> User:
        ensure_allowed(current_user, action)
        return current_user
    return permission_checker
