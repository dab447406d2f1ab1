from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from datetime import datetime, timezone
import logging

from app.core.config import settings
from app.core.exceptions import AuthenticationError, DuplicateKeyError, ValidationError
from app.core.limiter import limiter
from app.core.schemas import ApiResponse
from app.database import commit_session, get_db
from app.models.user import User, UserRole
from app.services import auth as auth_service
from app.services.email import EmailService, get_email_service
from app.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    ResetToken,
    Token,
    VerifyResetCodeRequest,
)
from app.schemas.user import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)

RESET_REQUESTED_MESSAGE = "If an account exists for this email, a reset code has been sent."


def _token_response(user: User) -> Token:
    return Token(
        access_token=auth_service.create_token_for_user(user),
        token_type="bearer",
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=ApiResponse[Token], status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.auth_rate_limit)
def register(request: Request, data: RegisterRequest, db: Session = Depends(get_db)):
    if db.query(User).filter(User.email == data.email).first():
        raise DuplicateKeyError("User already exists.")

    # Self-registration never grants a privileged role
    user = User(
        **data.model_dump(exclude={"password"}),
        hashed_password=auth_service.get_password_hash(data.password),
        role=UserRole.EMPLOYEE,
    )
    db.add(user)
    commit_session(db)
    db.refresh(user)
    logger.info(f"User {user.id} registered")
    return ApiResponse.ok("User registered successfully.", _token_response(user))


@router.post("/login", response_model=ApiResponse[Token])
@limiter.limit(settings.auth_rate_limit)
def login(request: Request, login_data: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == login_data.email).first()
    if not user or not auth_service.verify_password(login_data.password, user.hashed_password):
        logger.warning("Failed login attempt", extra={"email": login_data.email})
        raise AuthenticationError("Incorrect email or password")
    return ApiResponse.ok("Login successful.", _token_response(user))


@router.post("/forgot-password", response_model=ApiResponse[None])
@limiter.limit(settings.auth_rate_limit)
def forgot_password(
    request: Request,
    data: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """Issue a one-time code. The answer is identical whether or not the account exists."""
    user = db.query(User).filter(User.email == data.email).first()
    if user is None:
        logger.info("Password reset requested for unknown email")
        return ApiResponse.ok(RESET_REQUESTED_MESSAGE)

    code = auth_service.generate_reset_code()
    user.reset_code = auth_service.get_password_hash(code)
    user.reset_code_expires_at = auth_service.reset_code_expiry()
    commit_session(db)

    if not email_service.send_password_reset_email(user.email, code):
        logger.error(f"Password reset email could not be delivered for user {user.id}")
    return ApiResponse.ok(RESET_REQUESTED_MESSAGE)


@router.post("/verify-reset-code", response_model=ApiResponse[ResetToken])
@limiter.limit(settings.auth_rate_limit)
def verify_reset_code(request: Request, data: VerifyResetCodeRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == data.email).first()
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    if (
        user is None
        or not user.reset_code
        or user.reset_code_expires_at is None
        or user.reset_code_expires_at < now
        or not auth_service.verify_password(data.code, user.reset_code)
    ):
        raise ValidationError("Invalid or expired reset code")

    # One-time: the code is burned as soon as it is exchanged
    user.reset_code = None
    user.reset_code_expires_at = None
    user.reset_token_jti = auth_service.new_reset_token_id()
    commit_session(db)
    return ApiResponse.ok(
        "Reset code verified.",
        ResetToken(reset_token=auth_service.create_password_reset_token(user.id, user.reset_token_jti)),
    )


@router.post("/reset-password", response_model=ApiResponse[None])
@limiter.limit(settings.auth_rate_limit)
def reset_password(request: Request, data: ResetPasswordRequest, db: Session = Depends(get_db)):
    claims = auth_service.verify_password_reset_token(data.reset_token)
    user = db.get(User, claims[0]) if claims is not None else None
    # A spent or superseded token no longer matches the id held by the user
    if user is None or not user.reset_token_jti or user.reset_token_jti != claims[1]:
        raise AuthenticationError("Invalid or expired reset token")

    user.hashed_password = auth_service.get_password_hash(data.new_password)
    user.reset_token_jti = None
    commit_session(db)
    logger.info(f"Password reset completed for user {user.id}")
    return ApiResponse.ok("Password has been reset successfully.")
