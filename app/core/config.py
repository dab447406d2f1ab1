import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


class SMTPSettings(BaseModel):
    host: Optional[str] = Field(default=os.getenv("SMTP_HOST"))
    port: int = Field(default=int(os.getenv("SMTP_PORT", "587")))
    user: Optional[str] = Field(default=os.getenv("SMTP_USER"))
    password: Optional[str] = Field(default=os.getenv("SMTP_PASSWORD"))
    from_email: Optional[str] = Field(default=os.getenv("SMTP_FROM_EMAIL"))
    from_name: str = Field(default=os.getenv("SMTP_FROM_NAME", "HrApp"))
    use_tls: bool = Field(default=os.getenv("SMTP_USE_TLS", "true").lower() == "true")


class Config(BaseModel):
    app_name: str = "HR Backend"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = os.getenv("API_PREFIX", "/api/v1")
    version: str = "1.0.0"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./database.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    reset_token_expire_minutes: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "15"))
    reset_code_expire_minutes: int = int(os.getenv("RESET_CODE_EXPIRE_MINUTES", "10"))

    # Email
    smtp: SMTPSettings = SMTPSettings()

    request_id_header: str = "X-Request-ID"

    # CORS, comma-separated origins
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:3001,"
                "http://127.0.0.1:3000,http://127.0.0.1:3001",
            ).split(",")
            if o.strip()
        ]
    )

    # Rate limiting
    rate_limit_enabled: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    auth_rate_limit: str = os.getenv("AUTH_RATE_LIMIT", "20/minute")

    # Startup
    seed_on_startup: bool = os.getenv("SEED_ON_STARTUP", "true").lower() == "true"


settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
elif "dev-only" in settings.secret_key:
    _logger.warning("Using insecure default SECRET_KEY, only acceptable in development.")
