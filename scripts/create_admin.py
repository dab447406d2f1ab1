"""
Create the initial ADMIN account.

    ADMIN_EMAIL=admin@alphacorp.com ADMIN_PASSWORD=... python scripts/create_admin.py
"""
import sys
import os
import logging
from sqlalchemy.orm import Session

# Ensure we can import app modules
sys.path.append(os.getcwd())

from app.database import SessionLocal, init_db
from app.models.user import User, UserRole
from app.services.auth import get_password_hash

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def create_admin_user() -> int:
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        logger.error("ADMIN_EMAIL and ADMIN_PASSWORD must be set.")
        return 1

    init_db()
    db: Session = SessionLocal()
    try:
        existing_user = db.query(User).filter(User.email == email).first()
        if existing_user:
            if existing_user.role != UserRole.ADMIN:
                existing_user.role = UserRole.ADMIN
                db.commit()
                logger.info(f"Promoted existing user '{email}' to ADMIN.")
            else:
                logger.warning(f"Admin user '{email}' already exists.")
            return 0

        admin_user = User(
            email=email,
            hashed_password=get_password_hash(password),
            name=os.getenv("ADMIN_NAME", "System Administrator"),
            role=UserRole.ADMIN,
        )
        db.add(admin_user)
        db.commit()
        logger.info(f"Admin user '{email}' created successfully. You can now login.")
        return 0
    except Exception as e:
        logger.error(f"Error creating admin user: {e}")
        db.rollback()
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(create_admin_user())
