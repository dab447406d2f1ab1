import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.database import SessionLocal
from app.models.leave_type import LeaveType, LeaveTypeCategory

logger = logging.getLogger(__name__)

DEFAULT_LEAVE_TYPES = [
    (LeaveTypeCategory.ANNUAL, "Annual Leave", "Paid time off accrued annually."),
    (LeaveTypeCategory.SICK, "Sick Leave", "Leave for illness or medical reasons."),
    (LeaveTypeCategory.MATERNITY, "Maternity Leave", "Leave for maternity-related reasons."),
    (LeaveTypeCategory.PATERNITY, "Paternity Leave", "Leave for paternity-related reasons."),
    (LeaveTypeCategory.UNPAID, "Unpaid Leave", "Leave without pay."),
    (LeaveTypeCategory.OTHER, "Other", "Other leave type."),
]


def seed_leave_types(db: Session) -> int:
    """Create one leave type per category unless it already exists. Returns the number created."""
    created = 0
    for category, name, description in DEFAULT_LEAVE_TYPES:
        if db.query(LeaveType).filter(LeaveType.type == category).first():
            logger.debug(f"Leave type already exists: {category.value}")
            continue
        db.add(LeaveType(type=category, name=name, description=description))
        created += 1
    db.commit()
    return created


def init_system_data(db: Optional[Session] = None):
    """
    Checks if the system needs initialization.
    Seeds the default leave types; running it twice is harmless.
    """
    owns_session = db is None
    db = db or SessionLocal()
    try:
        created = seed_leave_types(db)
        if created:
            logger.info(f"Seeded {created} default leave type(s)")
        else:
            logger.info("System initialization check: leave types already present.")
    except Exception as e:
        db.rollback()
        logger.error(f"Error during system initialization check: {str(e)}", exc_info=True)
        raise
    finally:
        if owns_session:
            db.close()
