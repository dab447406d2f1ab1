# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    user, leave_type, leave_balance, leave_request,
    schedule, task, child, audit_log
)

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .leave_type import LeaveType, LeaveTypeCategory
from .leave_balance import LeaveBalance
from .leave_request import LeaveRequest, LeaveStatus
from .schedule import Schedule
from .task import Task
from .child import Child
from .audit_log import AuditLog

__all__ = [
    "User",
    "UserRole",
    "LeaveType",
    "LeaveTypeCategory",
    "LeaveBalance",
    "LeaveRequest",
    "LeaveStatus",
    "Schedule",
    "Task",
    "Child",
    "AuditLog",
]
