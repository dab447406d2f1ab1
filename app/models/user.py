"""
User Model with role-based access.
Holds identity, credentials and HR profile attributes.
"""
from sqlalchemy import Column, Integer, String, Enum, DateTime, Date, BigInteger
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from app.database import Base


class UserRole(str, enum.Enum):
    """
    User roles.

    - ADMIN: Full access, manages reference data and leave balances
    - MANAGER: Supervisor, reviews leave requests and manages schedules/tasks
    - CHEF_SERVICE: Head of a service, same supervisory rights as MANAGER
    - EMPLOYEE: Self-service access
    """
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    CHEF_SERVICE = "CHEF_SERVICE"
    EMPLOYEE = "EMPLOYEE"


class MaritalStatus(str, enum.Enum):
    SINGLE = "SINGLE"
    MARRIED = "MARRIED"
    DIVORCED = "DIVORCED"
    WIDOWED = "WIDOWED"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(UserRole), default=UserRole.EMPLOYEE, nullable=False)

    # Profile
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    nationality = Column(String, nullable=True)
    cin_number = Column(BigInteger, nullable=True)
    cnss_number = Column(BigInteger, nullable=True)
    marital_status = Column(Enum(MaritalStatus), default=MaritalStatus.SINGLE, nullable=False)
    job_title = Column(String, nullable=True)
    service = Column(String, nullable=True)

    # Password reset
    reset_code = Column(String, nullable=True)
    reset_code_expires_at = Column(DateTime, nullable=True)
    reset_token_jti = Column(String, nullable=True)  # cleared once the token is spent

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Owned records, removed with the user
    leave_requests = relationship(
        "LeaveRequest", foreign_keys="[LeaveRequest.user_id]",
        back_populates="user", cascade="all, delete-orphan"
    )
    leave_balances = relationship("LeaveBalance", back_populates="user", cascade="all, delete-orphan")
    schedules = relationship("Schedule", back_populates="user", cascade="all, delete-orphan")
    tasks = relationship("Task", back_populates="user", cascade="all, delete-orphan")
    children = relationship("Child", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"
