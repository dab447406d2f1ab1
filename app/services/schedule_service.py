"""
Schedule Service

Per-user working intervals. Two invariants are enforced on every write:

- ``end_time > start_time``
- no two schedules of one user on one date overlap on ``[start_time, end_time)``

The overlap test is the three-way comparison: the new start falls inside an
existing slot, the new end falls inside an existing slot, or the new slot
contains an existing one. Touching endpoints (12:00-12:00) do not overlap.
"""
import calendar
import datetime as dt
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import NotFoundError, ScheduleConflictError, ValidationError
from app.core.permissions import ensure_owner_or_permitted
from app.models.schedule import Schedule
from app.models.user import User
from app.schemas.schedule import ScheduleCreate, ScheduleUpdate
from app.services.base import BaseService


def intervals_overlap(start_a: dt.time, end_a: dt.time, start_b: dt.time, end_b: dt.time) -> bool:
    """True when [start_a, end_a) and [start_b, end_b) intersect."""
    return (
        (start_b <= start_a < end_b)
        or (start_b < end_a <= end_b)
        or (start_a <= start_b and end_b <= end_a)
    )


def _overlap_clause(start_time: dt.time, end_time: dt.time):
    """SQL form of ``intervals_overlap`` against stored rows."""
    return or_(
        and_(Schedule.start_time <= start_time, Schedule.end_time > start_time),
        and_(Schedule.start_time < end_time, Schedule.end_time >= end_time),
        and_(Schedule.start_time >= start_time, Schedule.end_time <= end_time),
    )


class ScheduleService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def _query(self):
        return self.db.query(Schedule).options(joinedload(Schedule.user))

    def _get(self, schedule_id: int) -> Schedule:
        schedule = self._query().filter(Schedule.id == schedule_id).first()
        if not schedule:
            raise NotFoundError("Schedule not found")
        return schedule

    @staticmethod
    def _ensure_consistent(start_time: dt.time, end_time: dt.time) -> None:
        if end_time <= start_time:
            raise ValidationError(
                "End time must be after start time",
                details={"start_time": start_time.isoformat(), "end_time": end_time.isoformat()},
            )

    def find_conflict(
        self,
        user_id: int,
        date: dt.date,
        start_time: dt.time,
        end_time: dt.time,
        exclude_id: Optional[int] = None,
    ) -> Optional[Schedule]:
        query = self.db.query(Schedule).filter(
            Schedule.user_id == user_id,
            Schedule.date == date,
            _overlap_clause(start_time, end_time),
        )
        if exclude_id is not None:
            query = query.filter(Schedule.id != exclude_id)
        return query.first()

    def _ensure_no_conflict(self, user_id, date, start_time, end_time, exclude_id=None) -> None:
        conflict = self.find_conflict(user_id, date, start_time, end_time, exclude_id=exclude_id)
        if conflict is not None:
            self.log_warning(
                "Schedule conflict rejected",
                user_id=user_id, conflicting_schedule_id=conflict.id,
            )
            raise ScheduleConflictError(
                details={
                    "conflicting_schedule_id": conflict.id,
                    "start_time": conflict.start_time.isoformat(),
                    "end_time": conflict.end_time.isoformat(),
                }
            )

    # --- Mutations ---

    def create(self, actor: User, data: ScheduleCreate) -> Schedule:
        user_id = data.user_id or actor.id
        ensure_owner_or_permitted(
            actor, user_id, "schedule.manage_any",
            "Unauthorized to create schedules for another user",
        )
        if user_id != actor.id and not self.db.get(User, user_id):
            raise NotFoundError("User not found")

        self._ensure_consistent(data.start_time, data.end_time)
        self._ensure_no_conflict(user_id, data.date, data.start_time, data.end_time)

        schedule = Schedule(
            user_id=user_id,
            date=data.date,
            start_time=data.start_time,
            end_time=data.end_time,
            service=data.service,
        )
        self.db.add(schedule)
        self.commit()
        return self._get(schedule.id)

    def update(self, actor: User, schedule_id: int, data: ScheduleUpdate) -> Schedule:
        schedule = self._get(schedule_id)
        ensure_owner_or_permitted(
            actor, schedule.user_id, "schedule.manage_any",
            "Unauthorized to update this schedule",
        )
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        # Validate the prospective record, not the stored one
        date = changes.get("date", schedule.date)
        start_time = changes.get("start_time", schedule.start_time)
        end_time = changes.get("end_time", schedule.end_time)
        self._ensure_consistent(start_time, end_time)
        if {"date", "start_time", "end_time"} & changes.keys():
            self._ensure_no_conflict(schedule.user_id, date, start_time, end_time, exclude_id=schedule.id)

        for field, value in changes.items():
            setattr(schedule, field, value)
        self.commit()
        return self._get(schedule.id)

    def delete(self, actor: User, schedule_id: int) -> None:
        schedule = self._get(schedule_id)
        ensure_owner_or_permitted(
            actor, schedule.user_id, "schedule.manage_any",
            "Unauthorized to delete this schedule",
        )
        self.db.delete(schedule)
        self.commit()

    # --- Reads ---

    def get_for(self, actor: User, schedule_id: int) -> Schedule:
        schedule = self._get(schedule_id)
        ensure_owner_or_permitted(
            actor, schedule.user_id, "schedule.view_any",
            "Unauthorized to view this schedule",
        )
        return schedule

    def list_all(
        self,
        date: Optional[dt.date] = None,
        user_id: Optional[int] = None,
        service: Optional[str] = None,
    ) -> List[Schedule]:
        query = self._query()
        if date:
            query = query.filter(Schedule.date == date)
        if user_id:
            query = query.filter(Schedule.user_id == user_id)
        if service:
            query = query.filter(Schedule.service == service)
        return query.order_by(Schedule.date.desc(), Schedule.start_time.asc()).all()

    def list_for_user(
        self,
        actor: User,
        user_id: Optional[int] = None,
        date: Optional[dt.date] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> List[Schedule]:
        target_id = user_id or actor.id
        ensure_owner_or_permitted(
            actor, target_id, "schedule.view_any",
            "Unauthorized to view other user's schedules",
        )
        query = self._query().filter(Schedule.user_id == target_id)
        if date:
            query = query.filter(Schedule.date == date)
        elif month and year:
            last_day = calendar.monthrange(year, month)[1]
            query = query.filter(
                Schedule.date >= dt.date(year, month, 1),
                Schedule.date <= dt.date(year, month, last_day),
            )
        return query.order_by(Schedule.date.asc(), Schedule.start_time.asc()).all()
