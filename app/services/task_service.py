import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import NotFoundError
from app.core.permissions import ensure_owner_or_permitted
from app.models.task import Task
from app.models.user import User
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.base import BaseService

logger = logging.getLogger(__name__)


def utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TaskService(BaseService):
    """
    Per-user to-dos. Supervisors assign tasks; owners and supervisors
    read, edit, toggle and delete them.
    """

    def __init__(self, db: Session):
        super().__init__(db)

    def _query(self, overdue: bool = False):
        query = self.db.query(Task).options(joinedload(Task.user))
        if overdue:
            query = query.filter(
                Task.due_date.isnot(None),
                Task.due_date < utcnow_naive(),
                Task.is_completed.is_(False),
            )
        return query

    def _get(self, task_id: int) -> Task:
        task = self._query().filter(Task.id == task_id).first()
        if not task:
            raise NotFoundError("Task not found")
        return task

    def _get_owned(self, actor: User, task_id: int, action: str, message: str) -> Task:
        task = self._get(task_id)
        ensure_owner_or_permitted(actor, task.user_id, action, message)
        return task

    def create(self, data: TaskCreate) -> Task:
        if not self.db.get(User, data.user_id):
            raise NotFoundError("User not found")
        task = Task(**data.model_dump(), is_completed=False)
        self.db.add(task)
        self.commit()
        logger.info(f"Task {task.id} assigned to user {task.user_id}")
        return self._get(task.id)

    def update(self, actor: User, task_id: int, data: TaskUpdate) -> Task:
        task = self._get_owned(actor, task_id, "task.manage_any", "Unauthorized to update this task")
        for field, value in data.model_dump(exclude_unset=True).items():
            if field in ("title", "is_completed") and value is None:
                continue
            setattr(task, field, value)
        self.commit()
        return self._get(task.id)

    def toggle(self, actor: User, task_id: int) -> Task:
        task = self._get_owned(actor, task_id, "task.manage_any", "Unauthorized to update this task")
        task.is_completed = not task.is_completed
        self.commit()
        return self._get(task.id)

    def delete(self, actor: User, task_id: int) -> None:
        task = self._get_owned(actor, task_id, "task.manage_any", "Unauthorized to delete this task")
        self.db.delete(task)
        self.commit()

    def get_for(self, actor: User, task_id: int) -> Task:
        return self._get_owned(actor, task_id, "task.view_any", "Unauthorized to view this task")

    def list_mine(self, actor: User, overdue: bool = False) -> List[Task]:
        return self._query(overdue).filter(Task.user_id == actor.id).order_by(
            Task.is_completed.asc(), Task.due_date.asc(), Task.id.asc()
        ).all()

    def list_all(self, user_id: Optional[int] = None, overdue: bool = False) -> List[Task]:
        query = self._query(overdue)
        if user_id:
            query = query.filter(Task.user_id == user_id)
        return query.order_by(Task.created_at.desc(), Task.id.desc()).all()
