import logging
from sqlalchemy.orm import Session


class BaseService:
    """
    Shared plumbing for service classes: the request-scoped session and a logger.
    Services own transaction boundaries; routers never commit.
    """

    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(self.__class__.__module__)

    def commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def log_warning(self, message: str, **extra):
        self._logger.warning(message, extra=extra or None)
