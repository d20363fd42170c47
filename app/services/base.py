import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session


class BaseService:
    """
    Common base for database-backed services.

    Holds the request-scoped session and the reference date used for
    date-dependent rules (proration, age). Routers construct a service per
    request; tests inject a fixed ``today``.
    """

    def __init__(self, db: Session, today: Optional[date] = None):
        self.db = db
        self._today = today
        self._logger = logging.getLogger(self.__class__.__module__)

    @property
    def today(self) -> date:
        return self._today or date.today()

    def commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def log_info(self, message: str, **extra):
        self._logger.info(message, extra=extra or None)

    def log_warning(self, message: str, **extra):
        self._logger.warning(message, extra=extra or None)
