import logging
from typing import Callable, Optional
from sqlalchemy.orm import Session
from app.database import SessionLocal


class BaseService:
    """
    Common plumbing for domain services: a session factory and a per-class logger.

    Services receive a factory rather than a session because read fan-out
    needs one session per worker thread.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self.session_factory = session_factory or SessionLocal
        self._logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    def log_info(self, message: str, **extra):
        self._logger.info(message, extra=extra or None)

    def log_warning(self, message: str, **extra):
        self._logger.warning(message, extra=extra or None)

    def log_error(self, message: str, exc_info: bool = False, **extra):
        self._logger.error(message, exc_info=exc_info, extra=extra or None)
