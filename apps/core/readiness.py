"""Database readiness gate.

The process must not serve domain requests until the database connection has
been established once. The gate is initialized from ``config.wsgi`` /
``config.asgi`` and re-initialized on demand by ``ReadinessMiddleware`` while
it is not ready.
"""

from __future__ import annotations

import logging
import threading

from django.db import DatabaseError, connection  # type: ignore

logger = logging.getLogger(__name__)


class DatabaseGate:
    """Single source of truth for "is the database usable"."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = self.UNINITIALIZED
        self.last_error: str | None = None

    @property
    def state(self) -> str:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state == self.READY

    def initialize(self) -> str:
        """Connect once; concurrent callers wait for the first attempt."""

        with self._lock:
            if self._state == self.READY:
                return self._state
            try:
                connection.ensure_connection()
            except DatabaseError as exc:
                self._state = self.FAILED
                self.last_error = str(exc)
                logger.error(f"Database initialization failed: {exc}", exc_info=True)
            else:
                self._state = self.READY
                self.last_error = None
                logger.info("Database connection established")
            return self._state

    def reset(self) -> None:
        with self._lock:
            self._state = self.UNINITIALIZED
            self.last_error = None


database_gate = DatabaseGate()
