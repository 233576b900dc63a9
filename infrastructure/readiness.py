# ============================================================================
# DATABASE READINESS POLLER
# ============================================================================
# STATUS: Infrastructure - Wait for a freshly started database
# PURPOSE: Bounded, cancellable connect-and-disconnect polling loop
# CREATED: 18 OCT 2026
# ============================================================================
"""
Database Readiness Poller

A freshly started postgres container needs a few seconds before it accepts
TCP connections. ReadinessPoller tries a connect-and-disconnect cycle every
``interval_seconds`` until one succeeds, giving up after ``timeout_seconds``
or ``max_attempts`` with ReadinessTimeoutError.

The pause between attempts is ``cancel_event.wait(interval)``, so setting the
event stops the loop immediately with PipelineCancelledError.
"""

import logging
import threading
import time
from typing import Callable, Optional

import psycopg

from core.config.defaults import ReadinessDefaults
from core.errors import PipelineCancelledError, ReadinessTimeoutError
from infrastructure.postgresql import ConnectionParams, check_connection

logger = logging.getLogger(__name__)


class ReadinessPoller:
    """Poll a database endpoint until it accepts a connection."""

    def __init__(
        self,
        interval_seconds: float = 1.0,
        timeout_seconds: float = 60.0,
        max_attempts: Optional[int] = None,
        connect: Callable[[ConnectionParams], None] = check_connection,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            interval_seconds: Pause between attempts
            timeout_seconds: Wall-clock deadline for the whole wait
            max_attempts: Optional cap on connection attempts
            connect: Connect-and-close callable raising psycopg.OperationalError
            clock: Monotonic clock (injectable for tests)
        """
        self.interval_seconds = interval_seconds
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max_attempts
        self._connect = connect
        self._clock = clock

    @classmethod
    def from_defaults(cls, defaults: ReadinessDefaults) -> "ReadinessPoller":
        return cls(
            interval_seconds=defaults.interval_seconds,
            timeout_seconds=defaults.timeout_seconds,
            max_attempts=defaults.max_attempts,
        )

    def wait_ready(
        self,
        params: ConnectionParams,
        cancel_event: Optional[threading.Event] = None,
    ) -> int:
        """
        Block until the database accepts a connection.

        Args:
            params: Connection parameters of the database
            cancel_event: Optional event that aborts the wait when set

        Returns:
            Number of attempts made (1 if ready on the first try)

        Raises:
            ReadinessTimeoutError: Deadline or attempt cap reached
            PipelineCancelledError: cancel_event was set
        """
        cancel_event = cancel_event or threading.Event()
        started = self._clock()
        attempts = 0
        last_error: Optional[str] = None

        logger.info(f"Waiting for database at {params}...")

        while True:
            if cancel_event.is_set():
                raise PipelineCancelledError("Cancelled while waiting for database", stage="wait_ready")

            attempts += 1
            try:
                self._connect(params)
                elapsed = self._clock() - started
                logger.info(f"Database ready after {attempts} attempt(s) ({elapsed:.1f}s)")
                return attempts
            except psycopg.OperationalError as e:
                last_error = str(e).strip() or e.__class__.__name__
                logger.debug(f"Attempt {attempts} failed: {last_error}")

            elapsed = self._clock() - started
            if self.max_attempts is not None and attempts >= self.max_attempts:
                raise ReadinessTimeoutError(attempts, elapsed, last_error)
            if elapsed + self.interval_seconds > self.timeout_seconds:
                raise ReadinessTimeoutError(attempts, elapsed, last_error)

            if cancel_event.wait(self.interval_seconds):
                raise PipelineCancelledError("Cancelled while waiting for database", stage="wait_ready")


__all__ = ["ReadinessPoller"]
