"""Attempt event sinks for the route resolver."""

from __future__ import annotations

import logging
from typing import Protocol

from .models import AttemptRecord

logger = logging.getLogger(__name__)


class AttemptEventSink(Protocol):
    def emit(self, request_id: str, attempt: AttemptRecord) -> None:
        ...


class LoggingEventSink:
    """Writes one structured log record per attempt."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def emit(self, request_id: str, attempt: AttemptRecord) -> None:
        level = logging.INFO if attempt.succeeded else logging.WARNING
        reason = f": {attempt.reason}" if attempt.reason else ""
        self.log.log(
            level,
            f"[{request_id}] {attempt.method} -> {attempt.outcome.value} in {attempt.duration_ms:.0f}ms{reason}",
            extra={"request_id": request_id, "attempt": attempt.as_dict()},
        )
