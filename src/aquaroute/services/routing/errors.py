"""Error kinds raised while resolving a route to a water supply point."""

from __future__ import annotations

from typing import Optional, Sequence

from .models import AttemptRecord

NO_ROUTE_MESSAGE = "No route found - check connection and retry"


class ResolutionError(Exception):
    """Base class for every route resolution failure."""


class InvalidRequestError(ResolutionError, ValueError):
    """The request is unusable; raised before any network I/O."""


class NetworkError(ResolutionError):
    """Transport-level failure talking to the optimizer (connection, non-2xx)."""


class OptimizerTimeoutError(NetworkError):
    """The optimizer did not answer within the attempt timeout."""


class OptimizerStatusError(NetworkError):
    """The optimizer answered with a non-2xx status."""

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"HTTP {status_code} from {url}")
        self.status_code = status_code
        self.url = url


class MalformedResponseError(ResolutionError):
    """A payload violates its schema beyond what the normalizer tolerates."""


class ResponseParseError(MalformedResponseError):
    """The response body is not a JSON object."""


class UnsuccessfulResponseError(ResolutionError):
    """The optimizer answered but did not report ``success: true``."""


class EmptyResultError(ResolutionError):
    """The optimizer reported success without any usable candidate."""


class NoDataError(ResolutionError):
    """The fallback dataset has no usable supply points."""


class ResolutionCancelledError(ResolutionError):
    """The caller abandoned the resolution; partial results were discarded."""

    def __init__(self, message: str, attempts: Sequence[AttemptRecord] = ()) -> None:
        super().__init__(message)
        self.attempts = tuple(attempts)


class AllStrategiesExhaustedError(ResolutionError):
    """Every remote strategy and the local fallback failed."""

    def __init__(
        self,
        attempts: Sequence[AttemptRecord],
        probe: Optional[AttemptRecord] = None,
        message: str = NO_ROUTE_MESSAGE,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.attempts = tuple(attempts)
        self.probe = probe

    def describe(self) -> str:
        details = "; ".join(
            f"{attempt.method}={attempt.outcome.value}" + (f" ({attempt.reason})" if attempt.reason else "")
            for attempt in self.attempts
        )
        return f"{self.message}. Attempts: {details}"
