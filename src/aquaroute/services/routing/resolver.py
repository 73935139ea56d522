"""Route resolution: remote optimizer strategies with a local geodesic fallback."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

import httpx

from ...config import settings
from ...models.domain import GeoPoint
from .errors import (
    AllStrategiesExhaustedError,
    EmptyResultError,
    InvalidRequestError,
    MalformedResponseError,
    NetworkError,
    NoDataError,
    OptimizerStatusError,
    OptimizerTimeoutError,
    ResolutionCancelledError,
    ResolutionError,
    ResponseParseError,
    UnsuccessfulResponseError,
)
from .events import AttemptEventSink, LoggingEventSink
from .fallback import LocalFallbackCalculator
from .models import (
    PROBE_METHOD,
    AttemptOutcome,
    AttemptRecord,
    OptimizationRequest,
    ResolutionMethod,
    ResolutionTrail,
    RouteCandidate,
    RouteResult,
)
from .normalizer import normalize
from .optimizer_client import OptimizerClient
from .state_machine import TERMINAL_STATES, ResolutionState, method_for, next_state

NOT_CONFIGURED = "optimizer base URL not configured"

logger = logging.getLogger(__name__)

# Most specific first.
_FAILURE_OUTCOMES: tuple[tuple[type[Exception], AttemptOutcome], ...] = (
    (OptimizerTimeoutError, AttemptOutcome.TIMEOUT),
    (OptimizerStatusError, AttemptOutcome.HTTP_ERROR),
    (NetworkError, AttemptOutcome.NETWORK_ERROR),
    (ResponseParseError, AttemptOutcome.PARSE_ERROR),
    (MalformedResponseError, AttemptOutcome.MALFORMED),
    (UnsuccessfulResponseError, AttemptOutcome.UNSUCCESSFUL),
    (EmptyResultError, AttemptOutcome.EMPTY),
    (NoDataError, AttemptOutcome.NO_DATA),
)


def classify_failure(exc: Exception) -> AttemptOutcome:
    for error_type, outcome in _FAILURE_OUTCOMES:
        if isinstance(exc, error_type):
            return outcome
    return AttemptOutcome.MALFORMED


def _positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_request(request: OptimizationRequest) -> None:
    """Reject unusable requests before any I/O happens."""
    origin = request.origin
    if not isinstance(origin, GeoPoint) or not GeoPoint.is_valid(origin.latitude, origin.longitude):
        raise InvalidRequestError(f"Invalid origin: {origin!r}")
    if not _positive_int(request.max_routes):
        raise InvalidRequestError(f"max_routes must be a positive integer, got {request.max_routes!r}")
    if not _positive_int(request.max_hops):
        raise InvalidRequestError(f"max_hops must be a positive integer, got {request.max_hops!r}")
    if not (request.admin_or_user_id or "").strip():
        raise InvalidRequestError("An admin or user id is required for route optimization.")


class RouteResolver:
    """Finds routes to the nearest water supply points.

    Strategies run one after another in a fixed order, genetic, standard,
    then nearest lookup, and the first one that yields candidates wins. When
    all three fail the full supply point dataset is ranked locally. Every
    attempt lands in the result's ``attempted_methods`` trail and is emitted
    to the event sink.

    The resolver keeps no state between calls.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        event_sink: AttemptEventSink | None = None,
        fallback: LocalFallbackCalculator | None = None,
        dataset_source: Path | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.base_url = base_url if base_url is not None else settings.optimizer_base_url
        self.transport = transport
        self.event_sink = event_sink or LoggingEventSink()
        self.fallback = fallback or LocalFallbackCalculator(dataset_source=dataset_source)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.timeouts = {
            ResolutionMethod.GENETIC: settings.genetic_timeout_seconds,
            ResolutionMethod.STANDARD: settings.standard_timeout_seconds,
            ResolutionMethod.NEAREST_LOOKUP: settings.nearest_timeout_seconds,
        }

    def resolve(
        self,
        request: OptimizationRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> RouteResult:
        validate_request(request)
        request_id = uuid.uuid4().hex
        logger.info(
            f"[{request_id}] Resolving route for '{request.admin_or_user_id}' from "
            f"({request.origin.latitude}, {request.origin.longitude}), max_routes={request.max_routes}"
        )

        trail = ResolutionTrail()
        client = self._open_client()
        state = ResolutionState.PROBING
        winner: Optional[ResolutionMethod] = None
        candidates: Optional[list[RouteCandidate]] = None
        try:
            while state not in TERMINAL_STATES:
                stage = PROBE_METHOD if state is ResolutionState.PROBING else method_for(state).value
                self._raise_if_cancelled(cancel_event, request_id, trail, stage, f"before {state.value}")
                if state is ResolutionState.PROBING:
                    trail.probe = self._probe(client)
                    self.event_sink.emit(request_id, trail.probe)
                    state = next_state(state, trail.probe.succeeded)
                    continue

                method = method_for(state)
                attempt, candidates = self._attempt(method, client, request)
                trail.record(attempt)
                self.event_sink.emit(request_id, attempt)
                state = next_state(state, candidates is not None)
                if state is ResolutionState.SUCCESS:
                    winner = method
            if trail.attempts:
                # Cancelled while the last attempt ran: drop its result.
                last = trail.attempts[-1].method
                self._raise_if_cancelled(cancel_event, request_id, trail, last, f"during {last}")
        finally:
            if client is not None:
                client.close()

        if state is ResolutionState.FAILED or winner is None or not candidates:
            error = AllStrategiesExhaustedError(trail.freeze(), trail.probe)
            logger.error(f"[{request_id}] {error.describe()}")
            raise error

        logger.info(f"[{request_id}] Resolved with {winner.value}: {len(candidates)} candidate(s)")
        return RouteResult(
            request_id=request_id,
            candidates=tuple(candidates),
            method=winner,
            attempted_methods=trail.freeze(),
            created_at=self.clock(),
            probe=trail.probe,
        )

    def _open_client(self) -> Optional[OptimizerClient]:
        if not self.base_url:
            logger.warning("Optimizer base URL is not configured; only the local fallback can answer.")
            return None
        return OptimizerClient(self.base_url, transport=self.transport)

    def _raise_if_cancelled(
        self,
        cancel_event: Optional[threading.Event],
        request_id: str,
        trail: ResolutionTrail,
        method: str,
        when: str,
    ) -> None:
        if cancel_event is None or not cancel_event.is_set():
            return
        message = f"Resolution cancelled {when}"
        self.event_sink.emit(request_id, AttemptRecord(method, AttemptOutcome.CANCELLED, message))
        logger.info(f"[{request_id}] {message}")
        raise ResolutionCancelledError(message, trail.freeze())

    def _probe(self, client: Optional[OptimizerClient]) -> AttemptRecord:
        if client is None:
            return AttemptRecord(PROBE_METHOD, AttemptOutcome.PROBE_FAILED, NOT_CONFIGURED)
        started = time.perf_counter()
        healthy = client.check_health()
        elapsed = (time.perf_counter() - started) * 1000.0
        if healthy:
            return AttemptRecord(PROBE_METHOD, AttemptOutcome.PROBE_OK, "", elapsed)
        return AttemptRecord(PROBE_METHOD, AttemptOutcome.PROBE_FAILED, "health check failed", elapsed)

    def _attempt(
        self,
        method: ResolutionMethod,
        client: Optional[OptimizerClient],
        request: OptimizationRequest,
    ) -> tuple[AttemptRecord, Optional[list[RouteCandidate]]]:
        if method is not ResolutionMethod.LOCAL_FALLBACK and client is None:
            return AttemptRecord(method.value, AttemptOutcome.NETWORK_ERROR, NOT_CONFIGURED), None

        started = time.perf_counter()
        try:
            if method is ResolutionMethod.LOCAL_FALLBACK:
                candidates = self.fallback.fetch_and_compute(request.origin, request.max_routes, client)
            else:
                candidates = normalize(self._call(method, client, request), method, request)
        except ResolutionError as exc:
            elapsed = (time.perf_counter() - started) * 1000.0
            return AttemptRecord(method.value, classify_failure(exc), str(exc), elapsed), None
        except Exception as exc:
            elapsed = (time.perf_counter() - started) * 1000.0
            logger.exception(f"Unexpected error during {method.value} attempt: {exc}")
            return AttemptRecord(method.value, AttemptOutcome.MALFORMED, f"unexpected error: {exc}", elapsed), None

        elapsed = (time.perf_counter() - started) * 1000.0
        reason = f"{len(candidates)} candidate(s)"
        return AttemptRecord(method.value, AttemptOutcome.SUCCESS, reason, elapsed), candidates

    def _call(self, method: ResolutionMethod, client: OptimizerClient, request: OptimizationRequest) -> dict:
        timeout = self.timeouts[method]
        if method is ResolutionMethod.GENETIC:
            return client.optimize_genetic(request, timeout=timeout)
        if method is ResolutionMethod.STANDARD:
            return client.optimize_standard(request, timeout=timeout)
        return client.find_nearest_points(request, timeout=timeout)
