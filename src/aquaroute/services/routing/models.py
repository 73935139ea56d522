"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from ...models.domain import GeoPoint, SupplyPoint


class ResolutionMethod(str, Enum):
    GENETIC = "GENETIC"
    STANDARD = "STANDARD"
    NEAREST_LOOKUP = "NEAREST_LOOKUP"
    LOCAL_FALLBACK = "LOCAL_FALLBACK"


# Remote strategies in the order they are attempted.
REMOTE_STRATEGIES: Tuple[ResolutionMethod, ...] = (
    ResolutionMethod.GENETIC,
    ResolutionMethod.STANDARD,
    ResolutionMethod.NEAREST_LOOKUP,
)

PROBE_METHOD = "PROBE"


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    HTTP_ERROR = "http_error"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    PARSE_ERROR = "parse_error"
    UNSUCCESSFUL = "unsuccessful"
    EMPTY = "empty"
    MALFORMED = "malformed"
    NO_DATA = "no_data"
    PROBE_OK = "probe_ok"
    PROBE_FAILED = "probe_failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class OptimizationRequest:
    admin_or_user_id: str
    origin: GeoPoint
    max_routes: int = 10
    max_hops: int = 8
    destination_keyword: str = "water"


@dataclass(frozen=True, slots=True)
class AttemptRecord:
    """One entry of the diagnostic trail kept for every resolution."""

    method: str
    outcome: AttemptOutcome
    reason: str = ""
    duration_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.outcome in (AttemptOutcome.SUCCESS, AttemptOutcome.PROBE_OK)

    def as_dict(self) -> dict:
        return {
            "method": self.method,
            "outcome": self.outcome.value,
            "reason": self.reason,
            "duration_ms": round(self.duration_ms, 3),
        }


@dataclass(frozen=True, slots=True)
class RouteCandidate:
    id: str
    destination: SupplyPoint
    distance_km: float
    travel_time: str
    polyline: Tuple[GeoPoint, ...]
    is_shortest: bool = False
    priority_rank: int = 0
    color_tag: str = ""


@dataclass(frozen=True, slots=True)
class RouteResult:
    request_id: str
    candidates: Tuple[RouteCandidate, ...]
    method: ResolutionMethod
    attempted_methods: Tuple[AttemptRecord, ...]
    created_at: datetime
    probe: Optional[AttemptRecord] = None

    @property
    def best(self) -> RouteCandidate:
        return self.candidates[0]


@dataclass(slots=True)
class ResolutionTrail:
    """Mutable accumulator for attempt records while a resolution runs."""

    probe: Optional[AttemptRecord] = None
    attempts: list[AttemptRecord] = field(default_factory=list)

    def record(self, attempt: AttemptRecord) -> None:
        self.attempts.append(attempt)

    def freeze(self) -> Tuple[AttemptRecord, ...]:
        return tuple(self.attempts)
