"""Routing orchestration service for the HTTP layer."""

from __future__ import annotations

from ...config import settings
from ...models.domain import GeoPoint
from ...schemas.routing import (
    AttemptModel,
    Coordinates,
    ResolveRouteRequest,
    RouteCandidateModel,
    RouteResultModel,
    SupplyPointModel,
)
from .models import AttemptRecord, OptimizationRequest, RouteCandidate, RouteResult
from .resolver import RouteResolver


def build_request(payload: ResolveRouteRequest) -> OptimizationRequest:
    location = payload.current_location
    return OptimizationRequest(
        admin_or_user_id=payload.admin_id.strip(),
        origin=GeoPoint(location.latitude, location.longitude),
        max_routes=payload.max_routes or settings.default_max_routes,
        max_hops=payload.max_hops or settings.default_max_hops,
        destination_keyword=payload.destination_keyword or settings.default_destination_keyword,
    )


def _coordinates(point: GeoPoint) -> Coordinates:
    return Coordinates(latitude=point.latitude, longitude=point.longitude)


def attempt_to_model(attempt: AttemptRecord) -> AttemptModel:
    return AttemptModel(**attempt.as_dict())


def _candidate_to_model(candidate: RouteCandidate) -> RouteCandidateModel:
    destination = candidate.destination
    return RouteCandidateModel(
        id=candidate.id,
        destination=SupplyPointModel(
            id=destination.id,
            name=destination.name,
            address=destination.address,
            location=_coordinates(destination.location),
            metadata=dict(destination.metadata),
        ),
        distance_km=candidate.distance_km,
        travel_time=candidate.travel_time,
        polyline=[_coordinates(point) for point in candidate.polyline],
        is_shortest=candidate.is_shortest,
        priority_rank=candidate.priority_rank,
        color_tag=candidate.color_tag,
    )


def result_to_model(result: RouteResult) -> RouteResultModel:
    return RouteResultModel(
        request_id=result.request_id,
        method=result.method.value,
        candidates=[_candidate_to_model(candidate) for candidate in result.candidates],
        attempted_methods=[attempt_to_model(attempt) for attempt in result.attempted_methods],
        probe=attempt_to_model(result.probe) if result.probe else None,
        created_at=result.created_at,
    )


def resolve_route(payload: ResolveRouteRequest) -> RouteResultModel:
    resolver = RouteResolver()
    result = resolver.resolve(build_request(payload))
    return result_to_model(result)
