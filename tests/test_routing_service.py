from datetime import datetime, timezone

import pytest

from aquaroute.config import settings
from aquaroute.models.domain import GeoPoint, SupplyPoint
from aquaroute.schemas.routing import ResolveRouteRequest
from aquaroute.services.routing import service as routing_service
from aquaroute.services.routing.models import (
    AttemptOutcome,
    AttemptRecord,
    ResolutionMethod,
    RouteCandidate,
    RouteResult,
)


def _payload(**overrides) -> ResolveRouteRequest:
    body = {"admin_id": "  admin-7 ", "current_location": {"latitude": 1.3, "longitude": 103.85}}
    body.update(overrides)
    return ResolveRouteRequest.model_validate(body)


def _result() -> RouteResult:
    origin = GeoPoint(1.3, 103.85)
    destination = SupplyPoint(
        id="w1",
        name="Hydrant",
        address="1 Canal St",
        location=GeoPoint(1.31, 103.85),
        metadata={"source": "NEAREST_LOOKUP"},
    )
    candidate = RouteCandidate(
        id="w1",
        destination=destination,
        distance_km=1.11,
        travel_time="1 min",
        polyline=(origin, destination.location),
        is_shortest=True,
        priority_rank=1,
        color_tag="red",
    )
    return RouteResult(
        request_id="abc",
        candidates=(candidate,),
        method=ResolutionMethod.NEAREST_LOOKUP,
        attempted_methods=(
            AttemptRecord("GENETIC", AttemptOutcome.TIMEOUT, "timed out", 30000.0),
            AttemptRecord("NEAREST_LOOKUP", AttemptOutcome.SUCCESS, "1 candidate(s)", 12.34567),
        ),
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        probe=AttemptRecord("PROBE", AttemptOutcome.PROBE_OK),
    )


def test_build_request_applies_configured_defaults():
    request = routing_service.build_request(_payload())

    assert request.admin_or_user_id == "admin-7"
    assert request.origin == GeoPoint(1.3, 103.85)
    assert request.max_routes == settings.default_max_routes
    assert request.max_hops == settings.default_max_hops
    assert request.destination_keyword == settings.default_destination_keyword


def test_build_request_keeps_explicit_values():
    request = routing_service.build_request(_payload(max_routes=2, max_hops=3, destination_keyword="tap"))

    assert (request.max_routes, request.max_hops, request.destination_keyword) == (2, 3, "tap")


def test_result_to_model_flattens_domain_objects():
    model = routing_service.result_to_model(_result())

    assert model.method == "NEAREST_LOOKUP"
    assert model.probe.outcome == "probe_ok"
    assert [a.outcome for a in model.attempted_methods] == ["timeout", "success"]
    assert model.attempted_methods[1].duration_ms == pytest.approx(12.346)
    [candidate] = model.candidates
    assert candidate.destination.location.latitude == 1.31
    assert [(p.latitude, p.longitude) for p in candidate.polyline] == [(1.3, 103.85), (1.31, 103.85)]
    assert candidate.color_tag == "red"


def test_resolve_route_uses_the_resolver(monkeypatch):
    seen = {}

    class StubResolver:
        def resolve(self, request):
            seen["request"] = request
            return _result()

    monkeypatch.setattr(routing_service, "RouteResolver", StubResolver)
    model = routing_service.resolve_route(_payload(max_routes=4))

    assert seen["request"].max_routes == 4
    assert model.request_id == "abc"
