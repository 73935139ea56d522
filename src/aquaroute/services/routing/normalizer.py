"""Convert optimizer responses into canonical route candidates."""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional, Sequence

from pydantic import BaseModel, ValidationError

from ...data.supply_points_repository import DEFAULT_ADDRESS, DEFAULT_SUPPLY_NAME
from ...models.domain import GeoPoint, SupplyPoint
from ...schemas.optimizer import (
    GeneticResponse,
    GeneticRoute,
    LocationPayload,
    NearestLookupResponse,
    PointPayload,
    StandardResponse,
    StandardRoute,
)
from ..geospatial import estimate_travel_time, haversine_km, interpolate
from .errors import EmptyResultError, MalformedResponseError, UnsuccessfulResponseError
from .models import OptimizationRequest, ResolutionMethod, RouteCandidate
from .ranking import rank_candidates

COORDINATE_TOLERANCE_DEG = 1e-6
TRAVEL_MODE = "car"

logger = logging.getLogger(__name__)


def _close(a: GeoPoint, b: GeoPoint) -> bool:
    return (
        abs(a.latitude - b.latitude) <= COORDINATE_TOLERANCE_DEG
        and abs(a.longitude - b.longitude) <= COORDINATE_TOLERANCE_DEG
    )


def _vertices(raw: Optional[Sequence[LocationPayload]]) -> list[GeoPoint]:
    points: list[GeoPoint] = []
    for vertex in raw or ():
        point = vertex.to_geopoint()
        if point is None:
            logger.debug(f"Dropping polyline vertex with invalid coordinates: {vertex}")
            continue
        if points and _close(points[-1], point):
            continue
        points.append(point)
    return points


def anchor_polyline(vertices: Sequence[GeoPoint], origin: GeoPoint, destination: GeoPoint) -> tuple[GeoPoint, ...]:
    """Make a polyline start exactly at the origin and end exactly at the destination.

    An empty polyline becomes a two-point straight line.
    """
    if not vertices:
        return tuple(interpolate(origin, destination, 1))
    points = list(vertices)
    if _close(points[0], origin):
        points[0] = origin
    else:
        points.insert(0, origin)
    if len(points) > 1 and _close(points[-1], destination):
        points[-1] = destination
    else:
        points.append(destination)
    return tuple(points)


def _destination(point: Optional[PointPayload], what: str) -> GeoPoint:
    if point is None:
        raise MalformedResponseError(f"{what} has no destination")
    location = point.to_geopoint()
    if location is None:
        raise MalformedResponseError(
            f"{what} has missing or invalid destination coordinates ({point.latitude}, {point.longitude})"
        )
    return location


def _distance(value: Optional[float], origin: GeoPoint, destination: GeoPoint, what: str) -> float:
    if value is None:
        return haversine_km(origin, destination)
    if not math.isfinite(value) or value < 0:
        raise MalformedResponseError(f"{what} has an invalid distance: {value}")
    return float(value)


def _supply_point(point: PointPayload, location: GeoPoint, fallback_id: str, metadata: dict[str, str]) -> SupplyPoint:
    name = (point.name or point.point_of_interest or point.label or "").strip() or DEFAULT_SUPPLY_NAME
    address = (point.address or point.street_name or "").strip() or DEFAULT_ADDRESS
    extras = {"street_name": point.street_name, "point_of_interest": point.point_of_interest}
    metadata = {**metadata, **{key: value for key, value in extras.items() if value}}
    return SupplyPoint(
        id=(point.id or "").strip() or fallback_id,
        name=name,
        address=address,
        location=location,
        metadata=metadata,
    )


def _candidate(
    candidate_id: str,
    destination: SupplyPoint,
    distance_km: float,
    polyline: tuple[GeoPoint, ...],
    travel_time: Optional[str],
) -> RouteCandidate:
    return RouteCandidate(
        id=candidate_id,
        destination=destination,
        distance_km=distance_km,
        travel_time=(travel_time or "").strip() or estimate_travel_time(distance_km, TRAVEL_MODE),
        polyline=polyline,
    )


def _decode_genetic(response: GeneticResponse, origin: GeoPoint) -> list[RouteCandidate]:
    candidates = []
    for index, route in enumerate(response.routes):
        what = f"Genetic route {index}"
        location = _destination(route.destination_point, what)
        distance = _distance(route.distance, origin, location, what)
        fallback_id = f"genetic-{index}"
        metadata = {
            "source": ResolutionMethod.GENETIC.value,
            "fitness_score": f"{route.fitness_score or 0.0:g}",
        }
        destination = _supply_point(route.destination_point, location, f"{fallback_id}-destination", metadata)
        polyline = anchor_polyline(_vertices(route.polyline), origin, location)
        candidates.append(_candidate(route.id or fallback_id, destination, distance, polyline, route.travel_time))
    return candidates


def _standard_destination(route: StandardRoute) -> Optional[PointPayload]:
    # The first entry of ``points`` is the start, so a lone point only counts
    # when there is no segment to take the destination from.
    if len(route.points) >= 2:
        return route.points[-1]
    for segment in reversed(route.segments):
        if segment.to_point is not None:
            return segment.to_point
    return route.points[-1] if route.points else None


def _standard_vertices(route: StandardRoute) -> list[GeoPoint]:
    raw: list[LocationPayload] = []
    for segment in route.segments:
        if segment.polyline:
            raw.extend(segment.polyline)
            continue
        raw.extend(point for point in (segment.from_point, segment.to_point) if point is not None)
    return _vertices(raw)


def _decode_standard(response: StandardResponse, origin: GeoPoint) -> list[RouteCandidate]:
    candidates = []
    for index, route in enumerate(response.routes):
        what = f"Standard route {index}"
        point = _standard_destination(route)
        location = _destination(point, what)
        distance_value = route.distance
        segment_distances = [segment.distance for segment in route.segments if segment.distance is not None]
        if distance_value is None and segment_distances:
            distance_value = sum(segment_distances)
        distance = _distance(distance_value, origin, location, what)
        fallback_id = f"standard-{index}"
        modes = [segment.mode for segment in route.segments if segment.mode]
        metadata = {
            "source": ResolutionMethod.STANDARD.value,
            "segments": str(len(route.segments)),
        }
        if modes:
            metadata["modes"] = ",".join(modes)
        destination = _supply_point(point, location, f"{fallback_id}-destination", metadata)
        polyline = anchor_polyline(_standard_vertices(route), origin, location)
        candidates.append(_candidate(route.id or fallback_id, destination, distance, polyline, route.travel_time))
    return candidates


def _decode_nearest(response: NearestLookupResponse, origin: GeoPoint) -> list[RouteCandidate]:
    candidates = []
    for index, point in enumerate(response.nearest_points):
        what = f"Nearest point {index}"
        location = _destination(point, what)
        distance = _distance(point.distance, origin, location, what)
        fallback_id = f"nearest-{index}"
        destination = _supply_point(point, location, fallback_id, {"source": ResolutionMethod.NEAREST_LOOKUP.value})
        polyline = anchor_polyline([], origin, location)
        candidates.append(_candidate(point.id or fallback_id, destination, distance, polyline, None))
    return candidates


Decoder = Callable[[BaseModel, GeoPoint], list[RouteCandidate]]

_SCHEMAS: dict[ResolutionMethod, tuple[type[BaseModel], Decoder]] = {
    ResolutionMethod.GENETIC: (GeneticResponse, _decode_genetic),
    ResolutionMethod.STANDARD: (StandardResponse, _decode_standard),
    ResolutionMethod.NEAREST_LOOKUP: (NearestLookupResponse, _decode_nearest),
}


def normalize(raw_payload: dict, method: ResolutionMethod, request: OptimizationRequest) -> list[RouteCandidate]:
    """Decode an optimizer payload for ``method`` into ranked candidates.

    Raises ``UnsuccessfulResponseError`` when the payload does not report
    success, ``EmptyResultError`` when it holds no candidate and
    ``MalformedResponseError`` when required geometry is missing.
    """
    try:
        schema, decoder = _SCHEMAS[method]
    except KeyError as exc:
        raise ValueError(f"{method.value} responses are not produced by the optimizer") from exc

    try:
        response = schema.model_validate(raw_payload)
    except ValidationError as exc:
        raise MalformedResponseError(f"{method.value} payload does not match its schema: {exc}") from exc

    if response.success is not True:
        message = response.message or "success flag not set"
        raise UnsuccessfulResponseError(f"{method.value} reported failure: {message}")

    candidates = decoder(response, request.origin)
    if not candidates:
        raise EmptyResultError(f"{method.value} returned no candidates")
    return rank_candidates(candidates, request.max_routes)
