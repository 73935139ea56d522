"""Geospatial helper functions."""

from __future__ import annotations

import math
from datetime import timedelta

import numpy as np

from ..models.domain import GeoPoint

EARTH_RADIUS_KM = 6371.0

# Average speeds (km/h) used to turn a distance into an expected travel time.
TRAVEL_SPEEDS_KMH: dict[str, float] = {
    "walking": 5.0,
    "bicycle": 15.0,
    "car": 60.0,
    "public_transport": 40.0,
    "emergency": 80.0,
}

BASE_INTERPOLATION_STEPS = 10
LONG_DISTANCE_THRESHOLD_KM = 100.0
LONG_DISTANCE_STEP_KM = 50.0
MAX_INTERPOLATION_STEPS = 100


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    if a == b:
        return 0.0
    phi1, phi2 = math.radians(a.latitude), math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push h just past 1 for near-antipodal points.
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def bearing_degrees(a: GeoPoint, b: GeoPoint) -> float:
    """Calculate the initial bearing from a to b."""

    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    delta_lambda = math.radians(b.longitude - a.longitude)
    y = math.sin(delta_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda)
    bearing = math.degrees(math.atan2(y, x))
    return (bearing + 360) % 360


def interpolate(a: GeoPoint, b: GeoPoint, steps: int) -> list[GeoPoint]:
    """Return ``steps + 1`` points evenly spaced from a to b, endpoints included.

    Interpolation is linear in latitude/longitude space, which drifts from the
    great-circle path over a few hundred kilometres. It is only used to draw
    synthetic polylines, so the approximation is accepted.
    """

    if steps < 1:
        raise ValueError("Interpolation needs at least one step.")
    latitudes = np.linspace(a.latitude, b.latitude, steps + 1)
    longitudes = np.linspace(a.longitude, b.longitude, steps + 1)
    points = [GeoPoint(float(lat), float(lon)) for lat, lon in zip(latitudes, longitudes)]
    # linspace is exact at the ends, but keep the caller's objects there anyway
    points[0] = a
    points[-1] = b
    return points


def interpolation_steps(distance_km: float) -> int:
    """Polyline density for a synthetic route: denser for routes beyond 100 km."""

    if distance_km <= LONG_DISTANCE_THRESHOLD_KM:
        return BASE_INTERPOLATION_STEPS
    extra = math.ceil((distance_km - LONG_DISTANCE_THRESHOLD_KM) / LONG_DISTANCE_STEP_KM)
    return min(BASE_INTERPOLATION_STEPS + extra, MAX_INTERPOLATION_STEPS)


def travel_duration(distance_km: float, mode: str = "car") -> timedelta:
    """Expected travel time for a distance at the fixed speed of a transport mode."""

    try:
        speed = TRAVEL_SPEEDS_KMH[mode]
    except KeyError as exc:
        raise ValueError(f"Unknown travel mode '{mode}'. Expected one of: {', '.join(TRAVEL_SPEEDS_KMH)}") from exc
    if distance_km < 0:
        raise ValueError(f"Distance must be non-negative, got {distance_km}")
    return timedelta(hours=distance_km / speed)


def format_duration(duration: timedelta) -> str:
    total_minutes = int(round(duration.total_seconds() / 60.0))
    hours, minutes = divmod(total_minutes, 60)
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes} min"


def estimate_travel_time(distance_km: float, mode: str = "car") -> str:
    """Travel time formatted as hours and minutes, e.g. ``"1h 25m"`` or ``"12 min"``."""

    return format_duration(travel_duration(distance_km, mode))
