import math

import pytest

from aquaroute.data.supply_points_repository import SupplyPointDataset
from aquaroute.models.domain import GeoPoint, SupplyPoint
from aquaroute.services.geospatial import haversine_km
from aquaroute.services.routing.errors import NoDataError
from aquaroute.services.routing.fallback import LocalFallbackCalculator

ORIGIN = GeoPoint(0.0, 0.0)
KM_PER_DEGREE = haversine_km(GeoPoint(0.0, 0.0), GeoPoint(1.0, 0.0))


def _point(pid: str, distance_km: float) -> SupplyPoint:
    return SupplyPoint(
        id=pid,
        name=f"Tap {pid}",
        address=f"{pid} Main St",
        location=GeoPoint(distance_km / KM_PER_DEGREE, 0.0),
        metadata={"data_source": "test"},
    )


def test_fallback_ranks_every_point_by_distance():
    dataset = [_point("p5", 5.0), _point("p2", 2.0), _point("p8", 8.0)]
    candidates = LocalFallbackCalculator().compute_locally(ORIGIN, dataset, max_routes=10)

    assert [c.distance_km for c in candidates] == pytest.approx([2.0, 5.0, 8.0])
    assert [c.priority_rank for c in candidates] == [1, 2, 3]
    assert [c.is_shortest for c in candidates] == [True, False, False]
    assert [c.id for c in candidates] == ["p2", "p5", "p8"]
    for candidate in candidates:
        assert candidate.polyline[0] == ORIGIN
        assert candidate.polyline[-1] == candidate.destination.location
        assert len(candidate.polyline) == 11
        assert candidate.destination.metadata["source"] == "LOCAL_FALLBACK"
        assert candidate.destination.metadata["data_source"] == "test"
        assert candidate.destination.metadata["bearing_deg"] == "0.0"


def test_truncation_happens_after_sorting():
    dataset = [_point(f"p{i}", 10.0 + i) for i in range(20)] + [_point("nearest", 0.5)]
    candidates = LocalFallbackCalculator().compute_locally(ORIGIN, dataset, max_routes=3)

    assert [c.id for c in candidates] == ["nearest", "p0", "p1"]


def test_no_distance_cutoff_in_sparse_regions():
    far_away = SupplyPoint(id="far", name="Far", address="", location=GeoPoint(45.0, 90.0))
    [candidate] = LocalFallbackCalculator().compute_locally(ORIGIN, [far_away], max_routes=5)

    assert candidate.distance_km > 5000
    assert len(candidate.polyline) == 100 + 1
    assert candidate.is_shortest


def test_antipodal_point_does_not_break_the_ranking():
    origin = GeoPoint(3.309661790284011, -89.77779913133884)
    nearby = SupplyPoint(id="near", name="Near", address="", location=GeoPoint(3.31, -89.77))
    antipode = SupplyPoint(
        id="antipode", name="Antipode", address="", location=GeoPoint(-3.309661790284011, 90.22220086866116)
    )
    candidates = LocalFallbackCalculator().compute_locally(origin, [antipode, nearby], max_routes=5)

    assert [c.id for c in candidates] == ["near", "antipode"]
    assert candidates[1].distance_km == pytest.approx(math.pi * 6371.0, rel=1e-6)
    assert candidates[1].polyline[-1] == antipode.location


def test_long_routes_get_denser_polylines():
    calculator = LocalFallbackCalculator()
    [near] = calculator.compute_locally(ORIGIN, [_point("near", 50.0)], max_routes=1)
    [far] = calculator.compute_locally(ORIGIN, [_point("far", 250.0)], max_routes=1)

    assert len(far.polyline) > len(near.polyline)


def test_travel_time_uses_car_speed():
    [candidate] = LocalFallbackCalculator().compute_locally(ORIGIN, [_point("p", 90.0)], max_routes=1)
    assert candidate.travel_time == "1h 30m"


def test_empty_dataset_raises_no_data():
    with pytest.raises(NoDataError):
        LocalFallbackCalculator().compute_locally(ORIGIN, [], max_routes=3)


def test_dataset_without_valid_points_raises_no_data():
    dataset = SupplyPointDataset(points=(), skipped=4, data_source="file:broken.json")
    with pytest.raises(NoDataError, match="4 rows skipped"):
        LocalFallbackCalculator().compute_locally(ORIGIN, dataset, max_routes=3)


def test_fetch_and_compute_reads_the_local_file(dataset_file):
    path = dataset_file(
        [
            {"id": "a", "latitude": 0.05, "longitude": 0.0, "street_name": "Canal St"},
            {"id": "bad", "latitude": None, "longitude": 0.0},
        ]
    )
    calculator = LocalFallbackCalculator(dataset_source=path)
    [candidate] = calculator.fetch_and_compute(ORIGIN, max_routes=5)

    assert candidate.id == "a"
    assert candidate.destination.address == "Canal St"
