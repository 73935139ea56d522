import json
from pathlib import Path

import httpx
import pytest

from aquaroute.data.supply_points_repository import (
    get_supply_points,
    load_supply_points_from_file,
    load_supply_points_from_optimizer,
)
from aquaroute.services.routing.errors import MalformedResponseError, NetworkError, NoDataError
from aquaroute.services.routing.optimizer_client import OptimizerClient

ROWS = [
    {
        "id": 17,
        "latitude": 1.31,
        "longitude": 103.85,
        "street_name": "Orchard Rd",
        "address": "17 Orchard Rd",
        "point_of_interest": "Hydrant",
    },
    {"latitude": "1.32", "longitude": "103.86"},
    {"id": "broken", "latitude": 123.0, "longitude": 103.0},
]


def test_load_from_file_converts_and_skips_invalid_rows(dataset_file):
    dataset = load_supply_points_from_file(dataset_file(ROWS))

    assert len(dataset) == 2
    assert dataset.skipped == 1
    assert dataset.data_source == "test"
    first, second = dataset.points
    assert first.id == "17"
    assert first.name == "Hydrant"
    assert first.address == "17 Orchard Rd"
    assert first.metadata == {"street_name": "Orchard Rd", "point_of_interest": "Hydrant", "data_source": "test"}
    assert second.id == "supply-1"
    assert second.name == "Water Supply Point"
    assert second.location.latitude == 1.32


def test_load_from_file_accepts_bare_list(tmp_path: Path):
    path = tmp_path / "points.json"
    path.write_text(json.dumps(ROWS[:1]), encoding="utf-8")

    dataset = load_supply_points_from_file(path)

    assert len(dataset) == 1
    assert dataset.data_source == "file:points.json"


def test_missing_or_broken_file(tmp_path: Path):
    with pytest.raises(NoDataError):
        load_supply_points_from_file(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(MalformedResponseError):
        load_supply_points_from_file(broken)


def test_load_from_optimizer_sends_limit(optimizer_transport, calls, base_url):
    seen = {}

    def supply_points(request):
        seen["limit"] = request.url.params["limit"]
        return httpx.Response(200, json={"success": True, "points": ROWS, "data_source": "csv"})

    transport = optimizer_transport({"/water-supply-points": supply_points})
    with OptimizerClient(base_url, transport=transport) as client:
        dataset = load_supply_points_from_optimizer(client, limit=50)

    assert seen["limit"] == "50"
    assert dataset.data_source == "csv"
    assert len(dataset) == 2


def test_unsuccessful_optimizer_dataset_is_no_data(optimizer_transport, base_url):
    transport = optimizer_transport({"/water-supply-points": (200, {"success": False, "message": "no csv"})})
    with OptimizerClient(base_url, transport=transport) as client:
        with pytest.raises(NoDataError, match="no csv"):
            load_supply_points_from_optimizer(client)


def test_optimizer_failure_falls_back_to_local_file(optimizer_transport, dataset_file, unreachable, base_url):
    path = dataset_file(ROWS)
    transport = optimizer_transport({"/water-supply-points": unreachable})
    with OptimizerClient(base_url, transport=transport) as client:
        dataset = get_supply_points(client, path)

    assert dataset.data_source == "test"
    assert len(dataset) == 2


def test_optimizer_failure_without_local_file_propagates(optimizer_transport, unreachable, base_url, monkeypatch):
    from aquaroute.data import supply_points_repository

    monkeypatch.setattr(supply_points_repository.settings, "supply_points_file", None)
    transport = optimizer_transport({"/water-supply-points": unreachable})
    with OptimizerClient(base_url, transport=transport) as client:
        with pytest.raises(NetworkError):
            get_supply_points(client)
