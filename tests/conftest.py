import json
from pathlib import Path
from typing import Callable

import httpx
import pytest

BASE_URL = "http://optimizer.test"


def _respond(responder, request: httpx.Request) -> httpx.Response:
    if callable(responder):
        return responder(request)
    status, payload = responder
    if isinstance(payload, (dict, list)):
        return httpx.Response(status, json=payload)
    return httpx.Response(status, text=payload or "")


@pytest.fixture
def calls() -> list:
    """(method, path) of every request seen by the mock optimizer."""
    return []


@pytest.fixture
def optimizer_transport(calls: list) -> Callable[[dict], httpx.MockTransport]:
    """Build a mock optimizer from a mapping of path -> (status, json) or path -> callable(request)."""

    def build(routes: dict) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            calls.append((request.method, request.url.path))
            responder = routes.get(request.url.path)
            if responder is None:
                return httpx.Response(404, json={"detail": "Not Found"})
            return _respond(responder, request)

        return httpx.MockTransport(handler)

    return build


@pytest.fixture
def dataset_file(tmp_path: Path) -> Callable[[list], Path]:
    def write(points: list) -> Path:
        path = tmp_path / "water_supply_points.json"
        path.write_text(json.dumps({"success": True, "points": points, "data_source": "test"}), encoding="utf-8")
        return path

    return write


def refuse_connection(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


@pytest.fixture
def unreachable() -> Callable[[httpx.Request], httpx.Response]:
    return refuse_connection


@pytest.fixture
def base_url() -> str:
    return BASE_URL
