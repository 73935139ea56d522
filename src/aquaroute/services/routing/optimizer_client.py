"""HTTP client for interacting with the remote route optimizer."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import settings
from .errors import NetworkError, OptimizerStatusError, OptimizerTimeoutError, ResponseParseError
from .models import OptimizationRequest

GENETIC_PATH = "/optimize-route-genetic"
STANDARD_PATH = "/optimize-route-advanced"
NEAREST_PATH = "/find-nearest-points"
SUPPLY_POINTS_PATH = "/water-supply-points"
HEALTH_PATH = "/health"

JSON_HEADERS = {"Content-Type": "application/json"}

logger = logging.getLogger(__name__)


def _timeout(value: float | None, default: float) -> float:
    return default if value is None else value


class OptimizerClient:
    """Thin wrapper over ``httpx.Client`` for the optimizer endpoints.

    Every call takes its own timeout. Transport problems are translated into
    the resolution error kinds so callers never see raw ``httpx`` exceptions:
    ``OptimizerTimeoutError``, ``OptimizerStatusError``, ``NetworkError`` and
    ``ResponseParseError``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.optimizer_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("Optimizer base URL is not configured.")
        self._client = httpx.Client(headers=JSON_HEADERS, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "OptimizerClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _send(self, method: str, path: str, timeout: float, **kwargs: Any) -> dict:
        url = self._url(path)
        try:
            response = self._client.request(method, url, timeout=httpx.Timeout(timeout), **kwargs)
        except httpx.TimeoutException as exc:
            raise OptimizerTimeoutError(f"{method} {url} timed out after {timeout:.0f}s") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"{method} {url} failed: {exc}") from exc

        if not response.is_success:
            raise OptimizerStatusError(response.status_code, url)
        try:
            data = response.json()
        except ValueError as exc:
            raise ResponseParseError(f"{method} {url} returned a body that is not JSON") from exc
        if not isinstance(data, dict):
            raise ResponseParseError(f"{method} {url} returned {type(data).__name__}, expected an object")
        logger.debug(f"{method} {url} -> {response.status_code}, keys={sorted(data)}")
        return data

    def optimize_genetic(self, request: OptimizationRequest, timeout: float | None = None) -> dict:
        payload = {**optimization_payload(request), "optimization_method": "genetic"}
        return self._send("POST", GENETIC_PATH, _timeout(timeout, settings.genetic_timeout_seconds), json=payload)

    def optimize_standard(self, request: OptimizationRequest, timeout: float | None = None) -> dict:
        return self._send(
            "POST",
            STANDARD_PATH,
            _timeout(timeout, settings.standard_timeout_seconds),
            json=optimization_payload(request),
        )

    def find_nearest_points(self, request: OptimizationRequest, timeout: float | None = None) -> dict:
        payload = {
            "current_location": request.origin.as_dict(),
            "max_points": request.max_routes,
            "max_distance": settings.nearest_max_distance_km,
        }
        return self._send("POST", NEAREST_PATH, _timeout(timeout, settings.nearest_timeout_seconds), json=payload)

    def fetch_supply_points(self, limit: int | None = None, timeout: float | None = None) -> dict:
        params = {"limit": limit or settings.supply_points_limit}
        return self._send(
            "GET", SUPPLY_POINTS_PATH, _timeout(timeout, settings.dataset_timeout_seconds), params=params
        )

    def check_health(self) -> bool:
        return check_health(self.base_url, client=self._client)


def optimization_payload(request: OptimizationRequest) -> dict:
    """Request body shared by the genetic and standard optimizer endpoints."""
    return {
        "admin_id": request.admin_or_user_id,
        "current_location": request.origin.as_dict(),
        "destination_keyword": request.destination_keyword,
        "max_routes": request.max_routes,
        "max_hops": request.max_hops,
    }


def check_health(
    base_url: str | None = None,
    *,
    client: httpx.Client | None = None,
    primary_timeout: float | None = None,
    secondary_timeout: float | None = None,
) -> bool:
    """Check optimizer reachability.

    Tries ``/health`` first. Some deployments do not expose it, so a 404 there
    is followed by a request to the service root. Never raises; any failure
    reads as unhealthy.
    """
    base = (base_url or settings.optimizer_base_url or "").rstrip("/")
    if not base:
        return False
    primary = _timeout(primary_timeout, settings.probe_timeout_seconds)
    secondary = _timeout(secondary_timeout, settings.probe_secondary_timeout_seconds)
    owns_client = client is None
    http = client or httpx.Client(headers=JSON_HEADERS)
    try:
        response = http.get(f"{base}{HEALTH_PATH}", timeout=httpx.Timeout(primary))
        if response.status_code == 200:
            return True
        if response.status_code != 404:
            logger.warning(f"Optimizer health check failed with status {response.status_code}")
            return False
        logger.debug("Optimizer has no /health endpoint, checking the root endpoint")
        root_response = http.get(base, timeout=httpx.Timeout(secondary))
        return root_response.status_code == 200
    except httpx.HTTPError as exc:
        logger.warning(f"Optimizer health check error: {exc}")
        return False
    except Exception as exc:
        logger.warning(f"Unexpected optimizer health check error: {exc}")
        return False
    finally:
        if owns_client:
            http.close()
