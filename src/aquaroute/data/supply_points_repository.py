"""Water supply point loader: optimizer dataset endpoint first, local JSON file otherwise."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError

from ..config import settings
from ..models.domain import SupplyPoint
from ..schemas.optimizer import PointPayload, SupplyPointsResponse
from ..services.routing.errors import MalformedResponseError, NetworkError, NoDataError
from ..services.routing.optimizer_client import OptimizerClient

DEFAULT_SUPPLY_NAME = "Water Supply Point"
DEFAULT_ADDRESS = "Unknown address"

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SupplyPointDataset:
    """Supply points fetched for a single resolution."""

    points: tuple[SupplyPoint, ...]
    skipped: int = 0
    data_source: str = "unknown"

    def __len__(self) -> int:
        return len(self.points)


def to_supply_point(row: PointPayload, index: int, data_source: Optional[str] = None) -> SupplyPoint | None:
    """Convert a dataset row; rows without valid coordinates yield None."""
    location = row.to_geopoint()
    if location is None:
        return None
    metadata = {
        key: value
        for key, value in (
            ("street_name", row.street_name),
            ("point_of_interest", row.point_of_interest),
            ("data_source", data_source),
        )
        if value
    }
    return SupplyPoint(
        id=(row.id or "").strip() or f"supply-{index}",
        name=(row.name or row.point_of_interest or "").strip() or DEFAULT_SUPPLY_NAME,
        address=(row.address or row.street_name or "").strip() or DEFAULT_ADDRESS,
        location=location,
        metadata=metadata,
    )


def _build_dataset(rows: Iterable[PointPayload], data_source: str) -> SupplyPointDataset:
    points: list[SupplyPoint] = []
    skipped = 0
    for index, row in enumerate(rows):
        point = to_supply_point(row, index, data_source)
        if point is None:
            skipped += 1
            continue
        points.append(point)
    if skipped:
        logger.warning(f"Skipped {skipped} supply points with invalid coordinates ({data_source})")
    return SupplyPointDataset(points=tuple(points), skipped=skipped, data_source=data_source)


def _parse_response(data: object) -> SupplyPointsResponse:
    if isinstance(data, list):
        data = {"success": True, "points": data}
    try:
        return SupplyPointsResponse.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError(f"Supply point dataset does not match the expected schema: {exc}") from exc


def load_supply_points_from_optimizer(client: OptimizerClient, limit: int | None = None) -> SupplyPointDataset:
    """Fetch the full dataset from ``/water-supply-points``."""
    response = _parse_response(client.fetch_supply_points(limit=limit))
    if not response.success:
        raise NoDataError(response.message or "Optimizer refused to return the supply point dataset.")
    return _build_dataset(response.points, response.data_source or "optimizer")


def load_supply_points_from_file(source: Path | None = None) -> SupplyPointDataset:
    """Load the dataset from a local JSON file (same layout as the optimizer endpoint, or a bare list)."""
    path = source or settings.supply_points_file
    if path is None:
        raise NoDataError("No local supply point file is configured.")
    if not path.exists():
        raise NoDataError(f"Supply point file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise MalformedResponseError(f"Supply point file '{path}' is not valid JSON: {exc}") from exc
    response = _parse_response(data)
    return _build_dataset(response.points, response.data_source or f"file:{path.name}")


def get_supply_points(client: OptimizerClient | None, source: Path | None = None) -> SupplyPointDataset:
    """Get the dataset from the optimizer first, fall back to the local file if needed.

    Nothing is cached: every resolution sees a fresh dataset.
    """
    if client is None:
        return load_supply_points_from_file(source)

    local_file = source or settings.supply_points_file
    try:
        return load_supply_points_from_optimizer(client)
    except (NetworkError, MalformedResponseError, NoDataError) as exc:
        if local_file is None:
            raise
        logger.warning(f"Optimizer dataset unavailable ({exc}); loading supply points from {local_file}")
        return load_supply_points_from_file(local_file)
