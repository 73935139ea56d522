"""Client-side route computation used when no optimizer strategy succeeds."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from ...data.supply_points_repository import SupplyPointDataset, get_supply_points
from ...models.domain import GeoPoint, SupplyPoint
from ..geospatial import bearing_degrees, estimate_travel_time, haversine_km, interpolate, interpolation_steps
from .errors import NoDataError
from .models import ResolutionMethod, RouteCandidate
from .optimizer_client import OptimizerClient
from .ranking import rank_candidates

logger = logging.getLogger(__name__)


class LocalFallbackCalculator:
    """Ranks every known supply point by great-circle distance from the origin.

    There is no distance cut-off: in sparse regions the closest available
    point is still returned, however far away it is.
    """

    def __init__(self, travel_mode: str = "car", dataset_source: Path | None = None) -> None:
        self.travel_mode = travel_mode
        self.dataset_source = dataset_source

    def compute_locally(
        self,
        origin: GeoPoint,
        dataset: SupplyPointDataset | Sequence[SupplyPoint],
        max_routes: int,
    ) -> list[RouteCandidate]:
        points = dataset.points if isinstance(dataset, SupplyPointDataset) else tuple(dataset)
        if not points:
            skipped = dataset.skipped if isinstance(dataset, SupplyPointDataset) else 0
            if skipped:
                raise NoDataError(f"Supply point dataset has no valid coordinates ({skipped} rows skipped).")
            raise NoDataError("Supply point dataset is empty.")

        candidates = [self._candidate(origin, point) for point in points]
        ranked = rank_candidates(candidates, max_routes)
        logger.info(
            f"Local fallback ranked {len(candidates)} supply points; "
            f"nearest '{ranked[0].destination.name}' at {ranked[0].distance_km:.2f} km"
        )
        return ranked

    def fetch_and_compute(
        self,
        origin: GeoPoint,
        max_routes: int,
        client: OptimizerClient | None = None,
    ) -> list[RouteCandidate]:
        """Load a fresh dataset for this resolution and rank it."""
        dataset = get_supply_points(client, self.dataset_source)
        logger.debug(f"Fallback dataset: {len(dataset)} points from {dataset.data_source}")
        return self.compute_locally(origin, dataset, max_routes)

    def _candidate(self, origin: GeoPoint, point: SupplyPoint) -> RouteCandidate:
        distance = haversine_km(origin, point.location)
        metadata = {
            **point.metadata,
            "source": ResolutionMethod.LOCAL_FALLBACK.value,
            "bearing_deg": f"{bearing_degrees(origin, point.location):.1f}",
        }
        return RouteCandidate(
            id=point.id,
            destination=replace(point, metadata=metadata),
            distance_km=distance,
            travel_time=estimate_travel_time(distance, self.travel_mode),
            polyline=tuple(interpolate(origin, point.location, interpolation_steps(distance))),
        )
