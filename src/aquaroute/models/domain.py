"""Domain models for locations and water supply points."""

import math
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A WGS84 coordinate in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not GeoPoint.is_valid(self.latitude, self.longitude):
            raise ValueError(f"Invalid coordinates: ({self.latitude}, {self.longitude})")

    @staticmethod
    def is_valid(latitude: object, longitude: object) -> bool:
        """Return True when both values are finite numbers inside the WGS84 ranges."""
        if isinstance(latitude, bool) or isinstance(longitude, bool):
            return False
        if not isinstance(latitude, (int, float)) or not isinstance(longitude, (int, float)):
            return False
        if not (math.isfinite(latitude) and math.isfinite(longitude)):
            return False
        return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0

    def as_dict(self) -> dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True, slots=True)
class SupplyPoint:
    """Represents a water supply point that a route can end at."""

    id: str
    name: str
    address: str
    location: GeoPoint
    metadata: dict[str, str] = field(default_factory=dict)
