"""Wire schemas for the remote route optimizer responses.

Each optimizer endpoint answers with its own JSON layout. The models below are
deliberately lenient: coordinates may arrive as ``{lat, lng}``, ``{lat, lon}``
or ``{latitude, longitude}``, flat or nested under ``location``, or as
``[lat, lng]`` pairs, and distances may be named ``total_distance``,
``distance`` or ``distance_km``. Anything the models cannot make sense of
raises a ``ValidationError`` that the normalizer reports as malformed.
"""

from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.domain import GeoPoint

DISTANCE_ALIASES = AliasChoices("total_distance", "distance", "distance_km")


def _coerce_optional_str(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _drop_non_mappings(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    return value


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LocationPayload(_Lenient):
    latitude: Optional[float] = Field(default=None, validation_alias=AliasChoices("latitude", "lat"))
    longitude: Optional[float] = Field(default=None, validation_alias=AliasChoices("longitude", "lng", "lon"))

    @model_validator(mode="before")
    @classmethod
    def _accept_pairs(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError(f"Coordinate pair must have two values, got {len(data)}")
            return {"latitude": data[0], "longitude": data[1]}
        return data

    def to_geopoint(self) -> Optional[GeoPoint]:
        if not GeoPoint.is_valid(self.latitude, self.longitude):
            return None
        return GeoPoint(self.latitude, self.longitude)


class PointPayload(LocationPayload):
    """A named place: a route point, a segment endpoint or a supply point."""

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "nodeId", "node_id", "point_id"))
    name: Optional[str] = None
    address: Optional[str] = None
    label: Optional[str] = None
    street_name: Optional[str] = None
    point_of_interest: Optional[str] = None
    distance: Optional[float] = Field(default=None, validation_alias=DISTANCE_ALIASES)

    @model_validator(mode="before")
    @classmethod
    def _flatten_location(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        nested = data.get("location")
        if isinstance(nested, dict) and data.get("latitude", data.get("lat")) is None:
            merged = {key: value for key, value in data.items() if key != "location"}
            merged.update(nested)
            return merged
        return data

    @field_validator("id", "name", "address", "label", "street_name", "point_of_interest", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return _coerce_optional_str(value)


class GeneticRoute(_Lenient):
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "route_id"))
    distance: Optional[float] = Field(default=None, validation_alias=DISTANCE_ALIASES)
    destination_point: Optional[PointPayload] = None
    fitness_score: Optional[float] = None
    travel_time: Optional[str] = None
    polyline: Optional[List[LocationPayload]] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return _coerce_optional_str(value)


class SegmentPayload(_Lenient):
    from_point: Optional[PointPayload] = Field(default=None, validation_alias=AliasChoices("from", "from_point"))
    to_point: Optional[PointPayload] = Field(default=None, validation_alias=AliasChoices("to", "to_point"))
    distance: Optional[float] = Field(default=None, validation_alias=DISTANCE_ALIASES)
    mode: Optional[str] = None
    polyline: Optional[List[LocationPayload]] = None


class StandardRoute(_Lenient):
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "route_id"))
    distance: Optional[float] = Field(default=None, validation_alias=DISTANCE_ALIASES)
    points: List[PointPayload] = Field(default_factory=list)
    segments: List[SegmentPayload] = Field(default_factory=list)
    travel_time: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return _coerce_optional_str(value)

    @field_validator("points", "segments", mode="before")
    @classmethod
    def _only_mappings(cls, value: Any) -> Any:
        return _drop_non_mappings(value)


class _Envelope(_Lenient):
    success: bool = False
    message: Optional[str] = None

    @field_validator("success", mode="before")
    @classmethod
    def _null_is_false(cls, value: Any) -> Any:
        return False if value is None else value


class GeneticResponse(_Envelope):
    kind: Literal["genetic"] = "genetic"
    routes: List[GeneticRoute] = Field(default_factory=list)

    @field_validator("routes", mode="before")
    @classmethod
    def _only_mappings(cls, value: Any) -> Any:
        return _drop_non_mappings(value)


class StandardResponse(_Envelope):
    kind: Literal["standard"] = "standard"
    routes: List[StandardRoute] = Field(default_factory=list)

    @field_validator("routes", mode="before")
    @classmethod
    def _only_mappings(cls, value: Any) -> Any:
        return _drop_non_mappings(value)


class NearestLookupResponse(_Envelope):
    kind: Literal["nearest"] = "nearest"
    nearest_points: List[PointPayload] = Field(default_factory=list)

    @field_validator("nearest_points", mode="before")
    @classmethod
    def _only_mappings(cls, value: Any) -> Any:
        return _drop_non_mappings(value)


class SupplyPointsResponse(_Envelope):
    kind: Literal["supply_points"] = "supply_points"
    points: List[PointPayload] = Field(default_factory=list)
    data_source: Optional[str] = None

    @field_validator("points", mode="before")
    @classmethod
    def _only_mappings(cls, value: Any) -> Any:
        return _drop_non_mappings(value)
