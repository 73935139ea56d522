"""Routing request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class ResolveRouteRequest(BaseModel):
    admin_id: str = Field(..., min_length=1, description="Admin or user requesting the route.")
    current_location: Coordinates
    max_routes: Optional[int] = Field(default=None, ge=1, description="Defaults to AQR_DEFAULT_MAX_ROUTES.")
    max_hops: Optional[int] = Field(default=None, ge=1, description="Defaults to AQR_DEFAULT_MAX_HOPS.")
    destination_keyword: Optional[str] = Field(default=None, description="Defaults to 'water'.")


class SupplyPointModel(BaseModel):
    id: str
    name: str
    address: str
    location: Coordinates
    metadata: Dict[str, str]


class RouteCandidateModel(BaseModel):
    id: str
    destination: SupplyPointModel
    distance_km: float
    travel_time: str
    polyline: List[Coordinates]
    is_shortest: bool
    priority_rank: int
    color_tag: str


class AttemptModel(BaseModel):
    method: str
    outcome: str
    reason: str
    duration_ms: float


class RouteResultModel(BaseModel):
    request_id: str
    method: str
    candidates: List[RouteCandidateModel]
    attempted_methods: List[AttemptModel]
    probe: Optional[AttemptModel] = None
    created_at: datetime
