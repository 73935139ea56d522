"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import ResolveRouteRequest, RouteResultModel
from ...services.routing import service as routing_service
from ...services.routing.errors import AllStrategiesExhaustedError, InvalidRequestError, NO_ROUTE_MESSAGE

router = APIRouter(prefix="/routes", tags=["routes"])

logger = logging.getLogger(__name__)


@router.post("/resolve", response_model=RouteResultModel, status_code=status.HTTP_200_OK)
def resolve(payload: ResolveRouteRequest) -> RouteResultModel:
    try:
        return routing_service.resolve_route(payload)
    except InvalidRequestError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except AllStrategiesExhaustedError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "message": NO_ROUTE_MESSAGE,
                "attempts": [attempt.as_dict() for attempt in exc.attempts],
            },
        ) from exc
    except Exception as exc:
        logger.exception(f"Error resolving route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=NO_ROUTE_MESSAGE,
        ) from exc
