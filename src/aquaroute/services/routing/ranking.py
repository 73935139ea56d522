"""Ordering rules shared by every source of route candidates."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from .models import RouteCandidate

# Map colours by rank; rank 1 (the shortest route) is always red.
ROUTE_COLORS = ("red", "blue", "green", "orange", "purple", "pink", "teal", "indigo")


def color_for_rank(rank: int) -> str:
    return ROUTE_COLORS[(rank - 1) % len(ROUTE_COLORS)]


def rank_candidates(candidates: Iterable[RouteCandidate], max_routes: int) -> list[RouteCandidate]:
    """Sort by distance (ties by id), number the ranks from 1 and keep the first ``max_routes``.

    Truncation happens after the full sort so the true nearest point is never
    dropped.
    """
    ordered = sorted(candidates, key=lambda candidate: (candidate.distance_km, candidate.id))
    ranked = [
        replace(
            candidate,
            priority_rank=rank,
            is_shortest=rank == 1,
            color_tag=color_for_rank(rank),
        )
        for rank, candidate in enumerate(ordered, start=1)
    ]
    return ranked[:max_routes]
