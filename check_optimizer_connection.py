#!/usr/bin/env python3
"""Manual check that the configured route optimizer is reachable and resolving routes."""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from aquaroute.config import settings
from aquaroute.models.domain import GeoPoint
from aquaroute.services.routing.errors import AllStrategiesExhaustedError
from aquaroute.services.routing.models import OptimizationRequest
from aquaroute.services.routing.optimizer_client import check_health
from aquaroute.services.routing.resolver import RouteResolver


def main():
    print("=" * 60)
    print("Route Optimizer Connection Test")
    print("=" * 60)
    print()

    print("1. Checking optimizer configuration...")
    if not settings.optimizer_base_url:
        print("   [ERROR] Optimizer base URL is not configured")
        print("   Please set AQR_OPTIMIZER_BASE_URL in your .env file")
        return 1
    print(f"   [OK] Optimizer Base URL: {settings.optimizer_base_url}")
    print()

    print("2. Testing optimizer health check...")
    if check_health():
        print("   [OK] Optimizer is healthy and accessible!")
    else:
        print("   [WARN] Health check failed; strategies will still be attempted")
    print()

    print("3. Resolving a sample route...")
    latitude = float(sys.argv[1]) if len(sys.argv) > 2 else 1.3521
    longitude = float(sys.argv[2]) if len(sys.argv) > 2 else 103.8198
    request = OptimizationRequest(admin_or_user_id="connection-check", origin=GeoPoint(latitude, longitude))
    try:
        result = RouteResolver().resolve(request)
    except AllStrategiesExhaustedError as e:
        print(f"   [ERROR] {e.describe()}")
        return 1

    for attempt in result.attempted_methods:
        print(f"   {attempt.method:<15} {attempt.outcome.value:<14} {attempt.duration_ms:8.0f}ms  {attempt.reason}")
    best = result.best
    print(f"   [OK] Resolved with {result.method.value}: {len(result.candidates)} candidate(s)")
    print(f"   [OK] Nearest: {best.destination.name} ({best.destination.address}), "
          f"{best.distance_km:.2f} km, {best.travel_time}")
    print()

    print("=" * 60)
    print("[SUCCESS] Route resolution is working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
