"""
Prometheus metrics endpoint.

Example:
    GET /metrics

    Response:
        # HELP car_rental_bookings_created_total Total number of bookings created
        # TYPE car_rental_bookings_created_total counter
        car_rental_bookings_created_total{payment_type="online"} 12.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """
    Prometheus metrics endpoint.

    Returns:
        Response: Metrics in Prometheus text exposition format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
