"""
Prometheus metrics endpoint.
"""
from fastapi import APIRouter, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from loguru import logger

from catalog.utils.metrics import get_metrics_summary

router = APIRouter(tags=["monitoring"])


@router.get("/metrics")
async def get_metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns:
        Response with metrics in the Prometheus text format
    """
    logger.debug("Metrics endpoint called")

    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@router.get("/metrics/summary")
async def get_metrics_summary_endpoint() -> dict:
    """
    Summary of the main metrics as JSON.
    """
    logger.debug("Metrics summary endpoint called")

    return {
        "status": "ok",
        "metrics": get_metrics_summary()
    }
