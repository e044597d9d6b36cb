"""
Health check endpoints.
"""
from fastapi import APIRouter, status
from typing import Dict, Any
from loguru import logger

from catalog.config import settings
from catalog.db import repository
from catalog.db.postgres import get_session
from catalog.utils.metrics import update_active_products, set_api_health

router = APIRouter()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    """
    Basic health check endpoint.

    Returns:
        Simple health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@router.get("/health/detailed", status_code=status.HTTP_200_OK)
async def detailed_health_check() -> Dict[str, Any]:
    """
    Detailed health check with a PostgreSQL round trip.

    Reports the product count and updates the health and product gauges.
    A failing database marks the service as degraded.
    """
    health_status = {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "components": {},
    }

    try:
        async with get_session() as session:
            products_count = await repository.count_products(session)

        health_status["components"]["postgresql"] = {
            "status": "healthy",
            "products_count": products_count
        }
        update_active_products(products_count)
        logger.debug(f"PostgreSQL health check: {products_count} products")
        healthy = True

    except Exception as e:
        health_status["components"]["postgresql"] = {
            "status": "unhealthy",
            "error": str(e)
        }
        logger.error(f"PostgreSQL health check failed: {e}")
        healthy = False

    if not healthy:
        health_status["status"] = "degraded"

    set_api_health(healthy)

    return health_status
