"""System-level routes such as health checks."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from redis.exceptions import RedisError

from storefront.config import settings
from storefront.services.catalog.loader import get_catalog
from storefront.services.session.redis_client import RedisDependency

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/")
async def read_root() -> dict[str, str]:
    """Landing endpoint used by smoke tests."""

    return {"message": "Papalote Storefront"}


@router.get("/health")
async def health_check(client: RedisDependency) -> dict[str, str | int]:
    """Health check endpoint with Redis connectivity check."""

    try:
        redis_status = "connected" if await client.ping() else "disconnected"
    except (RedisError, OSError) as exc:
        logger.warning("Redis ping failed: %s", exc)
        redis_status = "disconnected"

    return {
        "status": "healthy",
        "redis": redis_status,
        "products": len(get_catalog()),
        "environment": settings.ENVIRONMENT,
    }
