"""Seller analytics dashboard routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.models.analytics import SellerDashboard
from storefront.services.analytics.metrics import (
    AnalyticsRepository,
    UnknownSellerError,
    get_analytics_repository,
)

router = APIRouter(prefix="/analytics", tags=["analytics"])

AnalyticsDependency = Annotated[AnalyticsRepository, Depends(get_analytics_repository)]


@router.get("/sellers/{seller_id}", response_model=SellerDashboard)
async def seller_dashboard(
    seller_id: str,
    repository: AnalyticsDependency,
) -> SellerDashboard:
    """Funnel, product conversions and order value for one seller."""

    try:
        return repository.dashboard(seller_id)
    except UnknownSellerError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
