"""
Analytics API Endpoints
Storefront event tracking and the store dashboard numbers
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from storefront.api.deps import INTERNAL_ERROR, client_ip, get_owned_store
from storefront.core.auth import TokenUser, get_current_user
from storefront.domain.analytics import AnalyticsEventCreate, StoreAnalytics, period_to_days
from storefront.repositories.analytics_repository import AnalyticsRepository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/analytics/track")
async def track_event(event: AnalyticsEventCreate, request: Request):
    """Record a page view, product click or cart click"""
    record = event.model_dump()
    record["user_agent"] = request.headers.get("user-agent")
    record["ip_address"] = client_ip(request, fallback_header="x-real-ip")

    try:
        AnalyticsRepository().insert_event(record)
        return {"success": True}
    except Exception as e:
        logger.exception(f"Failed to record {event.event_type} for {event.store_slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to record event")


@router.get("/stores/{slug}/analytics")
async def get_store_analytics(
    slug: str,
    period: Optional[str] = Query("30d", description="7d, 30d or 90d"),
    user: TokenUser = Depends(get_current_user)
):
    try:
        get_owned_store(slug, user, detail="No permission")
        row = AnalyticsRepository().get_store_analytics(slug, period_to_days(period))
        return StoreAnalytics.from_row(row).model_dump()

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to load analytics of {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)
