"""
Analytics Domain Model

Storefront events (page views, product clicks, cart clicks) and the
aggregated dashboard numbers.
"""
from pydantic import BaseModel, Field
from typing import Any, List, Optional


# period query parameter -> days
ANALYTICS_PERIODS = {"7d": 7, "30d": 30, "90d": 90}
DEFAULT_PERIOD_DAYS = 30


class AnalyticsEventCreate(BaseModel):
    event_type: str
    store_slug: str
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    product_price: Optional[float] = None
    referrer: Optional[str] = None
    is_direct_link: bool = False
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None


class StoreAnalytics(BaseModel):
    """Totals for the store dashboard; every counter defaults to zero"""
    total_views: int = 0
    total_clicks: int = 0
    total_cart_clicks: int = 0
    total_header_cart_clicks: int = 0
    unique_visitors: int = 0
    avg_views_per_session: float = 0
    top_products: List[Any] = Field(default_factory=list)
    top_cart_products: List[Any] = Field(default_factory=list)
    daily_stats: List[Any] = Field(default_factory=list)

    @classmethod
    def from_row(cls, row: Optional[dict]) -> "StoreAnalytics":
        if not row:
            return cls()
        data = {key: value for key, value in dict(row).items() if value is not None}
        if "avg_views_per_session" in data:
            data["avg_views_per_session"] = float(data["avg_views_per_session"] or 0)
        return cls.model_validate(data)


def period_to_days(period: Optional[str]) -> int:
    return ANALYTICS_PERIODS.get(period or "", DEFAULT_PERIOD_DAYS)
