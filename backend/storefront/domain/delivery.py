"""
Delivery Domain Model

Per-store delivery pricing rules and the quote computed from them.
"""
from pydantic import BaseModel, Field
from typing import Any, Optional
from decimal import Decimal

from storefront.domain.base import RecordModel


DEFAULT_TIME_FROM = "00:30"
DEFAULT_TIME_TO = "01:00"

DEFAULT_DELIVERY_SETTINGS = {
    "delivery_enabled": False,
    "delivery_radius_km": 5.0,
    "price_per_km": 2.50,
    "minimum_delivery_fee": 5.00,
    "free_delivery_threshold": 50.00,
    "estimated_delivery_time_from": DEFAULT_TIME_FROM,
    "estimated_delivery_time_to": DEFAULT_TIME_TO,
}


class DeliverySettings(RecordModel):
    """
    Delivery settings of a store (one row per store)

    Fields:
        delivery_enabled: Whether the store delivers at all
        delivery_radius_km: Maximum distance served
        price_per_km: Fee per km of route distance
        minimum_delivery_fee: Floor applied to the per-km fee
        free_delivery_threshold: Order total from which delivery is free (0 disables)
        estimated_delivery_time_from / _to: Window shown at checkout ("HH:MM")
    """

    store_id: str
    delivery_enabled: bool = False
    delivery_radius_km: Decimal = Decimal("5.0")
    price_per_km: Decimal = Decimal("2.50")
    minimum_delivery_fee: Decimal = Decimal("5.00")
    free_delivery_threshold: Decimal = Decimal("50.00")
    estimated_delivery_time_from: Optional[str] = None
    estimated_delivery_time_to: Optional[str] = None

    def summary(self) -> dict:
        """Settings echoed back with every delivery quote"""
        return {
            "delivery_enabled": self.delivery_enabled,
            "delivery_radius_km": float(self.delivery_radius_km),
            "price_per_km": float(self.price_per_km),
            "minimum_delivery_fee": float(self.minimum_delivery_fee),
            "free_delivery_threshold": float(self.free_delivery_threshold),
            "estimated_delivery_time_from": self.estimated_delivery_time_from,
            "estimated_delivery_time_to": self.estimated_delivery_time_to,
        }

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["estimated_delivery_time_from"] = self.estimated_delivery_time_from or DEFAULT_TIME_FROM
        data["estimated_delivery_time_to"] = self.estimated_delivery_time_to or DEFAULT_TIME_TO
        return data


class DeliverySettingsUpdate(BaseModel):
    delivery_enabled: Any = None
    delivery_radius_km: float = 0
    price_per_km: float = 0
    minimum_delivery_fee: float = 0
    free_delivery_threshold: float = 0
    estimated_delivery_time_from: Optional[str] = None
    estimated_delivery_time_to: Optional[str] = None


class DeliveryQuoteRequest(BaseModel):
    distance_km: Optional[Any] = None
    order_total: Optional[Any] = None
    subtotal: Optional[Any] = None
    customer_address: Optional[str] = None


class DeliveryQuote(BaseModel):
    delivery_fee: float
    delivery_possible: bool
    reason: str
    distance_km: float
    settings: dict = Field(default_factory=dict)
