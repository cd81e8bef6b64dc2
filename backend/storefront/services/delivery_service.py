"""
Delivery Service - delivery settings and delivery fee quotes

Fee rules, in order:
1. delivery disabled -> not possible
2. distance beyond the store radius -> not possible
3. free threshold > 0 and order total >= threshold -> free
4. otherwise max(distance * price_per_km, minimum_delivery_fee)

The checkout quote (quote_public) applies rule 3 before geocoding anything.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from storefront.connectors.geocoding_connector import GeocodingConnector
from storefront.domain.delivery import (
    DEFAULT_TIME_FROM,
    DEFAULT_TIME_TO,
    DeliveryQuote,
    DeliveryQuoteRequest,
    DeliverySettings,
    DeliverySettingsUpdate,
)
from storefront.domain.store import Store
from storefront.repositories.delivery_repository import DeliveryRepository
from storefront.utils.distance import calculate_distance

logger = logging.getLogger(__name__)


class DeliverySettingsNotFound(Exception):
    pass


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def time_to_hours(value: str) -> float:
    """'01:30' -> 1.5"""
    hours, _, minutes = value.partition(":")
    return int(hours or 0) + int(minutes or 0) / 60


def estimated_hours(time_from: Optional[str], time_to: Optional[str]) -> int:
    """Mean of the delivery window, rounded to whole hours"""
    from_hours = time_to_hours(time_from or DEFAULT_TIME_FROM)
    to_hours = time_to_hours(time_to or DEFAULT_TIME_TO)
    return round((from_hours + to_hours) / 2)


def calculate_delivery_fee(settings: DeliverySettings, distance_km: float, order_total: float) -> DeliveryQuote:
    radius = float(settings.delivery_radius_km)
    threshold = float(settings.free_delivery_threshold)

    if not settings.delivery_enabled:
        return DeliveryQuote(
            delivery_fee=0,
            delivery_possible=False,
            reason="Delivery is not enabled for this store",
            distance_km=distance_km,
            settings=settings.summary()
        )

    if distance_km > radius:
        return DeliveryQuote(
            delivery_fee=0,
            delivery_possible=False,
            reason=f"Distance ({distance_km}km) is outside the delivery radius ({radius:g}km)",
            distance_km=distance_km,
            settings=settings.summary()
        )

    if threshold > 0 and order_total >= threshold:
        return DeliveryQuote(
            delivery_fee=0,
            delivery_possible=True,
            reason="Free delivery - minimum order value reached",
            distance_km=distance_km,
            settings=settings.summary()
        )

    fee = max(distance_km * float(settings.price_per_km), float(settings.minimum_delivery_fee))

    return DeliveryQuote(
        delivery_fee=round(fee, 2),
        delivery_possible=True,
        reason="",
        distance_km=distance_km,
        settings=settings.summary()
    )


def validate_settings_update(update: DeliverySettingsUpdate) -> Dict[str, Any]:
    """
    Check a settings payload and return the columns to upsert

    Raises:
        ValueError: delivery_enabled is not a boolean or a value is negative
    """
    if not isinstance(update.delivery_enabled, bool):
        raise ValueError("delivery_enabled must be a boolean")

    amounts = {
        "delivery_radius_km": update.delivery_radius_km,
        "price_per_km": update.price_per_km,
        "minimum_delivery_fee": update.minimum_delivery_fee,
        "free_delivery_threshold": update.free_delivery_threshold,
    }
    for name, value in amounts.items():
        if value < 0:
            raise ValueError(f"{name} must be zero or greater")

    time_from = update.estimated_delivery_time_from or DEFAULT_TIME_FROM
    time_to = update.estimated_delivery_time_to or DEFAULT_TIME_TO
    try:
        hours = estimated_hours(time_from, time_to)
    except ValueError:
        raise ValueError("Delivery time must use the HH:MM format")

    return {
        "delivery_enabled": update.delivery_enabled,
        **amounts,
        "estimated_delivery_time_from": time_from,
        "estimated_delivery_time_to": time_to,
        "estimated_delivery_time_hours": hours,
    }


class DeliveryService:
    """
    Delivery settings per store and fee quotes for the checkout
    """

    def __init__(self, repository: DeliveryRepository = None, geocoder: GeocodingConnector = None):
        self.repository = repository or DeliveryRepository()
        self.geocoder = geocoder or GeocodingConnector()

    def get_settings(self, store: Store) -> DeliverySettings:
        """Settings of the store, creating the defaults on first access"""
        current = self.repository.find_by_store(store.id)
        if current is not None:
            return current
        return self.repository.create_default(store.id)

    def update_settings(self, store: Store, update: DeliverySettingsUpdate) -> DeliverySettings:
        values = validate_settings_update(update)
        saved = self.repository.upsert(store.id, values)
        logger.info(f"Delivery settings updated for store {store.slug}")
        return saved

    async def resolve_distance(self, store: Store, request: DeliveryQuoteRequest) -> float:
        """
        Distance from an explicit distance_km or by geocoding the address

        Raises:
            ValueError: no usable distance can be determined
        """
        if _is_number(request.distance_km):
            if request.distance_km < 0:
                raise ValueError("distance_km must be zero or greater")
            return float(request.distance_km)

        if request.distance_km is not None or not request.customer_address:
            raise ValueError("distance_km or customer_address is required")

        if not store.has_coordinates:
            raise ValueError("Store location is not configured")

        coordinates = await self.geocoder.geocode(request.customer_address)
        if coordinates is None:
            raise ValueError("Could not calculate the distance. Check the address")

        latitude, longitude = coordinates
        return calculate_distance(store.latitude, store.longitude, latitude, longitude)

    async def locate_store(self, store: Store) -> Tuple[float, float]:
        """
        Saved coordinates of the store, else its geocoded address

        Raises:
            ValueError: no coordinates and no address that can be located
        """
        if store.has_coordinates:
            return store.latitude, store.longitude

        if not store.address_line:
            raise ValueError("Store address is not configured")

        coordinates = await self.geocoder.geocode(store.address_line)
        if coordinates is None:
            raise ValueError("Could not locate the store. Check the store address")
        return coordinates

    async def quote(self, store: Store, request: DeliveryQuoteRequest) -> DeliveryQuote:
        """
        Raises:
            ValueError: invalid order total or distance
            DeliverySettingsNotFound: the store never saved delivery settings
        """
        if not _is_number(request.order_total) or request.order_total < 0:
            raise ValueError("order_total must be a number greater than or equal to zero")

        distance_km = await self.resolve_distance(store, request)

        settings = self.repository.find_by_store(store.id)
        if settings is None:
            raise DeliverySettingsNotFound(store.slug)

        return calculate_delivery_fee(settings, distance_km, float(request.order_total))

    async def quote_public(self, store: Store, request: DeliveryQuoteRequest) -> DeliveryQuote:
        """
        Quote for customers at checkout

        The free delivery check runs on the subtotal (or the order total)
        before any geocoding, and a free quote reports a distance of 0. A
        store without coordinates is located by its address.

        Raises:
            ValueError: invalid order total, missing address or unknown location
            DeliverySettingsNotFound: the store never saved delivery settings
        """
        if not _is_number(request.order_total) or request.order_total < 0:
            raise ValueError("order_total must be a number greater than or equal to zero")

        if not _is_number(request.distance_km) and not request.customer_address:
            raise ValueError("customer_address is required")

        settings = self.repository.find_by_store(store.id)
        if settings is None:
            raise DeliverySettingsNotFound(store.slug)

        order_value = float(request.order_total)
        if _is_number(request.subtotal) and request.subtotal > 0:
            order_value = float(request.subtotal)

        threshold = float(settings.free_delivery_threshold)
        if not settings.delivery_enabled or (threshold > 0 and order_value >= threshold):
            return calculate_delivery_fee(settings, 0.0, order_value)

        if _is_number(request.distance_km):
            distance_km = await self.resolve_distance(store, request)
        else:
            store_latitude, store_longitude = await self.locate_store(store)
            coordinates = await self.geocoder.geocode(request.customer_address)
            if coordinates is None:
                raise ValueError("Could not calculate the distance. Check the address")
            distance_km = calculate_distance(store_latitude, store_longitude, *coordinates)

        return calculate_delivery_fee(settings, distance_km, order_value)
