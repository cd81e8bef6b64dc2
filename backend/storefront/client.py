"""
Storefront API client

Thin httpx wrapper used by merchant tooling and dashboards, plus the two
process-local caches they keep: the owner's store record and per-store print
settings.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from storefront.utils.cache import TTLCache

logger = logging.getLogger(__name__)

STORE_CACHE_TTL_SECONDS = 5 * 60


class StorefrontClientError(Exception):
    """Non-2xx answer from the API; message is the `error` field of the body"""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class StoreAccessError(Exception):
    """The cached store belongs to another user"""


class StorefrontClient:
    """
    Client for the storefront HTTP API

    Args:
        base_url: API root, e.g. https://api.example.com/api
        token: Supabase access token sent as a bearer token
        timeout: request timeout in seconds
        transport: optional httpx transport (used by tests)
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport
        )
        self.stores = StoreCache(self)
        self.print_settings = PrintSettingsCache(self)

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self._http.request(method, path, **kwargs)
        if response.is_success:
            return response.json()

        try:
            message = response.json().get("error") or response.reason_phrase
        except (ValueError, AttributeError):
            message = response.reason_phrase
        raise StorefrontClientError(response.status_code, message)

    def get_store(self, slug: str) -> Dict[str, Any]:
        return self._request("GET", f"/stores/{slug}")

    def get_print_settings(self, slug: str) -> Optional[Dict[str, Any]]:
        return self._request("GET", f"/stores/{slug}/print-settings").get("print_settings")

    def get_public_products(self, slug: str) -> list:
        return self._request("GET", f"/stores/{slug}/products-public").get("products", [])

    def validate_coupon(self, slug: str, coupon_code: str, order_value: float) -> Dict[str, Any]:
        return self._request(
            "POST",
            f"/stores/{slug}/validate-coupon",
            json={"coupon_code": coupon_code, "order_value": order_value}
        )

    def calculate_delivery(
        self,
        slug: str,
        order_total: float,
        distance_km: float = None,
        customer_address: str = None,
        subtotal: float = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"order_total": order_total}
        if subtotal is not None:
            body["subtotal"] = subtotal
        if distance_km is not None:
            body["distance_km"] = distance_km
        if customer_address:
            body["customer_address"] = customer_address
        return self._request("POST", f"/stores/{slug}/calculate-delivery-public", json=body)


class StoreCache:
    """
    One store record per (slug, user_id), kept for five minutes.

    Only records owned by the requesting user are cached.
    """

    def __init__(self, client: StorefrontClient, ttl_seconds: float = STORE_CACHE_TTL_SECONDS, cache: TTLCache = None):
        self.client = client
        self._cache = cache if cache is not None else TTLCache(ttl_seconds)

    def load(self, slug: str, user_id: str, force_refresh: bool = False) -> Dict[str, Any]:
        """
        Cached store of `user_id`

        Raises:
            StorefrontClientError: the store could not be fetched
            StoreAccessError: the store belongs to someone else
        """
        key = (slug, user_id)
        if not force_refresh:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        store = self.client.get_store(slug)
        if store.get("user_id") != user_id:
            raise StoreAccessError(f"User {user_id} does not own store {slug}")

        self._cache.set(key, store)
        return store

    def invalidate(self, slug: str, user_id: str) -> None:
        self._cache.invalidate((slug, user_id))


class PrintSettingsCache:
    """Print settings per store slug, loaded once; failures are remembered as None"""

    def __init__(self, client: StorefrontClient):
        self.client = client
        self._cache = TTLCache()

    def load(self, slug: str) -> Optional[Dict[str, Any]]:
        if slug in self._cache:
            return self._cache.get(slug)

        try:
            settings = self.client.get_print_settings(slug)
        except (StorefrontClientError, httpx.HTTPError) as e:
            logger.warning(f"Could not load print settings of {slug}: {e}")
            settings = None

        self._cache.set(slug, settings)
        return settings

    def get(self, slug: str) -> Optional[Dict[str, Any]]:
        return self._cache.get(slug)

    def set(self, slug: str, settings: Optional[Dict[str, Any]]) -> None:
        self._cache.set(slug, settings)

    def invalidate(self, slug: str) -> None:
        self._cache.invalidate(slug)
