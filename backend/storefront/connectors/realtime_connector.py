"""
Realtime Connector
Pushes order events to the websocket relay that feeds merchant dashboards

API CONFIGURATION:
- POST {REALTIME_NOTIFY_URL}/notify
  - Body: {"storeSlug": "...", "eventType": "order_updated", "data": {...}}

The relay may be configured with a ws:// or wss:// URL; the HTTP notify
endpoint lives on the same host.
"""
import logging
from typing import Any, Dict

import httpx

from storefront.core.config import settings

logger = logging.getLogger(__name__)


def _http_base(url: str) -> str:
    if url.startswith("ws://"):
        url = "http://" + url[len("ws://"):]
    elif url.startswith("wss://"):
        url = "https://" + url[len("wss://"):]
    return url.rstrip("/")


class RealtimeConnector:

    def __init__(self, base_url: str = None, timeout: float = 5.0):
        self.base_url = _http_base(base_url or settings.REALTIME_NOTIFY_URL)
        self.timeout = timeout

    @property
    def notify_url(self) -> str:
        return f"{self.base_url}/notify"

    async def notify(self, store_slug: str, event_type: str, data: Dict[str, Any]) -> bool:
        """
        Send one event to the relay

        Failures are logged and reported as False; callers never fail a
        request because the relay is down.
        """
        payload = {"storeSlug": store_slug, "eventType": event_type, "data": data}

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(self.notify_url, json=payload, timeout=self.timeout)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.warning(f"Realtime notification '{event_type}' for {store_slug} failed: {e}")
                return False

        logger.info(f"Realtime notification '{event_type}' sent for {store_slug}")
        return True
