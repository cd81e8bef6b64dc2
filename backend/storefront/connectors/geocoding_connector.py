"""
Geocoding Connector
Resolves a free-text customer address to coordinates (OpenStreetMap Nominatim)

API CONFIGURATION:
- Search: GET {GEOCODER_URL}?format=json&q=<address>&limit=1
- Returns a list of places; the first one carries "lat" / "lon" as strings
- Nominatim requires an identifying User-Agent
"""
import logging
from typing import Optional, Tuple

import httpx

from storefront.core.config import settings

logger = logging.getLogger(__name__)


class GeocodingConnector:
    """
    Connector for the address geocoder used by delivery quotes
    """

    def __init__(self, base_url: str = None, user_agent: str = None, timeout: float = 10.0):
        self.base_url = base_url or settings.GEOCODER_URL
        self.user_agent = user_agent or settings.GEOCODER_USER_AGENT
        self.timeout = timeout

    async def geocode(self, address: str) -> Optional[Tuple[float, float]]:
        """
        Geocode an address

        Returns:
            (latitude, longitude) of the best match, or None when the address
            is unknown or the geocoder cannot be reached
        """
        if not address or not address.strip():
            return None

        params = {"format": "json", "q": address, "limit": 1}
        headers = {"User-Agent": self.user_agent}

        async with httpx.AsyncClient() as client:
            try:
                response = await client.get(
                    self.base_url,
                    params=params,
                    headers=headers,
                    timeout=self.timeout
                )
                response.raise_for_status()
                places = response.json()
            except httpx.HTTPError as e:
                logger.error(f"Geocoding failed for '{address}': {e}")
                return None
            except ValueError as e:
                logger.error(f"Geocoder returned invalid JSON for '{address}': {e}")
                return None

        if not places:
            logger.info(f"No geocoding result for '{address}'")
            return None

        try:
            return float(places[0]["lat"]), float(places[0]["lon"])
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Unexpected geocoder payload for '{address}': {places[0]}")
            return None
