"""
Centralized application configuration
"""
import json
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from the environment / .env"""

    # API Settings
    API_TITLE: str = "Storefront API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Backend for link-in-bio storefronts: stores, catalog, orders and promotions"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database (Supabase Postgres)
    DATABASE_URL: str
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""

    # Supabase Auth signs access tokens with this secret (HS256)
    SUPABASE_JWT_SECRET: str = ""
    SUPABASE_JWT_AUDIENCE: str = "authenticated"

    # Image hosting (Supabase Storage)
    STORAGE_BUCKET: str = "product-images"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # Geocoding for delivery distance
    GEOCODER_URL: str = "https://nominatim.openstreetmap.org/search"
    GEOCODER_USER_AGENT: str = "storefront-backend/1.0"

    # Realtime relay that pushes order events to merchant dashboards
    REALTIME_NOTIFY_URL: str = "http://localhost:3001"

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://yourdomain.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    def get_allowed_origins(self) -> List[str]:
        """ALLOWED_ORIGINS as a list; accepts a JSON array or a comma list"""
        raw = (self.ALLOWED_ORIGINS or "").strip()
        if raw.startswith("[") and raw.endswith("]"):
            return [str(origin) for origin in json.loads(raw)]
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
        return origins or ["http://localhost:3000"]


settings = Settings()
