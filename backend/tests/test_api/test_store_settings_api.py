"""
API tests for delivery, print settings, analytics and image uploads
"""
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from storefront.domain.delivery import DeliveryQuote, DeliverySettings
from storefront.services.delivery_service import DeliverySettingsNotFound

from conftest import STORE_ID

BASE = "/api/stores/doces-da-ana"


@pytest.fixture
def delivery_service(monkeypatch):
    service = MagicMock()
    service.quote = AsyncMock()
    service.quote_public = AsyncMock()
    monkeypatch.setattr("storefront.api.delivery.DeliveryService", lambda: service)
    return service


@pytest.fixture
def print_store_repo(monkeypatch):
    repo = MagicMock()
    monkeypatch.setattr("storefront.api.print_settings.StoreRepository", lambda: repo)
    return repo


@pytest.fixture
def analytics_repo(monkeypatch):
    repo = MagicMock()
    monkeypatch.setattr("storefront.api.analytics.AnalyticsRepository", lambda: repo)
    return repo


class TestDelivery:

    def test_get_settings_is_public(self, client, store_lookup, delivery_service):
        delivery_service.get_settings.return_value = DeliverySettings(
            store_id=STORE_ID, price_per_km=Decimal('2.50')
        )

        response = client.get(f"{BASE}/delivery-settings")

        assert response.status_code == 200
        assert response.json()["price_per_km"] == 2.5
        assert response.json()["estimated_delivery_time_from"] == "00:30"

    def test_update_validation_error(self, client, owner_headers, store_lookup, delivery_service):
        delivery_service.update_settings.side_effect = ValueError("delivery_enabled must be a boolean")

        response = client.put(f"{BASE}/delivery-settings", json={"delivery_enabled": "yes"}, headers=owner_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "delivery_enabled must be a boolean"}

    def test_update_requires_owner(self, client, other_user_headers, store_lookup, delivery_service):
        response = client.put(f"{BASE}/delivery-settings", json={"delivery_enabled": True},
                              headers=other_user_headers)

        assert response.status_code == 403
        delivery_service.update_settings.assert_not_called()

    def test_public_quote(self, client, store_lookup, delivery_service):
        delivery_service.quote_public.return_value = DeliveryQuote(
            delivery_fee=7.5, delivery_possible=True, reason="", distance_km=3
        )

        response = client.post(f"{BASE}/calculate-delivery-public", json={"distance_km": 3, "order_total": 20})

        assert response.json() == {
            "delivery_fee": 7.5,
            "delivery_possible": True,
            "reason": "",
            "distance_km": 3.0,
            "settings": {},
        }

    def test_quote_errors(self, client, store_lookup, delivery_service):
        delivery_service.quote_public.side_effect = ValueError("customer_address is required")
        response = client.post(f"{BASE}/calculate-delivery-public", json={"order_total": 20})
        assert response.status_code == 400

        delivery_service.quote_public.side_effect = DeliverySettingsNotFound("doces-da-ana")
        response = client.post(f"{BASE}/calculate-delivery-public", json={"distance_km": 1, "order_total": 20})
        assert response.status_code == 404

    def test_owner_quote_requires_auth(self, client, store_lookup, delivery_service):
        response = client.post(f"{BASE}/calculate-delivery", json={"distance_km": 1, "order_total": 20})
        assert response.status_code == 401


class TestPrintSettings:

    def test_defaults_when_never_saved(self, client, print_store_repo):
        print_store_repo.get_print_settings.return_value = (True, None)

        response = client.get(f"{BASE}/print-settings")

        settings = response.json()["print_settings"]
        assert settings["print_format"] == "thermal"
        assert settings["paper_width"] == 80
        assert settings["auto_cut"] is True
        assert settings["auto_print"] is False

    def test_unknown_store(self, client, print_store_repo):
        print_store_repo.get_print_settings.return_value = (False, None)
        assert client.get(f"{BASE}/print-settings").status_code == 404

    def test_save_requires_body(self, client, owner_headers, print_store_repo):
        response = client.put(f"{BASE}/print-settings", json={}, headers=owner_headers)
        assert response.status_code == 400

    def test_save(self, client, owner_headers, store_lookup, print_store_repo):
        response = client.put(f"{BASE}/print-settings", json={"print_settings": {"paper_width": 58}},
                              headers=owner_headers)

        assert response.json()["success"] is True
        print_store_repo.update_print_settings.assert_called_once_with(STORE_ID, {"paper_width": 58})


class TestAnalytics:

    def test_track_event(self, client, analytics_repo):
        response = client.post(
            "/api/analytics/track",
            json={"event_type": "page_view", "store_slug": "doces-da-ana"},
            headers={"X-Real-IP": "200.9.9.9", "User-Agent": "browser"}
        )

        assert response.json() == {"success": True}
        event = analytics_repo.insert_event.call_args[0][0]
        assert event["ip_address"] == "200.9.9.9"
        assert event["user_agent"] == "browser"
        assert event["event_type"] == "page_view"

    def test_dashboard_defaults_to_zero(self, client, owner_headers, store_lookup, analytics_repo):
        analytics_repo.get_store_analytics.return_value = {"total_views": 12, "top_products": None}

        response = client.get(f"{BASE}/analytics?period=7d", headers=owner_headers)

        body = response.json()
        assert body["total_views"] == 12
        assert body["total_clicks"] == 0
        assert body["top_products"] == []
        analytics_repo.get_store_analytics.assert_called_once_with("doces-da-ana", 7)

    def test_dashboard_for_other_user(self, client, other_user_headers, store_lookup, analytics_repo):
        response = client.get(f"{BASE}/analytics", headers=other_user_headers)

        assert response.status_code == 403
        assert response.json() == {"error": "No permission"}


class TestUploads:

    def test_missing_image(self, client, supabase_client):
        response = client.post("/api/upload-image")

        assert response.status_code == 400
        assert response.json() == {"error": "No image was sent"}

    def test_rejects_non_images(self, client, supabase_client):
        response = client.post("/api/upload-image", files={"image": ("notes.txt", b"hello", "text/plain")})

        assert response.status_code == 400
        assert response.json() == {"error": "File must be an image"}

    def test_upload(self, client, supabase_client):
        bucket = supabase_client.storage.from_.return_value
        bucket.get_public_url.return_value = "https://cdn.example.com/product-1.png"

        response = client.post("/api/upload-image", files={"image": ("photo.png", b"\x89PNG", "image/png")})

        body = response.json()
        assert body["success"] is True
        assert body["imageUrl"] == "https://cdn.example.com/product-1.png"
        assert body["fileName"].endswith(".png")
