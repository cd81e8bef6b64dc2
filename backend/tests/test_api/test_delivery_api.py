"""
API tests for delivery quotes, driven through the real DeliveryService
with the settings repository and the geocoder patched
"""
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from storefront.domain.delivery import DeliverySettings

from conftest import STORE_ID

BASE = "/api/stores/doces-da-ana"
PUBLIC = f"{BASE}/calculate-delivery-public"
OWNER = f"{BASE}/calculate-delivery"


def make_settings(**overrides):
    values = {
        'store_id': STORE_ID,
        'delivery_enabled': True,
        'delivery_radius_km': Decimal('10'),
        'price_per_km': Decimal('2.50'),
        'minimum_delivery_fee': Decimal('5.00'),
        'free_delivery_threshold': Decimal('50.00'),
    }
    values.update(overrides)
    return DeliverySettings(**values)


@pytest.fixture
def delivery_repo(monkeypatch):
    repo = MagicMock()
    repo.find_by_store.return_value = make_settings()
    monkeypatch.setattr("storefront.services.delivery_service.DeliveryRepository", lambda: repo)
    return repo


@pytest.fixture
def geocoder(monkeypatch):
    connector = MagicMock()
    connector.geocode = AsyncMock(return_value=(-23.56, -46.64))
    monkeypatch.setattr("storefront.services.delivery_service.GeocodingConnector", lambda: connector)
    return connector


@pytest.fixture
def store_without_coordinates(store_lookup, sample_store):
    store = sample_store.model_copy(update={
        "latitude": None,
        "longitude": None,
        "address": {"street": "Rua Augusta", "number": "100", "city": "São Paulo", "state": "SP"},
    })
    store_lookup.find_by_slug.return_value = store
    return store


class TestPublicQuote:

    @pytest.mark.parametrize("body, message", [
        ({"customer_address": "Rua A, 1"}, "order_total must be a number greater than or equal to zero"),
        ({"order_total": -5, "customer_address": "Rua A, 1"},
         "order_total must be a number greater than or equal to zero"),
        ({"order_total": 20}, "customer_address is required"),
    ])
    def test_bad_input(self, client, store_lookup, delivery_repo, geocoder, body, message):
        response = client.post(PUBLIC, json=body)

        assert response.status_code == 400
        assert response.json() == {"error": message}
        geocoder.geocode.assert_not_awaited()

    def test_missing_settings(self, client, store_lookup, delivery_repo, geocoder):
        delivery_repo.find_by_store.return_value = None

        response = client.post(PUBLIC, json={"order_total": 20, "customer_address": "Rua A, 1"})

        assert response.status_code == 404
        assert response.json() == {"error": "Delivery settings not found"}

    def test_unknown_store(self, client, store_lookup, delivery_repo, geocoder):
        store_lookup.find_by_slug.return_value = None

        response = client.post(PUBLIC, json={"order_total": 20, "customer_address": "Rua A, 1"})

        assert response.status_code == 404

    def test_free_delivery_needs_no_store_location(self, client, store_without_coordinates, delivery_repo, geocoder):
        response = client.post(PUBLIC, json={"order_total": 100, "customer_address": "Rua A, 1"})

        assert response.status_code == 200
        body = response.json()
        assert body["delivery_fee"] == 0
        assert body["delivery_possible"] is True
        assert body["distance_km"] == 0
        geocoder.geocode.assert_not_awaited()

    def test_subtotal_decides_free_delivery(self, client, store_lookup, delivery_repo, geocoder):
        response = client.post(PUBLIC, json={
            "order_total": 45, "subtotal": 60, "customer_address": "Rua A, 1"
        })

        assert response.json()["delivery_fee"] == 0
        geocoder.geocode.assert_not_awaited()

    def test_store_address_is_geocoded_when_coordinates_are_missing(
        self, client, store_without_coordinates, delivery_repo, geocoder
    ):
        geocoder.geocode.side_effect = [(-23.55, -46.63), (-23.56, -46.64)]

        response = client.post(PUBLIC, json={"order_total": 20, "customer_address": "Rua A, 1"})

        assert response.status_code == 200
        body = response.json()
        assert body["delivery_possible"] is True
        assert body["distance_km"] > 0
        assert body["delivery_fee"] >= 5.0
        addresses = [call.args[0] for call in geocoder.geocode.await_args_list]
        assert addresses == ["Rua Augusta, 100, São Paulo, SP", "Rua A, 1"]

    def test_store_without_location_or_address(self, client, store_lookup, sample_store, delivery_repo, geocoder):
        store_lookup.find_by_slug.return_value = sample_store.model_copy(
            update={"latitude": None, "longitude": None, "address": None}
        )

        response = client.post(PUBLIC, json={"order_total": 20, "customer_address": "Rua A, 1"})

        assert response.status_code == 400
        assert response.json() == {"error": "Store address is not configured"}

    def test_customer_address_not_found(self, client, store_lookup, delivery_repo, geocoder):
        geocoder.geocode.return_value = None

        response = client.post(PUBLIC, json={"order_total": 20, "customer_address": "???"})

        assert response.status_code == 400
        assert response.json() == {"error": "Could not calculate the distance. Check the address"}


class TestOwnerQuote:

    def test_non_owner_is_forbidden(self, client, other_user_headers, store_lookup, delivery_repo, geocoder):
        response = client.post(OWNER, json={"distance_km": 4, "order_total": 20}, headers=other_user_headers)

        assert response.status_code == 403
        delivery_repo.find_by_store.assert_not_called()

    def test_owner_quote(self, client, owner_headers, store_lookup, delivery_repo, geocoder):
        response = client.post(OWNER, json={"distance_km": 4, "order_total": 20}, headers=owner_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["delivery_fee"] == 10.0
        assert body["distance_km"] == 4.0
        assert body["settings"]["price_per_km"] == 2.5

    def test_owner_quote_free_over_threshold(self, client, owner_headers, store_lookup, delivery_repo, geocoder):
        response = client.post(OWNER, json={"distance_km": 4, "order_total": 80}, headers=owner_headers)

        assert response.json()["delivery_fee"] == 0
        assert response.json()["reason"] == "Free delivery - minimum order value reached"

    def test_negative_distance(self, client, owner_headers, store_lookup, delivery_repo, geocoder):
        response = client.post(OWNER, json={"distance_km": -1, "order_total": 20}, headers=owner_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "distance_km must be zero or greater"}

    def test_missing_settings(self, client, owner_headers, store_lookup, delivery_repo, geocoder):
        delivery_repo.find_by_store.return_value = None

        response = client.post(OWNER, json={"distance_km": 1, "order_total": 20}, headers=owner_headers)

        assert response.status_code == 404
