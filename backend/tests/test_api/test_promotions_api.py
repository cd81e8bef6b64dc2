"""
API tests for promotions and coupon endpoints
"""
import pytest
from unittest.mock import MagicMock

from storefront.domain.promotion import CouponValidation
from storefront.services.coupon_service import CouponNotFound

from conftest import STORE_ID

BASE = "/api/stores/doces-da-ana"


@pytest.fixture
def coupon_service(monkeypatch):
    service = MagicMock()
    monkeypatch.setattr("storefront.api.promotions.CouponService", lambda: service)
    return service


@pytest.fixture
def promotion_repo(monkeypatch):
    repo = MagicMock()
    monkeypatch.setattr("storefront.api.promotions.PromotionRepository", lambda: repo)
    return repo


class TestPromotions:

    def test_list_for_owner(self, client, owner_headers, store_lookup, coupon_service):
        coupon_service.list_promotions.return_value = [{"id": "promo-1", "coupons": []}]

        response = client.get(f"{BASE}/promotions", headers=owner_headers)

        assert response.json() == {"promotions": [{"id": "promo-1", "coupons": []}]}
        coupon_service.list_promotions.assert_called_once_with(STORE_ID)

    def test_list_for_other_user(self, client, other_user_headers, store_lookup, coupon_service):
        assert client.get(f"{BASE}/promotions", headers=other_user_headers).status_code == 403

    def test_create(self, client, owner_headers, store_lookup, coupon_service):
        coupon_service.create_promotion.return_value = {"id": "promo-1", "name": "BF"}

        response = client.post(f"{BASE}/promotions", json={
            "name": "BF", "discount_type": "percentage", "discount_value": 10, "coupon_codes": ["bf"],
        }, headers=owner_headers)

        assert response.status_code == 201
        assert response.json() == {"promotion": {"id": "promo-1", "name": "BF"}}

    def test_create_rejects_unknown_discount_type(self, client, owner_headers, store_lookup, coupon_service):
        response = client.post(f"{BASE}/promotions", json={"name": "BF", "discount_type": "bogo"},
                               headers=owner_headers)
        assert response.status_code == 400

    def test_update_promotion_of_other_store(self, client, owner_headers, store_lookup, coupon_service,
                                             promotion_repo):
        promotion_repo.exists_in_store.return_value = False

        response = client.put(f"{BASE}/promotions/promo-9", json={"name": "X"}, headers=owner_headers)

        assert response.status_code == 404
        coupon_service.update_promotion.assert_not_called()

    def test_delete(self, client, owner_headers, store_lookup, coupon_service, promotion_repo):
        promotion_repo.exists_in_store.return_value = True

        response = client.delete(f"{BASE}/promotions/promo-1", headers=owner_headers)

        assert response.status_code == 200
        coupon_service.delete_promotion.assert_called_once_with("promo-1")


class TestCoupons:

    def test_validate_requires_fields(self, client, store_lookup, coupon_service):
        response = client.post(f"{BASE}/validate-coupon", json={"coupon_code": "BF10"})
        assert response.status_code == 400

    def test_validate_invalid_coupon(self, client, store_lookup, coupon_service):
        coupon_service.validate.return_value = CouponValidation(is_valid=False, message="Coupon not found")

        response = client.post(f"{BASE}/validate-coupon", json={"coupon_code": "nope", "order_value": 50})

        assert response.json() == {"is_valid": False, "message": "Coupon not found"}

    def test_validate_valid_coupon(self, client, store_lookup, coupon_service):
        coupon_service.validate.return_value = CouponValidation(
            is_valid=True, promotion_id="promo-1", discount_type="fixed", discount_value=5,
            calculated_discount=5, used_count=1, usage_limit=10, message="ok"
        )

        response = client.post(f"{BASE}/validate-coupon", json={"coupon_code": "BF10", "order_value": 50})

        body = response.json()
        assert body["is_valid"] is True
        assert body["calculated_discount"] == 5
        coupon_service.validate.assert_called_once_with(STORE_ID, "BF10", 50)

    def test_register_usage_records_ip(self, client, store_lookup, coupon_service):
        response = client.post(
            f"{BASE}/register-coupon-usage",
            json={"coupon_code": "BF10", "order_id": "order-1"},
            headers={"X-Forwarded-For": "200.1.2.3, 10.0.0.1", "User-Agent": "checkout"}
        )

        assert response.status_code == 200
        kwargs = coupon_service.register_usage.call_args.kwargs
        assert kwargs["user_ip"] == "200.1.2.3"
        assert kwargs["user_agent"] == "checkout"

    def test_register_usage_without_forwarded_for(self, client, store_lookup, coupon_service):
        client.post(f"{BASE}/register-coupon-usage", json={"coupon_code": "BF10"})

        assert coupon_service.register_usage.call_args.kwargs["user_ip"] == "unknown"

    def test_register_unknown_coupon(self, client, store_lookup, coupon_service):
        coupon_service.register_usage.side_effect = CouponNotFound("NOPE")

        response = client.post(f"{BASE}/register-coupon-usage", json={"coupon_code": "nope"})

        assert response.status_code == 404
        assert response.json() == {"error": "Coupon not found"}
