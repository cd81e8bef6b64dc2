"""
Coupon Service - promotions management and coupon redemption

Validation rules and discount math belong to the database functions
validate_coupon / calculate_discount; this service forwards parameters and
repackages the results for the checkout.
"""
import logging
from typing import Any, Dict, List, Optional

from storefront.domain.promotion import (
    CouponValidation,
    PromotionCreate,
    PromotionUpdate,
)
from storefront.repositories.promotion_repository import PromotionRepository

logger = logging.getLogger(__name__)


class CouponNotFound(Exception):
    pass


class CouponService:

    def __init__(self, repository: PromotionRepository = None):
        self.repository = repository or PromotionRepository()

    # ------------------------------------------------------------------
    # Promotions
    # ------------------------------------------------------------------

    def list_promotions(self, store_id: str) -> List[Dict[str, Any]]:
        return self.repository.find_by_store(store_id)

    def _link(self, promotion_id: str, payload: PromotionCreate) -> None:
        """Attach coupons, products and categories; failures only get logged"""
        codes = payload.normalized_coupon_codes()
        links = (
            ("coupons", self.repository.add_coupons, codes),
            ("products", self.repository.add_products, payload.product_ids),
            ("categories", self.repository.add_categories, payload.category_ids),
        )
        for label, add, values in links:
            if not values:
                continue
            try:
                add(promotion_id, values)
            except Exception as e:
                logger.error(f"Failed to link {label} to promotion {promotion_id}: {e}")

    def create_promotion(self, store_id: str, payload: PromotionCreate) -> Dict[str, Any]:
        promotion = self.repository.create(store_id, payload.columns())
        self._link(str(promotion['id']), payload)
        return promotion

    def update_promotion(self, promotion_id: str, payload: PromotionUpdate) -> Optional[Dict[str, Any]]:
        """Update columns then replace every link of the promotion"""
        promotion = self.repository.update(promotion_id, payload.columns(exclude_unset=True))
        if promotion is None:
            return None

        self.repository.clear_links(promotion_id)
        self._link(promotion_id, payload)
        logger.info(f"Promotion {promotion_id} updated")
        return promotion

    def delete_promotion(self, promotion_id: str) -> bool:
        return self.repository.delete(promotion_id) > 0

    # ------------------------------------------------------------------
    # Coupons
    # ------------------------------------------------------------------

    def validate(self, store_id: str, coupon_code: str, order_value: float) -> CouponValidation:
        code = coupon_code.strip().upper()
        result = self.repository.validate_coupon(code, store_id, order_value)

        if not result:
            return CouponValidation(is_valid=False, message="Coupon not found")

        if not result.get('is_valid'):
            return CouponValidation(is_valid=False, message=result.get('message'))

        promotion_id = str(result['promotion_id'])
        discount = self.repository.calculate_discount(promotion_id, order_value)
        coupon = self.repository.find_coupon(code, store_id) or {}

        return CouponValidation(
            is_valid=True,
            promotion_id=promotion_id,
            discount_type=result.get('discount_type'),
            discount_value=_as_float(result.get('discount_value')),
            max_discount=_as_float(result.get('max_discount')),
            calculated_discount=discount,
            used_count=coupon.get('used_count'),
            usage_limit=coupon.get('usage_limit'),
            message=result.get('message'),
        )

    def register_usage(
        self,
        store_id: str,
        coupon_code: str,
        order_id: Optional[str],
        user_ip: str,
        user_agent: str
    ) -> None:
        """
        Record one redemption and bump the coupon counter

        Raises:
            CouponNotFound: no coupon with that code in the store
        """
        code = coupon_code.strip().upper()
        coupon = self.repository.find_coupon(code, store_id)
        if coupon is None:
            raise CouponNotFound(code)

        coupon_id = str(coupon['id'])
        self.repository.record_usage(coupon_id, order_id, user_ip, user_agent)

        try:
            self.repository.increment_used_count(coupon_id)
        except Exception as e:
            logger.error(f"Failed to increment used_count of coupon {code}: {e}")

        logger.info(f"Coupon {code} used (order {order_id})")


def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None
