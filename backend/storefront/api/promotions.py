"""
Promotions API Endpoints
Promotion management for merchants, coupon validation and redemption at checkout
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from storefront.api.deps import INTERNAL_ERROR, client_ip, get_owned_store, get_store_or_404
from storefront.core.auth import TokenUser, get_current_user
from storefront.domain.base import to_json_value
from storefront.domain.promotion import (
    CouponUsageRequest,
    CouponValidationRequest,
    PromotionCreate,
    PromotionUpdate,
)
from storefront.repositories.promotion_repository import PromotionRepository
from storefront.services.coupon_service import CouponNotFound, CouponService

logger = logging.getLogger(__name__)

router = APIRouter()

PROMOTION_NOT_FOUND = "Promotion not found"


@router.get("/stores/{slug}/promotions")
async def get_promotions(slug: str, user: TokenUser = Depends(get_current_user)):
    """Promotions with coupons (and usage), products and categories"""
    try:
        store = get_owned_store(slug, user)
        promotions = CouponService().list_promotions(store.id)
        return {"promotions": to_json_value(promotions)}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list promotions of {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.post("/stores/{slug}/promotions", status_code=status.HTTP_201_CREATED)
async def create_promotion(slug: str, payload: PromotionCreate, user: TokenUser = Depends(get_current_user)):
    try:
        store = get_owned_store(slug, user)
        promotion = CouponService().create_promotion(store.id, payload)
        return {"promotion": to_json_value(promotion)}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to create promotion in {slug}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create promotion"
        )


@router.put("/stores/{slug}/promotions/{promotion_id}")
async def update_promotion(
    slug: str,
    promotion_id: str,
    payload: PromotionUpdate,
    user: TokenUser = Depends(get_current_user)
):
    """Update fields, then replace product, category and coupon links"""
    try:
        store = get_owned_store(slug, user)

        if not PromotionRepository().exists_in_store(promotion_id, store.id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROMOTION_NOT_FOUND)

        promotion = CouponService().update_promotion(promotion_id, payload)
        if promotion is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROMOTION_NOT_FOUND)

        return {"promotion": to_json_value(promotion)}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to update promotion {promotion_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update promotion"
        )


@router.delete("/stores/{slug}/promotions/{promotion_id}")
async def delete_promotion(slug: str, promotion_id: str, user: TokenUser = Depends(get_current_user)):
    try:
        store = get_owned_store(slug, user)

        if not PromotionRepository().exists_in_store(promotion_id, store.id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROMOTION_NOT_FOUND)

        CouponService().delete_promotion(promotion_id)
        logger.info(f"Promotion {promotion_id} deleted from {slug}")
        return {"message": "Promotion deleted"}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to delete promotion {promotion_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete promotion"
        )


@router.post("/stores/{slug}/validate-coupon")
async def validate_coupon(slug: str, payload: CouponValidationRequest):
    """
    Check a coupon for an order value

    Returns:
        {is_valid: false, message} or the discount details with
        calculated_discount, used_count and usage_limit
    """
    if not payload.coupon_code or payload.order_value is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="coupon_code and order_value are required"
        )

    try:
        store = get_store_or_404(slug)
        result = CouponService().validate(store.id, payload.coupon_code, payload.order_value)
        return result.to_dict()

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to validate coupon {payload.coupon_code} in {slug}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to validate coupon"
        )


@router.post("/stores/{slug}/register-coupon-usage")
async def register_coupon_usage(slug: str, payload: CouponUsageRequest, request: Request):
    if not payload.coupon_code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="coupon_code is required")

    try:
        store = get_store_or_404(slug)
        CouponService().register_usage(
            store.id,
            payload.coupon_code,
            payload.order_id,
            user_ip=client_ip(request),
            user_agent=request.headers.get("user-agent", "unknown")
        )
        return {"success": True, "message": "Coupon usage registered"}

    except HTTPException:
        raise
    except CouponNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Coupon not found")
    except Exception as e:
        logger.exception(f"Failed to register usage of {payload.coupon_code} in {slug}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to register coupon usage"
        )
