"""
Promotion Domain Model

Discount rules, the coupon codes that activate them and their redemptions.
Validation and discount math live in database functions; these models only
describe what travels over HTTP.
"""
from pydantic import BaseModel, Field
from typing import Any, List, Optional
from enum import Enum


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class PromotionFields(BaseModel):
    """Columns shared by create and update"""
    name: Optional[str] = None
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(None, ge=0)
    min_order_value: Optional[float] = Field(None, ge=0)
    max_discount: Optional[float] = Field(None, ge=0)
    usage_limit: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = True
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    days_of_week: Optional[List[int]] = Field(None, description="0=Sunday ... 6=Saturday")
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    def columns(self, exclude_unset: bool = False) -> dict:
        """Promotion table columns; exclude_unset keeps only fields sent by the client"""
        data = self.model_dump(include=set(PromotionFields.model_fields), exclude_unset=exclude_unset)
        if data.get("discount_type") is not None:
            data["discount_type"] = DiscountType(data["discount_type"]).value
        return data


class PromotionCreate(PromotionFields):
    """Promotion plus the codes, products and categories it applies to"""
    coupon_codes: List[str] = Field(default_factory=list)
    product_ids: List[Any] = Field(default_factory=list)
    category_ids: List[Any] = Field(default_factory=list)

    def normalized_coupon_codes(self) -> List[str]:
        """Uppercase, trimmed, blanks dropped"""
        return [code.strip().upper() for code in self.coupon_codes if code and code.strip()]


class PromotionUpdate(PromotionCreate):
    pass


class CouponValidationRequest(BaseModel):
    coupon_code: Optional[str] = None
    order_value: Optional[float] = None


class CouponValidation(BaseModel):
    """Result returned to the checkout"""
    is_valid: bool
    message: Optional[str] = None
    promotion_id: Optional[str] = None
    discount_type: Optional[str] = None
    discount_value: Optional[float] = None
    max_discount: Optional[float] = None
    calculated_discount: Optional[float] = None
    used_count: Optional[int] = None
    usage_limit: Optional[int] = None

    def to_dict(self) -> dict:
        if not self.is_valid:
            return {"is_valid": False, "message": self.message}
        return self.model_dump()


class CouponUsageRequest(BaseModel):
    coupon_code: Optional[str] = None
    order_id: Optional[str] = None
