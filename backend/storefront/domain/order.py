"""
Order Domain Model

Orders placed from a storefront checkout (or registered manually by the
merchant) and the customers that place them.
"""
from pydantic import BaseModel, Field
from typing import Any, List, Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

from storefront.domain.base import RecordModel


class OrderStatus(str, Enum):
    """Order lifecycle as shown in the merchant dashboard"""
    PENDING = "pending"
    ACCEPTED = "accepted"
    PREPARING = "preparing"
    DELIVERING = "delivering"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderItem(BaseModel):
    """Line item snapshot stored in the order's JSON items column"""
    id: Optional[Any] = None
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    image: Optional[str] = None


class Customer(RecordModel):
    id: str
    store_id: str
    name: Optional[str] = None
    phone: str
    address: Optional[str] = None


class Order(RecordModel):
    """
    Order record

    Fields:
        id: Order UUID
        store_id: Store the order belongs to
        customer_id: Customer reference (unique per store and phone)
        customer_name / customer_phone / customer_address: Snapshot at checkout
        items: Line items (JSON)
        total: Final amount charged
        source: Where the order came from (storefront, manual, whatsapp)
        status: See OrderStatus
        notes: Free text plus checkout extras (delivery, payment, coupon)
    """

    id: str
    store_id: str
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    items: List[Any] = Field(default_factory=list)
    total: Decimal = Decimal("0")
    source: Optional[str] = None
    status: str = OrderStatus.PENDING.value
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def short_id(self) -> str:
        return self.id[:8]


class CreateOrderRequest(BaseModel):
    """Checkout payload sent by the storefront"""
    storeSlug: str
    customer_name: str
    customer_phone: str
    customer_address: Optional[str] = None
    items: List[OrderItem] = Field(default_factory=list)
    total: float = Field(..., ge=0)
    source: Optional[str] = "storefront"
    isManualOrder: bool = False
    notes: Optional[str] = None
    order_date: Optional[str] = Field(None, description="YYYY-MM-DD, used for manual orders")

    # Checkout extras
    delivery_type: Optional[str] = None
    delivery_cep: Optional[str] = None
    delivery_city: Optional[str] = None
    delivery_state: Optional[str] = None
    payment_method: Optional[str] = None
    delivery_fee: Optional[float] = None
    delivery_distance_km: Optional[float] = None
    coupon_code: Optional[str] = None
    coupon_discount: Optional[float] = None
    subtotal: Optional[float] = None


class OrderStatusUpdate(BaseModel):
    status: Optional[str] = None


class PrintReceiptRequest(BaseModel):
    orderId: Optional[str] = None
