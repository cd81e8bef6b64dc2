"""
Domain Layer - Business Entities

Pydantic models for the records the storefront reads and writes, plus the
request schemas validated at the HTTP boundary.
"""
from storefront.domain.store import Store, StoreCreate, StoreUpdate, PrintSettings
from storefront.domain.product import Product, ProductCategory, ProductImage
from storefront.domain.order import Order, OrderItem, OrderStatus, Customer, CreateOrderRequest
from storefront.domain.promotion import PromotionCreate, PromotionUpdate, CouponValidation, DiscountType
from storefront.domain.delivery import DeliverySettings, DeliveryQuote
from storefront.domain.analytics import AnalyticsEventCreate, StoreAnalytics

__all__ = [
    'Store', 'StoreCreate', 'StoreUpdate', 'PrintSettings',
    'Product', 'ProductCategory', 'ProductImage',
    'Order', 'OrderItem', 'OrderStatus', 'Customer', 'CreateOrderRequest',
    'PromotionCreate', 'PromotionUpdate', 'CouponValidation', 'DiscountType',
    'DeliverySettings', 'DeliveryQuote',
    'AnalyticsEventCreate', 'StoreAnalytics',
]
