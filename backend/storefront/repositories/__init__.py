"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from the routers and services.
"""
from storefront.repositories.store_repository import StoreRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.repositories.product_image_repository import ProductImageRepository
from storefront.repositories.category_repository import CategoryRepository
from storefront.repositories.attribute_repository import AttributeRepository
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.promotion_repository import PromotionRepository
from storefront.repositories.delivery_repository import DeliveryRepository
from storefront.repositories.analytics_repository import AnalyticsRepository

__all__ = [
    'StoreRepository',
    'ProductRepository',
    'ProductImageRepository',
    'CategoryRepository',
    'AttributeRepository',
    'OrderRepository',
    'PromotionRepository',
    'DeliveryRepository',
    'AnalyticsRepository',
]
