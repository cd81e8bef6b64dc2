"""
Product Domain Model

Catalog entries of a store, their images and the product categories they are
grouped under.
"""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal

from storefront.domain.base import RecordModel
from storefront.utils.slug import clean_description


DEFAULT_CATEGORY_NAME = "Geral"
DEFAULT_CATEGORY_COLOR = "#8B5CF6"

# Public listing never shows a free product
FALLBACK_PUBLIC_PRICE = 9.99


class Product(RecordModel):
    """
    Product record

    Fields:
        id: Product UUID
        store_id: Owning store
        name: Product name
        description: Optional long description
        price: Unit price in BRL
        image: Main image URL
        category_id: Product category reference
        available: Whether customers can order it
        display_order: Position in the merchant-defined sequence
    """

    id: str
    store_id: str
    name: str
    description: Optional[str] = None
    price: Optional[Decimal] = None
    image: Optional[str] = None
    category_id: Optional[Any] = None
    available: Optional[bool] = True
    display_order: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_listing_dict(self) -> dict:
        """
        Admin listing shape: `category` flattened to the category name and the
        joined category object kept under `category_data`.
        """
        data = self.to_dict()
        category = data.get("category")
        if isinstance(category, dict):
            data["category"] = category.get("name") or DEFAULT_CATEGORY_NAME
            data["category_data"] = category
        else:
            data["category"] = category if isinstance(category, str) else DEFAULT_CATEGORY_NAME
            data["category_data"] = None
        return data

    def to_public_dict(self) -> dict:
        data = self.to_dict()
        data["price"] = float(self.price or 0) or FALLBACK_PUBLIC_PRICE
        return data


class ProductReorderItem(BaseModel):
    id: str
    display_order: int


class ProductReorderRequest(BaseModel):
    products: Optional[Any] = None


class ProductImage(RecordModel):
    id: Any
    product_id: str
    image_url: str
    alt_text: Optional[str] = None
    is_primary: bool = False
    sort_order: int = 0


class ProductImageCreate(BaseModel):
    image_url: Optional[str] = None
    alt_text: Optional[str] = None
    is_primary: bool = False


class ProductImageUpdate(BaseModel):
    """One gallery entry of a bulk update; only the fields sent are written"""
    id: Optional[Any] = None
    alt_text: Optional[str] = None
    is_primary: Optional[bool] = None
    sort_order: Optional[int] = None

    def columns(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"id"}, exclude_unset=True)


class ProductImagesUpdate(BaseModel):
    images: Any = None


class ProductCategory(RecordModel):
    """
    Product category

    Categories are global rows; ownership is kept in the description as
    "user:{user_id}|desc:{text}".
    """

    id: int
    name: str
    name_pt: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    is_active: bool = True
    sort_order: Optional[int] = 0

    def to_store_dict(self, store_id: str) -> dict:
        """Shape returned to the store admin (description without metadata)"""
        return {
            "id": self.id,
            "name": self.name,
            "description": clean_description(self.description),
            "color": self.color or DEFAULT_CATEGORY_COLOR,
            "store_id": store_id,
            "is_active": self.is_active,
            "sort_order": self.sort_order,
        }


class ProductCategoryCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None


class ProductCategoryUpdate(ProductCategoryCreate):
    id: Optional[int] = None


class GlobalCategoryCreate(BaseModel):
    """Platform wide category created from the category picker"""
    name: Optional[str] = None
    name_pt: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None


class CategoryReorderItem(BaseModel):
    id: int
    sort_order: int


class CategoryReorderRequest(BaseModel):
    categories: Optional[Any] = None


def parse_reorder_items(items: Any, model) -> Optional[List]:
    """Validate a reorder payload list; None when it is not a list of valid items"""
    if not isinstance(items, list):
        return None
    try:
        return [model.model_validate(item) for item in items]
    except ValueError:
        return None


class ProductPayload(BaseModel):
    """Free-form product body; validated loosely, columns pass through"""
    model_config = {"extra": "allow"}

    id: Optional[Any] = None
    price: Optional[Any] = None

    def columns(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"id"}, exclude_unset=True)
