"""
Products API Endpoints
Store catalog management (admin), public listing and product galleries
"""
import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from psycopg2 import errors as pg_errors

from storefront.api.deps import INTERNAL_ERROR, get_owned_store, get_owned_store_by_id, get_store_or_404
from storefront.core.auth import TokenUser, get_current_user
from storefront.domain.product import (
    Product,
    ProductImageCreate,
    ProductImagesUpdate,
    ProductImageUpdate,
    ProductPayload,
    ProductReorderItem,
    ProductReorderRequest,
    parse_reorder_items,
)
from storefront.repositories.product_image_repository import ProductImageRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.utils.price import parse_price

logger = logging.getLogger(__name__)

router = APIRouter()


def _product_columns(payload: ProductPayload) -> dict:
    """Writable columns with the price normalized; 400 on an unparseable price"""
    columns = payload.columns()
    if payload.price is not None:
        price = parse_price(payload.price)
        if price is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid price")
        columns["price"] = price
    return columns


@router.get("/stores/{slug}/products")
async def get_store_products(slug: str):
    """
    Store catalog for the admin, newest first

    `category` is flattened to the category name; the joined category
    object is returned as `category_data`.
    """
    try:
        store = get_store_or_404(slug)
        products = ProductRepository().find_by_store(store.id)
        return [product.to_listing_dict() for product in products]
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list products of {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.post("/stores/{slug}/products")
async def create_product(slug: str, payload: ProductPayload, user: TokenUser = Depends(get_current_user)):
    try:
        store = get_owned_store(slug, user)
        columns = _product_columns(payload)

        product = ProductRepository().create(store.id, columns)
        logger.info(f"Product created in {slug}: {product.name}")
        return product.to_dict()

    except HTTPException:
        raise
    except pg_errors.UniqueViolation:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A product with this name already exists in the store"
        )
    except pg_errors.ForeignKeyViolation:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid category")
    except Exception as e:
        logger.exception(f"Failed to create product in {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.put("/stores/{slug}/products")
async def update_product(slug: str, payload: ProductPayload, user: TokenUser = Depends(get_current_user)):
    try:
        store = get_owned_store(slug, user)

        if not payload.id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product id is required")

        columns = _product_columns(payload)
        product = ProductRepository().update(store.id, str(payload.id), columns)
        if product is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

        return product.to_dict()

    except HTTPException:
        raise
    except pg_errors.UniqueViolation:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A product with this name already exists in the store"
        )
    except pg_errors.ForeignKeyViolation:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid category")
    except Exception as e:
        logger.exception(f"Failed to update product in {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.delete("/stores/{slug}/products")
async def delete_product(
    slug: str,
    id: Optional[str] = Query(None, description="Product id"),
    user: TokenUser = Depends(get_current_user)
):
    try:
        store = get_owned_store(slug, user)

        if not id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product id is required")

        ProductRepository().delete(store.id, id)
        logger.info(f"Product {id} deleted from {slug}")
        return {"success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to delete product {id} from {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.put("/stores/{slug}/products/reorder")
async def reorder_products(
    slug: str,
    payload: ProductReorderRequest,
    user: TokenUser = Depends(get_current_user)
):
    """
    Persist a new display order

    Every id must belong to the store; updates are issued one per product
    and the first failure aborts the rest.
    """
    store = get_owned_store(slug, user)

    items = parse_reorder_items(payload.products, ProductReorderItem)
    if items is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid data")

    repo = ProductRepository()
    try:
        requested = {item.id for item in items}
        owned = repo.find_ids_in_store(store.id, requested)
    except Exception as e:
        logger.exception(f"Failed to verify products of {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)

    if requested - owned:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Some products do not belong to the store"
        )

    for item in items:
        try:
            repo.update_display_order(store.id, item.id, item.display_order)
        except Exception as e:
            logger.error(f"Failed to update display order of product {item.id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to save product order"
            )

    return {"success": True, "message": "Product order updated"}


@router.post("/stores/{slug}/products/bulk")
async def replace_products(
    slug: str,
    products: List[Any] = Body(...),
    user: TokenUser = Depends(get_current_user)
):
    """Replace the whole catalog of the store with the given list"""
    try:
        store = get_owned_store(slug, user)

        if not all(isinstance(product, dict) for product in products):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid data")

        rows = []
        for product in products:
            row = {key: value for key, value in product.items() if key != "id"}
            if row.get("price") is not None:
                row["price"] = parse_price(row["price"])
            rows.append(row)

        ProductRepository().replace_all(store.id, rows)
        return {"success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to replace products of {slug}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save products"
        )


@router.get("/stores/{slug}/products-public")
async def get_public_products(slug: str):
    """Available products by name; a zero or missing price shows as 9.99"""
    try:
        store = get_store_or_404(slug)
        products = ProductRepository().find_available(store.id)
        return {"products": [product.to_public_dict() for product in products]}
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list public products of {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


# ============================================================================
# Product images
# ============================================================================

def _owned_product(product_id: str, user: TokenUser) -> Product:
    """Product whose gallery the caller may change; 404 when unknown, 403 when not theirs"""
    product = ProductRepository().find_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    get_owned_store_by_id(product.store_id, user)
    return product


@router.get("/products/{product_id}/images")
async def get_product_images(product_id: str):
    try:
        images = ProductImageRepository().find_by_product(product_id)
        return {"images": [image.to_dict() for image in images]}
    except Exception as e:
        logger.exception(f"Failed to list images of product {product_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.post("/products/{product_id}/images")
async def add_product_image(
    product_id: str,
    payload: ProductImageCreate,
    user: TokenUser = Depends(get_current_user)
):
    """Append an image; the first or a primary image also becomes the product image"""
    if not payload.image_url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Image URL is required")

    try:
        _owned_product(product_id, user)

        image = ProductImageRepository().add(
            product_id,
            payload.image_url,
            payload.alt_text,
            payload.is_primary
        )
        return {"success": True, "image": image.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to add image to product {product_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.put("/products/{product_id}/images")
async def update_product_images(
    product_id: str,
    payload: ProductImagesUpdate,
    user: TokenUser = Depends(get_current_user)
):
    """Bulk edit of alt text, primary flag and order of the gallery"""
    images = parse_reorder_items(payload.images, ProductImageUpdate)
    if images is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid data: expected a list of images"
        )

    try:
        _owned_product(product_id, user)

        changes = [{"id": image.id, **image.columns()} for image in images]
        updated = ProductImageRepository().update_many(product_id, changes)
        logger.info(f"Updated {updated} images of product {product_id}")
        return {"success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to update images of product {product_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.delete("/products/{product_id}/images")
async def delete_product_image(
    product_id: str,
    image_id: Optional[str] = Query(None),
    user: TokenUser = Depends(get_current_user)
):
    """Remove an image; deleting the primary hands the role to the next image"""
    if not image_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Image id is required")

    try:
        _owned_product(product_id, user)

        if not ProductImageRepository().delete(product_id, image_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")
        return {"success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to delete image {image_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)
