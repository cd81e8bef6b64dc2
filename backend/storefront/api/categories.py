"""
Product Categories API Endpoints
Categories a store groups its products under, and their order
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from storefront.api.deps import INTERNAL_ERROR, get_owned_store, get_store_or_404
from storefront.core.auth import TokenUser, get_current_user, get_current_user_optional
from storefront.domain.product import (
    CategoryReorderItem,
    CategoryReorderRequest,
    GlobalCategoryCreate,
    ProductCategoryCreate,
    ProductCategoryUpdate,
    parse_reorder_items,
)
from storefront.domain.store import Store
from storefront.services.category_service import CategoryInUse, CategoryNotFound, CategoryService

logger = logging.getLogger(__name__)

router = APIRouter()


def _store_for_owner(slug: str, user: TokenUser) -> Store:
    """Category management answers 401 (not 403) to anyone but the owner"""
    store = get_store_or_404(slug)
    if store.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return store


@router.get("/product-categories")
async def list_all_product_categories():
    """Active categories of the whole platform, for the category picker"""
    try:
        return CategoryService().list_active()
    except Exception as e:
        logger.exception(f"Failed to list product categories: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.post("/product-categories", status_code=status.HTTP_201_CREATED)
async def create_global_product_category(
    payload: GlobalCategoryCreate,
    user: TokenUser = Depends(get_current_user)
):
    try:
        category = CategoryService().create_global(payload)
        logger.info(f"Category {category.get('slug')} created by {user.id}")
        return category

    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to create product category: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.get("/stores/{slug}/product-categories")
async def get_product_categories(
    slug: str,
    user: Optional[TokenUser] = Depends(get_current_user_optional)
):
    """
    Categories owned by the caller (or the store owner) plus those used by
    the store's products. Lookup failures other than an unknown store yield
    an empty list.
    """
    try:
        store = get_store_or_404(slug)
        return CategoryService().list_for_store(store, user.id if user else None)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to list categories of {slug}: {e}")
        return []


@router.post("/stores/{slug}/product-categories", status_code=status.HTTP_201_CREATED)
async def create_product_category(
    slug: str,
    payload: ProductCategoryCreate,
    user: TokenUser = Depends(get_current_user)
):
    try:
        store = _store_for_owner(slug, user)
        return CategoryService().create(store, user.id, payload)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to create category in {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.put("/stores/{slug}/product-categories")
async def update_product_category(
    slug: str,
    payload: ProductCategoryUpdate,
    user: TokenUser = Depends(get_current_user)
):
    try:
        store = _store_for_owner(slug, user)
        return CategoryService().update(store, user.id, payload)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except CategoryNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    except Exception as e:
        logger.exception(f"Failed to update category in {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.delete("/stores/{slug}/product-categories")
async def delete_product_category(
    slug: str,
    id: Optional[int] = Query(None, description="Category id"),
    user: TokenUser = Depends(get_current_user)
):
    if not id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category id is required")

    try:
        store = _store_for_owner(slug, user)
        CategoryService().delete(store, id)
        return {"success": True}

    except HTTPException:
        raise
    except CategoryInUse:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This category is used by products of the store"
        )
    except CategoryNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    except Exception as e:
        logger.exception(f"Failed to delete category {id} in {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.put("/stores/{slug}/categories/reorder")
async def reorder_categories(
    slug: str,
    payload: CategoryReorderRequest,
    user: TokenUser = Depends(get_current_user)
):
    get_owned_store(slug, user)

    items = parse_reorder_items(payload.categories, CategoryReorderItem)
    if items is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid data")

    try:
        CategoryService().reorder(items)
        return {"success": True, "message": "Category order updated"}

    except CategoryNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Some categories were not found")
    except Exception as e:
        logger.exception(f"Failed to reorder categories of {slug}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save category order"
        )
