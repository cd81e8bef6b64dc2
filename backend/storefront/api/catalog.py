"""
Catalog API Endpoints
Read-only reference data: store directory categories and page layouts
"""
import logging

from fastapi import APIRouter, HTTPException, status

from storefront.repositories.store_repository import StoreRepository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/categories")
async def get_store_categories():
    """Store directory categories, alphabetical"""
    try:
        return [category.to_dict() for category in StoreRepository().list_store_categories()]
    except Exception as e:
        logger.exception(f"Failed to list store categories: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch categories")


@router.get("/layouts")
async def get_layouts():
    try:
        return [layout.to_dict() for layout in StoreRepository().list_layouts()]
    except Exception as e:
        logger.exception(f"Failed to list layouts: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch layouts")
