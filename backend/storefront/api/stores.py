"""
Stores API Endpoints
Store creation, public store page data and profile updates
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.api.deps import INTERNAL_ERROR, get_owned_store, get_store_or_404
from storefront.core.auth import TokenUser, get_current_user
from storefront.domain.store import DEFAULT_COLORS, StoreCreate, StoreUpdate
from storefront.repositories.store_repository import StoreRepository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/stores")
async def create_store(payload: StoreCreate, user: TokenUser = Depends(get_current_user)):
    """
    Create a store owned by the caller

    The slug must be free; colors fall back to the default palette.
    """
    if not payload.store_name or not payload.slug:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Store name and slug are required")

    try:
        repo = StoreRepository()

        if repo.slug_exists(payload.slug):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This URL is already in use. Choose another one."
            )

        store = repo.create(
            user_id=user.id,
            name=payload.store_name,
            slug=payload.slug,
            logo=payload.logo or "",
            colors=payload.colors or dict(DEFAULT_COLORS),
            description=payload.description or ""
        )
        return store.to_dict()

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to create store {payload.slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.get("/stores/{slug}")
async def get_store(slug: str):
    """Public store page data with its directory category embedded"""
    try:
        return get_store_or_404(slug).to_dict()
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to load store {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.put("/stores/{slug}")
async def update_store(slug: str, payload: StoreUpdate, user: TokenUser = Depends(get_current_user)):
    if not payload.name or not payload.name.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Store name is required")

    whatsapp = (payload.social_networks or {}).get("whatsapp")
    if not isinstance(whatsapp, str) or not whatsapp.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="WhatsApp is required")

    try:
        get_owned_store(slug, user)

        updated = StoreRepository().update_profile(
            slug=slug,
            name=payload.name.strip(),
            description=(payload.description or "").strip(),
            logo=payload.logo or "",
            category_id=payload.category_id or None,
            colors=payload.colors or dict(DEFAULT_COLORS),
            social_networks=payload.social_networks or {}
        )
        if updated is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Store not found")

        logger.info(f"Store {slug} updated")
        return updated.to_dict()

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to update store {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.get("/user/stores")
async def get_user_stores(user: TokenUser = Depends(get_current_user)):
    """The caller's stores, newest first"""
    try:
        stores = StoreRepository().find_by_user(user.id)
        return [store.to_dict() for store in stores]
    except Exception as e:
        logger.exception(f"Failed to list stores of user {user.id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)
