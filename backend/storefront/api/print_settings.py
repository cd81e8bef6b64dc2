"""
Print Settings API Endpoints
Receipt printer configuration of a store
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.api.deps import INTERNAL_ERROR, STORE_NOT_FOUND, get_owned_store
from storefront.core.auth import TokenUser, get_current_user
from storefront.domain.store import PrintSettings, PrintSettingsUpdate
from storefront.repositories.store_repository import StoreRepository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/stores/{slug}/print-settings")
async def get_print_settings(slug: str):
    """Saved settings, or the defaults when the store never saved any"""
    try:
        found, saved = StoreRepository().get_print_settings(slug)
        if not found:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=STORE_NOT_FOUND)

        return {"print_settings": saved or PrintSettings().model_dump()}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to load print settings of {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.put("/stores/{slug}/print-settings")
async def update_print_settings(
    slug: str,
    payload: PrintSettingsUpdate,
    user: TokenUser = Depends(get_current_user)
):
    if not payload.print_settings:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="print_settings is required")

    try:
        store = get_owned_store(slug, user)
        StoreRepository().update_print_settings(store.id, payload.print_settings)
        logger.info(f"Print settings updated for {slug}")
        return {"success": True, "message": "Print settings saved"}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to save print settings of {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)
