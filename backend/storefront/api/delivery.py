"""
Delivery API Endpoints
Delivery settings per store and delivery fee quotes
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.api.deps import INTERNAL_ERROR, get_owned_store, get_store_or_404
from storefront.core.auth import TokenUser, get_current_user
from storefront.domain.delivery import DeliveryQuoteRequest, DeliverySettingsUpdate
from storefront.domain.store import Store
from storefront.services.delivery_service import DeliveryService, DeliverySettingsNotFound

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/stores/{slug}/delivery-settings")
async def get_delivery_settings(slug: str):
    """Public; a store seen for the first time gets the default settings"""
    try:
        store = get_store_or_404(slug)
        return DeliveryService().get_settings(store).to_dict()

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to load delivery settings of {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.put("/stores/{slug}/delivery-settings")
async def update_delivery_settings(
    slug: str,
    payload: DeliverySettingsUpdate,
    user: TokenUser = Depends(get_current_user)
):
    try:
        store = get_owned_store(slug, user)
        return DeliveryService().update_settings(store, payload).to_dict()

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to save delivery settings of {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


async def _quote(store: Store, payload: DeliveryQuoteRequest, public: bool = False) -> dict:
    try:
        service = DeliveryService()
        if public:
            quote = await service.quote_public(store, payload)
        else:
            quote = await service.quote(store, payload)
        return quote.model_dump()

    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DeliverySettingsNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Delivery settings not found")
    except Exception as e:
        logger.exception(f"Failed to quote delivery for {store.slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.post("/stores/{slug}/calculate-delivery")
async def calculate_delivery(
    slug: str,
    payload: DeliveryQuoteRequest,
    user: TokenUser = Depends(get_current_user)
):
    """Quote used by the merchant when registering manual orders"""
    store = get_owned_store(slug, user)
    return await _quote(store, payload)


@router.post("/stores/{slug}/calculate-delivery-public")
async def calculate_delivery_public(slug: str, payload: DeliveryQuoteRequest):
    """Quote shown to customers at checkout; free delivery is decided before geocoding"""
    store = get_store_or_404(slug)
    return await _quote(store, payload, public=True)
