"""
Orders API Endpoints
Checkout, order lookups for customers and merchants, status changes
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from storefront.api.deps import INTERNAL_ERROR, STORE_NOT_FOUND, get_owned_store, get_store_or_404
from storefront.core.auth import TokenUser, get_current_user
from storefront.domain.order import CreateOrderRequest, OrderStatusUpdate
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.store_repository import StoreRepository
from storefront.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter()

ORDER_NOT_FOUND = "Order not found"


@router.post("/orders/create")
async def create_order(payload: CreateOrderRequest):
    """
    Public checkout

    Finds or creates the customer by phone, stores the order with the
    checkout extras in its notes and prepares the merchant's WhatsApp summary.
    """
    try:
        store = get_store_or_404(payload.storeSlug)
        order = OrderService().create_order(store, payload)

        return {
            "success": True,
            "orderId": order.id,
            "message": "Order created successfully"
        }

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to create order for {payload.storeSlug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.get("/orders")
async def get_customer_orders(
    store_slug: Optional[str] = Query(None),
    customer_phone: Optional[str] = Query(None)
):
    """Order history of one customer in one store, newest first"""
    if not store_slug or not customer_phone:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="store_slug and customer_phone are required"
        )

    try:
        store = get_store_or_404(store_slug)
        orders = OrderRepository().find_by_store(store.id, customer_phone=customer_phone)
        return [order.to_dict() for order in orders]

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list orders of {customer_phone} in {store_slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.get("/orders/{order_id}")
async def get_order(order_id: str):
    try:
        order = OrderRepository().find_by_id(order_id)
        if order is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ORDER_NOT_FOUND)
        return order.to_dict()

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to load order {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.get("/stores/{slug}/orders")
async def get_store_orders(slug: str, user: TokenUser = Depends(get_current_user)):
    """Merchant dashboard: every order of the store, newest first"""
    try:
        store = get_owned_store(slug, user)
        orders = OrderRepository().find_by_store(store.id)
        return {"success": True, "orders": [order.to_dict() for order in orders]}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list orders of {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.put("/orders/{order_id}/status")
async def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    user: TokenUser = Depends(get_current_user)
):
    """
    Change the status of an order of one of the caller's stores

    The realtime relay is told about the change; a relay failure does not
    fail the request.
    """
    try:
        order = OrderRepository().find_by_id(order_id)
        if order is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ORDER_NOT_FOUND)

        store = StoreRepository().find_by_id(order.store_id)
        if store is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=STORE_NOT_FOUND)

        if store.user_id != user.id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

        updated = await OrderService().update_status(order, store, payload.status)
        return updated.to_dict()

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to update order {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)
