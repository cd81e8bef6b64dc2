"""
Printing API Endpoints
Order receipts as plain text and ESC/POS commands
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.api.deps import INTERNAL_ERROR, get_owned_store_by_id
from storefront.core.auth import TokenUser, get_current_user
from storefront.domain.order import PrintReceiptRequest
from storefront.repositories.order_repository import OrderRepository
from storefront.services.receipt_service import ReceiptService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/imprimir")
async def print_order(
    payload: PrintReceiptRequest,
    user: TokenUser = Depends(get_current_user)
):
    """
    Receipt of an order, for the owner of the store that received it

    The browser cannot reach USB printers, so the receipt is returned for the
    client to print: `content` for the print dialog and `escposCommands`
    for thermal printer bridges.
    """
    if not payload.orderId:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Order id is required")

    try:
        order = OrderRepository().find_by_id(payload.orderId)
        if order is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

        store = get_owned_store_by_id(order.store_id, user)
        receipt = ReceiptService.for_store(store).render(order, store)

        return {
            "success": True,
            "content": receipt["content"],
            "escposCommands": receipt["escpos_commands"],
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to build receipt of order {payload.orderId}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)
