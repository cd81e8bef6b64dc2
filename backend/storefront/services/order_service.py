"""
Order Service - checkout orders and merchant status changes

Checkout extras (delivery type, payment method, fee, coupon, subtotal) are
kept as lines appended to the order notes.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from storefront.connectors.realtime_connector import RealtimeConnector
from storefront.domain.order import (
    CreateOrderRequest,
    Order,
    OrderStatus,
)
from storefront.domain.store import Store
from storefront.repositories.order_repository import OrderRepository
from storefront.utils.price import format_brl

logger = logging.getLogger(__name__)

ORDER_UPDATED_EVENT = "order_updated"


def compose_notes(request: CreateOrderRequest) -> str:
    """Customer notes followed by one line per checkout extra"""
    notes = request.notes or ""

    if request.delivery_type:
        notes += f"\nDelivery type: {request.delivery_type}"
    if request.payment_method:
        notes += f"\nPayment: {request.payment_method}"
    if request.delivery_fee and request.delivery_fee > 0:
        notes += f"\nDelivery fee: R$ {request.delivery_fee:.2f}"
    if request.coupon_code:
        discount = f"{request.coupon_discount:.2f}" if request.coupon_discount is not None else "0"
        notes += f"\nCoupon: {request.coupon_code} (-R$ {discount})"
    if request.subtotal:
        notes += f"\nSubtotal: R$ {request.subtotal:.2f}"
    notes += f"\nFinal total: R$ {request.total:.2f}"

    return notes


def parse_order_date(order_date: Optional[str]) -> Optional[datetime]:
    """'2024-05-01' -> midnight UTC of that day"""
    if not order_date:
        return None
    try:
        day = datetime.strptime(order_date, "%Y-%m-%d")
    except ValueError:
        raise ValueError("order_date must use the YYYY-MM-DD format")
    return day.replace(tzinfo=timezone.utc)


def format_whatsapp_message(order: Order, request: CreateOrderRequest, now: datetime = None) -> str:
    """Order summary sent to the merchant's WhatsApp"""
    items = "\n".join(
        f"• {item.quantity}x {item.name} - {format_brl(item.price)}"
        for item in request.items
    )

    lines = [
        "🛒 *NEW ORDER RECEIVED!*",
        "",
        f"📋 *Order #{order.short_id}*",
        f"👤 *Customer:* {order.customer_name}",
        f"📱 *Phone:* {order.customer_phone}",
    ]
    if order.customer_address:
        lines.append(f"📍 *Address:* {order.customer_address}")

    lines += ["", "🛍️ *Items:*", items, ""]

    if request.subtotal and round(request.subtotal, 2) != round(request.total, 2):
        lines.append(f"💰 *Subtotal:* {format_brl(request.subtotal)}")
    if request.coupon_code:
        lines.append(f"🎫 *Discount ({request.coupon_code}):* - {format_brl(request.coupon_discount or 0)}")
    if request.delivery_fee and request.delivery_fee > 0:
        lines.append(f"🚚 *Delivery fee:* + {format_brl(request.delivery_fee)}")

    lines += ["", f"💵 *Total:* {format_brl(request.total)}"]
    if request.notes:
        lines.append(f"📝 *Notes:* {request.notes}")

    now = now or datetime.now()
    lines += [
        "",
        f"⏰ *Time:* {now.strftime('%d/%m/%Y %H:%M')}",
        "",
        "Open the dashboard to accept the order.",
    ]
    return "\n".join(lines)


def send_whatsapp_message(phone: Optional[str], message: str) -> bool:
    """
    Deliver the summary to the merchant

    Messages are not pushed to WhatsApp yet; the merchant reads new orders in
    the dashboard.
    """
    logger.debug(f"WhatsApp summary for {phone}:\n{message}")
    return True


class OrderService:

    def __init__(self, repository: OrderRepository = None, notifier: RealtimeConnector = None):
        self.repository = repository or OrderRepository()
        self.notifier = notifier or RealtimeConnector()

    def create_order(self, store: Store, request: CreateOrderRequest) -> Order:
        """
        Register a checkout (or a manual order entered by the merchant)

        Raises:
            ValueError: malformed order_date
        """
        created_at = parse_order_date(request.order_date)

        customer = self.repository.find_customer(store.id, request.customer_phone)
        if customer is None:
            customer = self.repository.create_customer(
                store.id,
                request.customer_name,
                request.customer_phone,
                request.customer_address
            )
            logger.info(f"Customer created for store {store.slug}: {customer.id}")

        status = OrderStatus.DELIVERED if request.isManualOrder else OrderStatus.PENDING

        order = self.repository.create(
            store_id=store.id,
            customer_id=customer.id,
            customer_name=request.customer_name,
            customer_phone=request.customer_phone,
            customer_address=request.customer_address,
            items=[item.model_dump() for item in request.items],
            total=request.total,
            source=request.source,
            notes=compose_notes(request),
            status=status.value,
            created_at=created_at
        )
        logger.info(f"Order {order.id} created for store {store.slug} ({status.value})")

        send_whatsapp_message(store.whatsapp, format_whatsapp_message(order, request))
        return order

    async def update_status(self, order: Order, store: Store, status: Optional[str]) -> Order:
        """
        Change the status and tell the realtime relay

        Raises:
            ValueError: unknown status
        """
        try:
            new_status = OrderStatus(status)
        except ValueError:
            raise ValueError("Invalid status")

        updated = self.repository.update_status(order.id, new_status.value) or order

        await self.notifier.notify(store.slug, ORDER_UPDATED_EVENT, {
            "orderId": order.id,
            "newStatus": new_status.value,
            "customerName": order.customer_name,
            "total": float(order.total),
        })
        return updated
