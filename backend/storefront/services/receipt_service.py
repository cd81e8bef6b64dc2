"""
Receipt Service - printable order receipts

Builds the plain text receipt shown in the browser print dialog and the
ESC/POS command list sent to thermal printers. The line width follows the
paper width in the store's print settings.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from storefront.domain.order import Order
from storefront.domain.store import PrintSettings, Store

logger = logging.getLogger(__name__)

# ESC/POS control sequences
ESC_INIT = "\x1b\x40"
ESC_ALIGN_CENTER = "\x1b\x61\x01"
ESC_ALIGN_LEFT = "\x1b\x61\x00"
ESC_BOLD_ON = "\x1b\x45\x01"
ESC_BOLD_OFF = "\x1b\x45\x00"
GS_FULL_CUT = "\x1d\x56\x42\x00"

# Characters per line for a given paper width (mm), Font A
LINE_WIDTHS = {58: 32, 80: 48}
DEFAULT_LINE_WIDTH = 48

STATUS_TEXT = {
    "pending": "PENDING",
    "accepted": "ACCEPTED",
    "preparing": "PREPARING",
    "delivering": "OUT FOR DELIVERY",
    "delivered": "DELIVERED",
    "cancelled": "CANCELLED",
}


def status_text(status: str) -> str:
    return STATUS_TEXT.get(status, (status or "").upper())


def line_width(settings: PrintSettings) -> int:
    return LINE_WIDTHS.get(settings.paper_width, DEFAULT_LINE_WIDTH)


def money(value) -> str:
    return f"R$ {Decimal(str(value or 0)):.2f}"


def _item_lines(items: List[Any]) -> Tuple[List[str], Decimal]:
    lines = []
    subtotal = Decimal("0")
    for item in items:
        if not isinstance(item, dict):
            continue
        price = Decimal(str(item.get("price") or 0))
        quantity = int(item.get("quantity") or 1)
        total = price * quantity
        subtotal += total
        lines += [
            f"{quantity}x {item.get('name', '')}",
            f"    {money(price)} each",
            f"    Total: {money(total)}",
            "",
        ]
    return lines, subtotal


class ReceiptService:

    def __init__(self, settings: PrintSettings = None):
        self.settings = settings or PrintSettings()

    @classmethod
    def for_store(cls, store: Store) -> "ReceiptService":
        """Uses the store's saved print settings, falling back to the defaults"""
        try:
            return cls(PrintSettings(**(store.print_settings or {})))
        except ValidationError as e:
            logger.warning(f"Invalid print settings on store {store.slug}, using defaults: {e}")
            return cls()

    def header_lines(self, store: Store) -> List[str]:
        lines = [store.name.upper()]
        if self.settings.print_address and store.address_line:
            lines.append(store.address_line)
        return lines

    def order_lines(self, order: Order) -> List[str]:
        lines = [f"Order: #{order.id[-8:]}"]
        if order.created_at:
            lines.append(f"Date: {order.created_at.strftime('%d/%m/%Y')}")
            lines.append(f"Time: {order.created_at.strftime('%H:%M:%S')}")
        lines.append(f"Status: {status_text(order.status)}")
        return lines

    def body_lines(self, order: Order, store: Store) -> List[str]:
        """Customer, items, totals, notes and footer"""
        separator = "=" * line_width(self.settings)

        lines = ["--- CUSTOMER ---", f"Name: {order.customer_name or ''}", f"Phone: {order.customer_phone or ''}"]
        if order.customer_address:
            lines.append(f"Address: {order.customer_address}")
        else:
            lines.append("Type: PICKUP")
        lines += ["", "--- ITEMS ---"]

        items, subtotal = _item_lines(order.items)
        lines += items
        lines += [
            separator,
            f"Subtotal: {money(subtotal)}",
            separator,
            f"TOTAL: {money(order.total)}",
            separator,
            "",
        ]

        if order.notes:
            lines += ["--- NOTES ---", order.notes.strip(), ""]

        if store.whatsapp:
            lines.append(f"WhatsApp: {store.whatsapp}")
        lines += ["", "Thank you for your order!".center(line_width(self.settings)).rstrip(), separator]
        return lines

    def content(self, order: Order, store: Store) -> str:
        """Plain text receipt"""
        width = line_width(self.settings)
        separator = "=" * width

        lines = [separator]
        lines += [line.center(width).rstrip() for line in self.header_lines(store)]
        lines += [separator, ""]
        lines += self.order_lines(order)
        lines.append("")
        lines += self.body_lines(order, store)
        return "\n".join(lines) + "\n"

    def escpos_commands(self, order: Order, store: Store) -> List[str]:
        """
        ESC/POS commands for a thermal printer

        The header is centered and bold; the paper is cut at the end when
        auto_cut is on.
        """
        separator = "=" * line_width(self.settings)

        commands = [ESC_INIT, ESC_ALIGN_CENTER, ESC_BOLD_ON, f"{separator}\n"]
        commands += [f"{line}\n" for line in self.header_lines(store)]
        commands += [f"{separator}\n\n", ESC_BOLD_OFF, ESC_ALIGN_LEFT]
        commands += [f"{line}\n" for line in self.order_lines(order)]
        commands.append("\n")
        commands += [f"{line}\n" for line in self.body_lines(order, store)]

        if self.settings.auto_cut:
            commands.append(GS_FULL_CUT)
        return commands

    def render(self, order: Order, store: Store) -> Dict[str, Any]:
        logger.info(f"Receipt generated for order {order.short_id} of store {store.slug}")
        return {
            "content": self.content(order, store),
            "escpos_commands": self.escpos_commands(order, store),
        }
