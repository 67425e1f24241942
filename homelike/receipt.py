"""Receipt text rendering and the hand-off decision."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import TYPE_CHECKING

from .models import Order

if TYPE_CHECKING:
    from .mail import MailComposer

logger = logging.getLogger(__name__)

_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def _group_indian(digits: str) -> str:
    """Group digits the Indian way: last three, then pairs."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs: list[str] = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_amount(amount: int | float, symbol: str = "₹") -> str:
    """Format a currency amount with no fractional digits.

    >>> format_amount(125000)
    '₹1,25,000'
    """
    rounded = int(round(amount))
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{_group_indian(str(abs(rounded)))}"


def format_datetime(dt: datetime, tz: tzinfo | None = None) -> str:
    """Medium date with short time, e.g. ``15 Jan 2025, 3:05 pm``.

    Converts to ``tz`` first, or to the local zone when ``tz`` is None.
    """
    local = dt.astimezone(tz)
    hour = local.hour % 12 or 12
    meridiem = "am" if local.hour < 12 else "pm"
    return (
        f"{local.day} {_MONTHS[local.month - 1]} {local.year}, "
        f"{hour}:{local.minute:02d} {meridiem}"
    )


def address_line(order: Order) -> str | None:
    parts = [
        part
        for part in (order.customer_address, order.customer_city, order.customer_postal_code)
        if part
    ]
    return ", ".join(parts) if parts else None


def render_receipt(
    order: Order,
    *,
    shop_name: str = "Homelike",
    symbol: str = "₹",
) -> list[str]:
    """Render an order as the lines of a plain-text receipt."""
    lines = [
        f"New {shop_name} order: {order.id}",
        "",
        f"Customer: {order.customer_name}",
        f"Email: {order.customer_email}",
    ]
    if order.customer_phone:
        lines.append(f"Phone: {order.customer_phone}")
    address = address_line(order)
    if address:
        lines.append(f"Address: {address}")

    lines.extend(["", "Items:"])
    for item in order.items:
        lines.append(
            f"{item.name} ×{item.quantity} @ {format_amount(item.unit_price, symbol)}"
            f" = {format_amount(item.subtotal, symbol)}"
        )
    lines.append("")
    lines.append(f"Total: {format_amount(order.total, symbol)}")
    lines.append(f"Payment method: {order.payment_method.value}")
    if order.note:
        lines.extend(["", f"Customer note: {order.note}"])
    lines.extend(["", f"This order was placed from the {shop_name} startup site."])
    return lines


class HandOffChannel(str, Enum):
    MAIL_DRAFT = "drafted for hand-off"
    LOCAL_ONLY = "stored locally only"


def decide_channel(admin_email: str | None) -> HandOffChannel:
    if admin_email and admin_email.strip():
        return HandOffChannel.MAIL_DRAFT
    return HandOffChannel.LOCAL_ONLY


@dataclass(frozen=True)
class HandOff:
    channel: HandOffChannel
    lines: list[str]
    message: str


class ReceiptFormatter:
    """Renders receipts and passes them to the mail composer when configured."""

    def __init__(
        self,
        mail: MailComposer | None = None,
        *,
        shop_name: str = "Homelike",
        symbol: str = "₹",
    ) -> None:
        self._mail = mail
        self._shop_name = shop_name
        self._symbol = symbol

    def render(self, order: Order) -> list[str]:
        return render_receipt(order, shop_name=self._shop_name, symbol=self._symbol)

    def subject(self, order: Order) -> str:
        return f"New {self._shop_name} order {order.id}"

    def hand_off(self, order: Order, admin_email: str | None) -> HandOff:
        lines = self.render(order)
        channel = decide_channel(admin_email)
        if channel is HandOffChannel.MAIL_DRAFT and self._mail is not None:
            try:
                self._mail.compose(admin_email.strip(), self.subject(order), "\n".join(lines))
            except Exception:
                logger.exception("Could not draft receipt for %s; kept locally", order.id)
                return HandOff(
                    HandOffChannel.LOCAL_ONLY,
                    lines,
                    "Order saved in the local admin panel, but the email draft "
                    "could not be opened.",
                )
            logger.info("Drafted receipt for %s to %s", order.id, admin_email.strip())
            message = (
                f"Order drafted. Your email app should open with a ready to send "
                f"order email to the {self._shop_name} admin."
            )
            return HandOff(channel, lines, message)

        if channel is HandOffChannel.MAIL_DRAFT:
            logger.warning("Admin email set but no mail composer available; %s kept locally", order.id)
        return HandOff(
            HandOffChannel.LOCAL_ONLY,
            lines,
            "Order saved in the local admin panel. Add an admin email in the "
            "Admin Panel to enable one click email sending.",
        )
