"""Order composition and the append-only order history."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, Union

from .ids import IdGenerator
from .models import Order, OrderItem, PaymentMethod, clean_optional
from .profiles import ContactFields

if TYPE_CHECKING:
    from .cart import Cart
    from .catalog import CatalogStore

logger = logging.getLogger(__name__)

MISSING_CONTACT = "missing contact fields"
EMPTY_CART = "empty cart"

_MESSAGES = {
    MISSING_CONTACT: "Please add your name and email so we can confirm your order.",
    EMPTY_CART: "Add at least one spice to your order.",
}


@dataclass
class CheckoutForm:
    """Current state of the order form."""

    contact: ContactFields = field(default_factory=ContactFields)
    note: str = ""
    payment_method: PaymentMethod = PaymentMethod.UPI


@dataclass(frozen=True)
class Accepted:
    order: Order


@dataclass(frozen=True)
class Rejected:
    reason: str

    @property
    def message(self) -> str:
        return _MESSAGES[self.reason]


SubmitOutcome = Union[Accepted, Rejected]


class OrderHistory:
    """Every order placed on this device, oldest first. Never shrinks."""

    def __init__(
        self,
        orders: Iterable[Order] = (),
        *,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._orders: list[Order] = list(orders)
        self.on_change = on_change

    def __iter__(self) -> Iterator[Order]:
        return iter(list(self._orders))

    def __len__(self) -> int:
        return len(self._orders)

    def get(self, order_id: str) -> Order | None:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def newest_first(self) -> list[Order]:
        return sorted(self._orders, key=lambda o: o.created_at, reverse=True)

    def replace_all(self, orders: Iterable[Order]) -> None:
        self._orders = list(orders)

    def append(self, order: Order) -> None:
        self._orders.append(order)
        if self.on_change is not None:
            self.on_change()


def build_items(cart: Cart, catalog: CatalogStore) -> list[OrderItem]:
    """Snapshot cart lines in catalog display order.

    Cart entries whose product is no longer in the catalog are skipped.
    """
    items: list[OrderItem] = []
    for product in catalog:
        quantity = cart.quantity(product.id)
        if quantity > 0:
            items.append(
                OrderItem(
                    product_id=product.id,
                    name=product.name,
                    unit_price=product.price,
                    quantity=quantity,
                )
            )
    stale = set(cart.items()) - {item.product_id for item in items}
    if stale:
        logger.warning("Skipping cart entries no longer in the catalog: %s", sorted(stale))
    return items


class OrderComposer:
    """Turns the checkout form and cart into an order.

    A submission is either rejected, leaving every piece of state as it was,
    or accepted: the order is appended to the history, then the cart and the
    order note are cleared.
    """

    def __init__(self, ids: IdGenerator | None = None, *, id_prefix: str = "HL") -> None:
        self._ids = ids or IdGenerator()
        self._id_prefix = id_prefix

    def submit(
        self,
        form: CheckoutForm,
        cart: Cart,
        catalog: CatalogStore,
        history: OrderHistory,
        profile_id: str | None = None,
    ) -> SubmitOutcome:
        contact = form.contact.normalized()
        if not contact.has_name_and_email():
            return Rejected(MISSING_CONTACT)
        if not cart.has_selection():
            return Rejected(EMPTY_CART)

        items = build_items(cart, catalog)
        if not items:
            return Rejected(EMPTY_CART)

        order = Order(
            id=self._ids.prefixed(self._id_prefix),
            created_at=self._ids.now(),
            customer_name=contact.name,
            customer_email=contact.email,
            customer_phone=clean_optional(contact.phone),
            customer_address=clean_optional(contact.address),
            customer_city=clean_optional(contact.city),
            customer_postal_code=clean_optional(contact.postal_code),
            note=clean_optional(form.note),
            payment_method=PaymentMethod(form.payment_method),
            items=tuple(items),
            total=sum(item.subtotal for item in items),
            profile_id=profile_id,
        )
        history.append(order)
        logger.info("Placed order %s: %d item(s), total %d", order.id, len(items), order.total)

        cart.clear()
        form.note = ""
        return Accepted(order)
