"""Top-level session that owns every store and handles user actions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .cart import Cart
from .catalog import CatalogStore, ProductDraftForm
from .config import HomelikeConfig
from .db import (
    ADMIN_CONFIG_KEY,
    CATALOG_KEY,
    ORDERS_KEY,
    PROFILES_KEY,
    DocumentDB,
    PersistenceGateway,
    Snapshot,
)
from .defaults import DEFAULT_ADMIN_CONFIG, DEFAULT_CATALOG
from .errors import ValidationError
from .ids import Clock, IdGenerator
from .mail import MailComposer
from .media import ImageReader
from .models import AdminConfig, Order, Product, Profile
from .orders import Accepted, CheckoutForm, OrderComposer, OrderHistory
from .profiles import ContactFields, ProfileStore
from .receipt import HandOff, ReceiptFormatter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderResult:
    """What the checkout form shows after a submission."""

    order: Order | None = None
    status: str | None = None
    error: str | None = None
    handoff: HandOff | None = None

    @property
    def accepted(self) -> bool:
        return self.order is not None


class ShopSession:
    """Owns the catalog, profiles, order history, cart and form state.

    Call :meth:`open` before any action that saves; those actions raise
    RuntimeError until hydration has completed.  Persistence hooks are
    attached only after hydration, so every store change from then on is
    written through to its own document.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        config: HomelikeConfig | None = None,
        clock: Clock | None = None,
        mail: MailComposer | None = None,
    ) -> None:
        self.config = config or HomelikeConfig()
        shop = self.config.shop
        self._gateway = gateway
        self._ids = IdGenerator(clock)

        self.admin_config: AdminConfig = DEFAULT_ADMIN_CONFIG
        self.catalog = CatalogStore(
            DEFAULT_CATALOG, ids=self._ids, id_prefix=shop.product_prefix
        )
        self.profiles = ProfileStore(ids=self._ids, id_prefix=shop.profile_prefix)
        self.orders = OrderHistory()
        self.cart = Cart()
        self.checkout = CheckoutForm()
        self.product_form = ProductDraftForm()
        self.active_profile_id: str | None = None
        self._opened = False

        self._composer = OrderComposer(self._ids, id_prefix=shop.order_prefix)
        self._receipts = ReceiptFormatter(
            mail, shop_name=shop.name, symbol=shop.currency_symbol
        )

    @classmethod
    def from_config(
        cls,
        config: HomelikeConfig,
        *,
        clock: Clock | None = None,
        mail: MailComposer | None = None,
    ) -> ShopSession:
        gateway = PersistenceGateway(DocumentDB(config.storage.path))
        return cls(gateway, config=config, clock=clock, mail=mail)

    # -- lifecycle ---------------------------------------------------------

    def open(self) -> None:
        """Hydrate from the durable snapshot, then start writing through."""
        self._hydrate(self._gateway.load())

    async def open_async(self) -> None:
        self._hydrate(await self._gateway.load_async())

    def _hydrate(self, snapshot: Snapshot) -> None:
        self.admin_config = snapshot.admin_config
        self.catalog.replace_all(snapshot.products)
        self.profiles.replace_all(snapshot.profiles)
        self.orders.replace_all(snapshot.orders)

        self.catalog.on_change = lambda: self._gateway.save(CATALOG_KEY, list(self.catalog))
        self.profiles.on_change = lambda: self._gateway.save(PROFILES_KEY, list(self.profiles))
        self.orders.on_change = lambda: self._gateway.save(ORDERS_KEY, list(self.orders))
        self._opened = True

    def _require_open(self) -> None:
        if not self._opened:
            raise RuntimeError("ShopSession.open() must complete before saving changes")

    # -- cart --------------------------------------------------------------

    def set_quantity(self, product_id: str, value: Any) -> int:
        return self.cart.set_quantity(product_id, value)

    def estimated_total(self) -> int:
        return self.cart.estimated_total(self.catalog)

    def has_selection(self) -> bool:
        return self.cart.has_selection()

    # -- profiles ----------------------------------------------------------

    @property
    def active_profile(self) -> Profile | None:
        if self.active_profile_id is None:
            return None
        return self.profiles.get(self.active_profile_id)

    def save_profile(self) -> str:
        """Save the checkout contact fields as a profile; return the status."""
        self._require_open()
        try:
            result = self.profiles.upsert(self.checkout.contact)
        except ValidationError as e:
            return str(e)
        self.active_profile_id = result.profile.id
        if result.created:
            return "Saved a new profile in this browser."
        return "Updated your saved profile."

    def use_profile(self, profile_id: str) -> bool:
        """Fill the checkout form from a saved profile."""
        profile = self.profiles.get(profile_id)
        if profile is None:
            logger.warning("No profile with id %s", profile_id)
            return False
        self.active_profile_id = profile.id
        self.checkout.contact = ContactFields.from_profile(profile)
        return True

    # -- orders ------------------------------------------------------------

    def place_order(self) -> OrderResult:
        self._require_open()
        outcome = self._composer.submit(
            self.checkout,
            self.cart,
            self.catalog,
            self.orders,
            profile_id=self.active_profile_id,
        )
        if not isinstance(outcome, Accepted):
            return OrderResult(error=outcome.message)

        handoff = self._receipts.hand_off(outcome.order, self.admin_config.admin_email)
        return OrderResult(order=outcome.order, status=handoff.message, handoff=handoff)

    def orders_newest_first(self) -> list[Order]:
        return self.orders.newest_first()

    def receipt_lines(self, order: Order) -> list[str]:
        return self._receipts.render(order)

    # -- admin -------------------------------------------------------------

    def create_product(self) -> tuple[Product | None, str]:
        """Add the current draft to the catalog.

        On success the draft form is reset; on failure it is left as typed.
        """
        self._require_open()
        try:
            product = self.catalog.add_product(self.product_form.draft)
        except ValidationError as e:
            return None, str(e)
        self.product_form.reset()
        return product, f'Added "{product.name}" to your {self.config.shop.name} catalog.'

    async def attach_product_image(self, reader: ImageReader, source: str | Path) -> bool:
        return await self.product_form.attach_image(reader, source)

    def update_admin_config(self, **changes: str) -> AdminConfig:
        self._require_open()
        self.admin_config = replace(self.admin_config, **changes)
        self._gateway.save(ADMIN_CONFIG_KEY, self.admin_config)
        return self.admin_config
