"""Product catalog store and the admin's new-product draft."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Iterator

from .errors import ValidationError
from .ids import IdGenerator, slugify
from .models import HeatLevel, Product, clean_optional

if TYPE_CHECKING:
    from .media import ImageReader

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Custom Homelike blend."
DEFAULT_UNIT = "100g"


@dataclass
class ProductDraft:
    """Values typed into the admin's "add a spice" form."""

    name: str = ""
    description: str = ""
    price: str | int | float = ""
    unit: str = DEFAULT_UNIT
    heat: HeatLevel = HeatLevel.MEDIUM
    origin: str = ""
    notes: str = ""
    image_data_url: str | None = None
    is_signature: bool = False


def parse_price(value: str | int | float) -> int:
    """Parse a draft price into whole rupees, rounding half up.

    Raises:
        ValidationError: If the value is not a finite number that rounds
            to at least one rupee.
    """
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError("Enter a valid price in INR.") from None
    if not math.isfinite(number):
        raise ValidationError("Enter a valid price in INR.")
    price = math.floor(number + 0.5)
    if price <= 0:
        raise ValidationError("Enter a valid price in INR.")
    return price


def parse_heat(value: HeatLevel | str) -> HeatLevel:
    try:
        return HeatLevel(value)
    except (TypeError, ValueError):
        choices = ", ".join(level.value for level in HeatLevel)
        raise ValidationError(f"Choose a heat level: {choices}.") from None


class CatalogStore:
    """Ordered collection of products; insertion order is display order."""

    def __init__(
        self,
        products: Iterable[Product] = (),
        *,
        ids: IdGenerator | None = None,
        id_prefix: str = "spice",
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._products: list[Product] = list(products)
        self._ids = ids or IdGenerator()
        self._id_prefix = id_prefix
        self.on_change = on_change

    def __iter__(self) -> Iterator[Product]:
        return iter(list(self._products))

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, product_id: object) -> bool:
        return any(p.id == product_id for p in self._products)

    def ids(self) -> list[str]:
        return [p.id for p in self._products]

    def get(self, product_id: str) -> Product | None:
        for product in self._products:
            if product.id == product_id:
                return product
        return None

    def price_of(self, product_id: str) -> int | None:
        product = self.get(product_id)
        return product.price if product is not None else None

    def replace_all(self, products: Iterable[Product]) -> None:
        """Swap in a hydrated collection without signalling a change."""
        self._products = list(products)

    def add_product(self, draft: ProductDraft) -> Product:
        """Validate a draft and append it as a new product.

        Returns:
            The created product.

        Raises:
            ValidationError: If the name is blank, or the price or heat
                level is invalid.
                The catalog is left unchanged.
        """
        name = draft.name.strip()
        if not name:
            raise ValidationError("Give your spice a name before adding it.")
        price = parse_price(draft.price)
        heat = parse_heat(draft.heat)

        candidate = slugify(name) or self._ids.prefixed(self._id_prefix)
        product_id = self._ids.unique(candidate, self.__contains__)

        product = Product(
            id=product_id,
            name=name,
            description=clean_optional(draft.description) or DEFAULT_DESCRIPTION,
            price=price,
            unit=clean_optional(draft.unit) or DEFAULT_UNIT,
            heat=heat,
            notes=clean_optional(draft.notes),
            origin=clean_optional(draft.origin),
            is_new=True,
            is_signature=draft.is_signature,
            image_data_url=draft.image_data_url,
        )
        self._products.append(product)
        logger.info("Added product %s (%s)", product.id, product.name)
        if self.on_change is not None:
            self.on_change()
        return product


class ProductDraftForm:
    """Holds the draft currently being edited in the admin panel.

    Image reads complete asynchronously.  A read result is applied to the
    draft that is current when it arrives, and dropped if the form was reset
    while the read was pending.
    """

    def __init__(self) -> None:
        self.draft = ProductDraft()
        self._generation = 0

    def reset(self) -> None:
        self.draft = ProductDraft()
        self._generation += 1

    async def attach_image(self, reader: ImageReader, source) -> bool:
        """Read ``source`` through ``reader`` and attach it to the draft.

        Returns:
            True if the image was applied.
        """
        generation = self._generation
        result = await reader.read_as_data_url(source)
        if result is None:
            logger.debug("Image read for %r produced no result", source)
            return False
        if generation != self._generation:
            logger.info("Dropping image for %r: draft was reset meanwhile", source)
            return False
        self.draft.image_data_url = result
        return True
