"""In-progress cart: product id to desired quantity."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .catalog import CatalogStore


def coerce_quantity(value: Any) -> int:
    """Turn arbitrary input into a non-negative whole quantity.

    Non-numeric and non-finite input count as 0, negatives clamp to 0 and
    fractions are floored.
    """
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    if not math.isfinite(number):
        return 0
    return max(0, math.floor(number))


class Cart:
    """Maps product id to a quantity of at least 1.

    A product with no quantity is absent from the mapping; a stored zero never
    exists.
    """

    def __init__(self) -> None:
        self._quantities: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._quantities)

    def set_quantity(self, product_id: str, value: Any) -> int:
        """Set the quantity for a product and return the stored value."""
        quantity = coerce_quantity(value)
        if quantity == 0:
            self._quantities.pop(product_id, None)
        else:
            self._quantities[product_id] = quantity
        return quantity

    def quantity(self, product_id: str) -> int:
        return self._quantities.get(product_id, 0)

    def items(self) -> dict[str, int]:
        return dict(self._quantities)

    def has_selection(self) -> bool:
        return bool(self._quantities)

    def estimated_total(self, catalog: CatalogStore) -> int:
        """Live estimate against current catalog prices.

        Entries whose product has left the catalog contribute nothing.
        """
        total = 0
        for product_id, quantity in self._quantities.items():
            price = catalog.price_of(product_id)
            if price is not None:
                total += price * quantity
        return total

    def clear(self) -> None:
        self._quantities.clear()
