"""Data models for the catalog, profiles, orders and admin settings.

Each record converts to and from the camelCase document shape kept in the
on-device store.  Keys the model does not know are carried in ``extra`` and
written back untouched.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class HeatLevel(str, Enum):
    MILD = "Mild"
    MEDIUM = "Medium"
    HOT = "Hot"


class PaymentMethod(str, Enum):
    UPI = "UPI"
    CASH_ON_DELIVERY = "Cash on Delivery"
    CARD = "Card"


def clean_optional(value: Any) -> str | None:
    """Trim a free-text value; blank and missing both become None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require_str(raw: dict, key: str) -> str:
    value = raw[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _require_int(raw: dict, key: str) -> int:
    value = raw[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key} must be a number, got {type(value).__name__}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"{key} must be finite, got {value}")
    return int(value)


def _optional_str(raw: dict, key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _extra(raw: dict, known: tuple[str, ...]) -> dict:
    return {k: v for k, v in raw.items() if k not in known}


def _put_optional(doc: dict, key: str, value: Any) -> None:
    if value is not None:
        doc[key] = value


def format_timestamp(dt: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


_PRODUCT_KEYS = (
    "id", "name", "description", "notes", "price", "unit", "heat",
    "origin", "isNew", "isSignature", "imageDataUrl",
)


@dataclass(frozen=True)
class Product:
    """A purchasable catalog entry."""

    id: str
    name: str
    description: str
    price: int  # whole rupees
    unit: str
    heat: HeatLevel = HeatLevel.MEDIUM
    notes: str | None = None
    origin: str | None = None
    is_new: bool = False
    is_signature: bool = False
    image_data_url: str | None = None
    extra: dict = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict:
        doc: dict[str, Any] = dict(self.extra)
        doc.update(
            id=self.id,
            name=self.name,
            description=self.description,
            price=self.price,
            unit=self.unit,
            heat=self.heat.value,
        )
        _put_optional(doc, "notes", self.notes)
        _put_optional(doc, "origin", self.origin)
        if self.is_new:
            doc["isNew"] = True
        if self.is_signature:
            doc["isSignature"] = True
        _put_optional(doc, "imageDataUrl", self.image_data_url)
        return doc

    @classmethod
    def from_dict(cls, raw: dict) -> Product:
        return cls(
            id=_require_str(raw, "id"),
            name=_require_str(raw, "name"),
            description=raw.get("description") or "",
            price=_require_int(raw, "price"),
            unit=raw.get("unit") or "",
            heat=HeatLevel(raw.get("heat", HeatLevel.MEDIUM.value)),
            notes=_optional_str(raw, "notes"),
            origin=_optional_str(raw, "origin"),
            is_new=bool(raw.get("isNew", False)),
            is_signature=bool(raw.get("isSignature", False)),
            image_data_url=_optional_str(raw, "imageDataUrl"),
            extra=_extra(raw, _PRODUCT_KEYS),
        )


_PROFILE_KEYS = ("id", "name", "email", "phone", "address", "city", "postalCode")


@dataclass
class Profile:
    """A saved customer contact record, keyed by normalized email."""

    id: str
    name: str
    email: str
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    extra: dict = field(default_factory=dict, compare=False)

    @property
    def email_key(self) -> str:
        return self.email.strip().lower()

    def to_dict(self) -> dict:
        doc: dict[str, Any] = dict(self.extra)
        doc.update(id=self.id, name=self.name, email=self.email)
        _put_optional(doc, "phone", self.phone)
        _put_optional(doc, "address", self.address)
        _put_optional(doc, "city", self.city)
        _put_optional(doc, "postalCode", self.postal_code)
        return doc

    @classmethod
    def from_dict(cls, raw: dict) -> Profile:
        return cls(
            id=_require_str(raw, "id"),
            name=_require_str(raw, "name"),
            email=_require_str(raw, "email"),
            phone=_optional_str(raw, "phone"),
            address=_optional_str(raw, "address"),
            city=_optional_str(raw, "city"),
            postal_code=_optional_str(raw, "postalCode"),
            extra=_extra(raw, _PROFILE_KEYS),
        )


@dataclass(frozen=True)
class OrderItem:
    """Snapshot of one product line at order time."""

    product_id: str
    name: str
    unit_price: int
    quantity: int

    @property
    def subtotal(self) -> int:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "spiceId": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "subtotal": self.subtotal,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> OrderItem:
        return cls(
            product_id=_require_str(raw, "spiceId"),
            name=_require_str(raw, "name"),
            unit_price=_require_int(raw, "unitPrice"),
            quantity=_require_int(raw, "quantity"),
        )


_ORDER_KEYS = (
    "id", "createdAt", "customerName", "customerEmail", "customerPhone",
    "customerAddress", "customerCity", "customerPostalCode", "note",
    "paymentMethod", "items", "total", "userId",
)


@dataclass(frozen=True)
class Order:
    """An immutable record of a committed purchase."""

    id: str
    created_at: datetime
    customer_name: str
    customer_email: str
    payment_method: PaymentMethod
    items: tuple[OrderItem, ...]
    total: int
    customer_phone: str | None = None
    customer_address: str | None = None
    customer_city: str | None = None
    customer_postal_code: str | None = None
    note: str | None = None
    profile_id: str | None = None
    extra: dict = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict:
        doc: dict[str, Any] = dict(self.extra)
        doc.update(
            id=self.id,
            createdAt=format_timestamp(self.created_at),
            customerName=self.customer_name,
            customerEmail=self.customer_email,
        )
        _put_optional(doc, "customerPhone", self.customer_phone)
        _put_optional(doc, "customerAddress", self.customer_address)
        _put_optional(doc, "customerCity", self.customer_city)
        _put_optional(doc, "customerPostalCode", self.customer_postal_code)
        _put_optional(doc, "note", self.note)
        doc["paymentMethod"] = self.payment_method.value
        doc["items"] = [item.to_dict() for item in self.items]
        doc["total"] = self.total
        _put_optional(doc, "userId", self.profile_id)
        return doc

    @classmethod
    def from_dict(cls, raw: dict) -> Order:
        items = raw["items"]
        if not isinstance(items, list):
            raise TypeError("items must be a list")
        return cls(
            id=_require_str(raw, "id"),
            created_at=parse_timestamp(_require_str(raw, "createdAt")),
            customer_name=_require_str(raw, "customerName"),
            customer_email=_require_str(raw, "customerEmail"),
            payment_method=PaymentMethod(raw["paymentMethod"]),
            items=tuple(OrderItem.from_dict(item) for item in items),
            total=_require_int(raw, "total"),
            customer_phone=_optional_str(raw, "customerPhone"),
            customer_address=_optional_str(raw, "customerAddress"),
            customer_city=_optional_str(raw, "customerCity"),
            customer_postal_code=_optional_str(raw, "customerPostalCode"),
            note=_optional_str(raw, "note"),
            profile_id=_optional_str(raw, "userId"),
            extra=_extra(raw, _ORDER_KEYS),
        )


_ADMIN_KEYS = (
    "adminEmail", "brandTagline", "supportPhone", "upiId", "city",
    "minimumOrderNote",
)


@dataclass(frozen=True)
class AdminConfig:
    """Business settings edited from the admin panel."""

    admin_email: str = ""
    brand_tagline: str = ""
    support_phone: str = ""
    upi_id: str = ""
    city: str = ""
    minimum_order_note: str = ""
    extra: dict = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict:
        doc: dict[str, Any] = dict(self.extra)
        doc.update(
            adminEmail=self.admin_email,
            brandTagline=self.brand_tagline,
            supportPhone=self.support_phone,
            upiId=self.upi_id,
            city=self.city,
            minimumOrderNote=self.minimum_order_note,
        )
        return doc

    def merged_with(self, raw: dict) -> AdminConfig:
        """Overlay a stored document on these settings.

        Stored keys win; keys missing from the document keep their current
        value, so older documents pick up newly added defaults.
        """
        changes: dict[str, Any] = {}
        for doc_key, attr in (
            ("adminEmail", "admin_email"),
            ("brandTagline", "brand_tagline"),
            ("supportPhone", "support_phone"),
            ("upiId", "upi_id"),
            ("city", "city"),
            ("minimumOrderNote", "minimum_order_note"),
        ):
            if doc_key in raw and raw[doc_key] is not None:
                value = raw[doc_key]
                if not isinstance(value, str):
                    raise TypeError(f"{doc_key} must be a string")
                changes[attr] = value
        changes["extra"] = {**self.extra, **_extra(raw, _ADMIN_KEYS)}
        return replace(self, **changes)
