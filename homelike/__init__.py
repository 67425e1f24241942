"""Homelike: on-device catalog, cart, profile and order engine."""

from .cart import Cart
from .catalog import CatalogStore, ProductDraft, ProductDraftForm
from .config import HomelikeConfig, load_config
from .db import DocumentDB, PersistenceGateway
from .errors import PersistenceError, ValidationError
from .ids import IdGenerator
from .mail import MailComposer, MailtoComposer
from .media import DataUrlImageReader, ImageReader
from .models import (
    AdminConfig,
    HeatLevel,
    Order,
    OrderItem,
    PaymentMethod,
    Product,
    Profile,
)
from .orders import Accepted, CheckoutForm, OrderComposer, OrderHistory, Rejected
from .profiles import ContactFields, ProfileStore, UpsertResult
from .receipt import ReceiptFormatter, format_amount, render_receipt
from .session import OrderResult, ShopSession

__all__ = [
    "ShopSession",
    "OrderResult",
    "CatalogStore",
    "ProductDraft",
    "ProductDraftForm",
    "ProfileStore",
    "ContactFields",
    "UpsertResult",
    "Cart",
    "OrderComposer",
    "OrderHistory",
    "CheckoutForm",
    "Accepted",
    "Rejected",
    "ReceiptFormatter",
    "render_receipt",
    "format_amount",
    "MailComposer",
    "MailtoComposer",
    "ImageReader",
    "DataUrlImageReader",
    "DocumentDB",
    "PersistenceGateway",
    "IdGenerator",
    "Product",
    "Profile",
    "Order",
    "OrderItem",
    "AdminConfig",
    "HeatLevel",
    "PaymentMethod",
    "ValidationError",
    "PersistenceError",
    "HomelikeConfig",
    "load_config",
]
