"""SQLite-backed persistence for the catalog, profiles, orders and settings."""

from .documents import DocumentDB
from .gateway import (
    ADMIN_CONFIG_KEY,
    CATALOG_KEY,
    ORDERS_KEY,
    PROFILES_KEY,
    STORE_KEYS,
    PersistenceGateway,
    backup_key,
    Snapshot,
)
from .schema import ensure_schema

__all__ = [
    "DocumentDB",
    "PersistenceGateway",
    "Snapshot",
    "ensure_schema",
    "ADMIN_CONFIG_KEY",
    "CATALOG_KEY",
    "PROFILES_KEY",
    "ORDERS_KEY",
    "STORE_KEYS",
    "backup_key",
]
