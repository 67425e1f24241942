"""Best-effort hydration and write-through of the four store documents."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, TypeVar

from ..defaults import DEFAULT_ADMIN_CONFIG, DEFAULT_CATALOG
from ..errors import PersistenceError
from ..models import AdminConfig, Order, Product, Profile

logger = logging.getLogger(__name__)

ADMIN_CONFIG_KEY = "admin-config"
CATALOG_KEY = "catalog"
PROFILES_KEY = "profiles"
ORDERS_KEY = "orders"

STORE_KEYS = (ADMIN_CONFIG_KEY, CATALOG_KEY, PROFILES_KEY, ORDERS_KEY)

T = TypeVar("T")


class DocumentBackend(Protocol):
    def get(self, key: str) -> str | None: ...

    def put(self, key: str, body: str) -> None: ...


@dataclass
class Snapshot:
    """Hydrated state for every persisted store."""

    admin_config: AdminConfig = DEFAULT_ADMIN_CONFIG
    products: list[Product] = field(default_factory=lambda: list(DEFAULT_CATALOG))
    profiles: list[Profile] = field(default_factory=list)
    orders: list[Order] = field(default_factory=list)


def _to_document(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_to_document(v) for v in value]
    return value


# Errors a single stored entry can raise while being turned into a record
_ENTRY_ERRORS = (KeyError, TypeError, ValueError, AttributeError, OverflowError)


def backup_key(key: str) -> str:
    """Key under which an undecodable copy of ``key`` is kept."""
    return f"{key}.corrupt"


class PersistenceGateway:
    """Reads and writes the admin-config, catalog, profiles and orders documents.

    Failures never reach the caller: they are logged and the in-memory state
    stays authoritative.  Writes are refused until loading has completed so
    an empty session can never overwrite data saved by an earlier one.

    Stored data the session cannot use is never lost by a later save:

    * list entries that fail to parse are carried along and written back
      ahead of the live entries;
    * a document that cannot be decoded at all is copied under
      :func:`backup_key` before the defaults take its place;
    * a store whose document could not be read, or whose backup could not
      be written, is never saved by this gateway.
    """

    def __init__(self, documents: DocumentBackend) -> None:
        self._documents = documents
        self._loaded = False
        self._unparsed: dict[str, list[Any]] = {}
        self._read_only: set[str] = set()

    @property
    def loaded(self) -> bool:
        return self._loaded

    def unparsed(self, store_name: str) -> list[Any]:
        """Raw entries of ``store_name`` that were kept but not loaded."""
        return list(self._unparsed.get(store_name, []))

    def _quarantine(self, key: str, body: str, reason: object) -> None:
        logger.error("Discarding %s document: %s", key, reason)
        try:
            self._documents.put(backup_key(key), body)
        except PersistenceError as e:
            logger.error("Could not back up %s, saves disabled: %s", key, e)
            self._read_only.add(key)
            return
        logger.warning("Kept the discarded %s document under %s", key, backup_key(key))

    def _read(self, key: str) -> tuple[str | None, Any]:
        """Return the raw body and decoded document.

        Both are None if the document is absent or unreadable.
        """
        try:
            body = self._documents.get(key)
        except PersistenceError as e:
            logger.error("Failed to read %s, saves disabled: %s", key, e)
            self._read_only.add(key)
            return None, None
        if body is None:
            return None, None
        try:
            return body, json.loads(body)
        except (ValueError, RecursionError) as e:
            self._quarantine(key, body, e)
            return None, None

    def _load_admin_config(self) -> AdminConfig:
        body, raw = self._read(ADMIN_CONFIG_KEY)
        if body is None:
            return DEFAULT_ADMIN_CONFIG
        if not isinstance(raw, dict):
            self._quarantine(ADMIN_CONFIG_KEY, body, "not an object")
            return DEFAULT_ADMIN_CONFIG
        try:
            return DEFAULT_ADMIN_CONFIG.merged_with(raw)
        except _ENTRY_ERRORS as e:
            self._quarantine(ADMIN_CONFIG_KEY, body, e)
            return DEFAULT_ADMIN_CONFIG

    def _load_list(self, key: str, parse: Callable[[dict], T], default: list[T]) -> list[T]:
        body, raw = self._read(key)
        if body is None:
            return default
        if not isinstance(raw, list):
            self._quarantine(key, body, f"expected a JSON array, got {type(raw).__name__}")
            return default

        records: list[T] = []
        skipped: list[Any] = []
        for index, entry in enumerate(raw):
            try:
                records.append(parse(entry))
            except _ENTRY_ERRORS as e:
                logger.error("Skipping %s entry %d: %s", key, index, e)
                skipped.append(entry)
        if skipped:
            self._unparsed[key] = skipped
        return records

    def load(self) -> Snapshot:
        """Hydrate every store from the last durable snapshot."""
        self._unparsed = {}
        self._read_only = set()
        products = self._load_list(CATALOG_KEY, Product.from_dict, list(DEFAULT_CATALOG))
        if not products:
            products = list(DEFAULT_CATALOG)
        snapshot = Snapshot(
            admin_config=self._load_admin_config(),
            products=products,
            profiles=self._load_list(PROFILES_KEY, Profile.from_dict, []),
            orders=self._load_list(ORDERS_KEY, Order.from_dict, []),
        )
        self._loaded = True
        logger.debug(
            "Loaded %d products, %d profiles, %d orders",
            len(snapshot.products), len(snapshot.profiles), len(snapshot.orders),
        )
        return snapshot

    async def load_async(self) -> Snapshot:
        return await asyncio.to_thread(self.load)

    def save(self, store_name: str, value: Any) -> bool:
        """Write one store's document.

        Returns:
            True if the document was written.
        """
        if store_name not in STORE_KEYS:
            raise ValueError(f"unknown store: {store_name!r}")
        if not self._loaded:
            logger.warning("Refusing to save %s before loading has completed", store_name)
            return False
        if store_name in self._read_only:
            logger.warning("Refusing to save %s: stored copy could not be preserved", store_name)
            return False
        document = _to_document(value)
        if isinstance(document, list):
            document = self._unparsed.get(store_name, []) + document
        try:
            body = json.dumps(document, ensure_ascii=False)
            self._documents.put(store_name, body)
        except (PersistenceError, TypeError, ValueError) as e:
            logger.error("Failed to save %s: %s", store_name, e)
            return False
        return True
