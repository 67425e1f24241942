"""TOML configuration loader for the Homelike engine."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class StorageConfig:
    path: str = "~/.config/homelike/homelike.db"


@dataclass
class ShopConfig:
    name: str = "Homelike"
    currency_symbol: str = "₹"
    order_prefix: str = "HL"
    product_prefix: str = "spice"
    profile_prefix: str = "user"


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class HomelikeConfig:
    storage: StorageConfig = field(default_factory=StorageConfig)
    shop: ShopConfig = field(default_factory=ShopConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> HomelikeConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    The database path and log level can be overridden via environment
    variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    sto = raw.get("storage", {})
    shp = raw.get("shop", {})
    lg = raw.get("logging", {})

    # Environment wins over the file for values that differ per device
    db_path = os.environ.get("HOMELIKE_DB_PATH", "") or sto.get(
        "path", StorageConfig.path
    )
    level = os.environ.get("HOMELIKE_LOG_LEVEL", "") or lg.get(
        "level", LoggingConfig.level
    )

    return HomelikeConfig(
        storage=StorageConfig(path=db_path),
        shop=ShopConfig(
            name=shp.get("name", ShopConfig.name),
            currency_symbol=shp.get("currency_symbol", ShopConfig.currency_symbol),
            order_prefix=shp.get("order_prefix", ShopConfig.order_prefix),
            product_prefix=shp.get("product_prefix", ShopConfig.product_prefix),
            profile_prefix=shp.get("profile_prefix", ShopConfig.profile_prefix),
        ),
        logging=LoggingConfig(level=level.upper()),
    )
