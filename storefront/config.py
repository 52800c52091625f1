"""Storefront application settings."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


ORDER_STORE_BACKENDS = {"json", "sql", "memory"}


def _decimal(value: str, name: str) -> Decimal:
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid {name}: expected a number, got {value!r}") from exc
    if not number.is_finite() or number < 0:
        raise ValueError(f"Invalid {name}: must be >= 0")
    return number


def validate_store_backend(value: Optional[str]) -> str:
    v = (value or "json").strip().lower()
    if v not in ORDER_STORE_BACKENDS:
        raise ValueError(f"Invalid ORDER_STORE: expected one of {sorted(ORDER_STORE_BACKENDS)}")
    return v


@dataclass
class StorefrontConfig:
    """Settings for the storefront app."""

    secret_key: str
    data_dir: Path
    database_url: str
    order_store: str
    order_key: str
    tax_rate: Decimal
    default_shipping: Decimal
    log_level: str

    @property
    def orders_dir(self) -> Path:
        return self.data_dir / "orders"

    @property
    def settings_file(self) -> Path:
        return self.data_dir / "settings.json"

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> "StorefrontConfig":
        """Build settings from .env, data/settings.json and the environment.

        Values in settings.json win over environment variables.
        """
        load_dotenv()
        root = Path(data_dir or os.environ.get("STOREFRONT_DATA_DIR") or Path.cwd() / "data")
        root.mkdir(parents=True, exist_ok=True)

        settings = {}
        settings_file = root / "settings.json"
        if settings_file.exists():
            try:
                loaded = json.loads(settings_file.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                raise ValueError(f"settings.json is not valid JSON: {exc}") from exc
            if isinstance(loaded, dict):
                settings = loaded

        def pick(name: str, default: str) -> str:
            value = settings.get(name)
            if value is None or value == "":
                value = os.environ.get(name, default)
            return str(value)

        config = cls(
            secret_key=pick("STOREFRONT_SECRET_KEY", "dev_secret"),
            data_dir=root,
            database_url=pick("DATABASE_URL", f"sqlite:///{root / 'app.db'}"),
            order_store=validate_store_backend(pick("ORDER_STORE", "json")),
            order_key=pick("ORDER_KEY", "customer_orders").strip() or "customer_orders",
            tax_rate=_decimal(pick("TAX_RATE", "0.08"), "TAX_RATE"),
            default_shipping=_decimal(pick("DEFAULT_SHIPPING", "15.00"), "DEFAULT_SHIPPING"),
            log_level=pick("LOG_LEVEL", "INFO").upper(),
        )
        config.orders_dir.mkdir(parents=True, exist_ok=True)
        return config
