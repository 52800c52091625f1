"""Storefront Flask application."""

from __future__ import annotations

from typing import Optional

from flask import Flask

from .common.db import session as db_session
from .common.services import logging as event_log
from .common.services.catalog_service import CatalogService
from .config import StorefrontConfig
from .routes import api
from .services import JsonFileOrderStore, MemoryOrderStore, SqlOrderStore


def _build_order_store(config: StorefrontConfig):
    if config.order_store == "sql":
        return SqlOrderStore()
    if config.order_store == "memory":
        return MemoryOrderStore()
    return JsonFileOrderStore(config.orders_dir)


def create_app(config: Optional[StorefrontConfig] = None) -> Flask:
    config = config or StorefrontConfig.load()
    event_log.configure(config.log_level)
    db_session.init_engine(config.database_url)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["STOREFRONT_CONFIG"] = config

    components = {
        "catalog_service": CatalogService(),
        "order_store": _build_order_store(config),
    }
    app.extensions["storefront_components"] = components

    app.register_blueprint(api.api_bp)

    return app


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=5000, debug=False)


if __name__ == "__main__":
    main()
