"""Storefront core services."""

from .catalog_query import CatalogQueryEngine, Product, ProductFilter, QueryResult
from .errors import PersistenceError, StorefrontError, ValidationError
from .order_ledger import CartItem, Order, OrderLedger, OrderStatus, status_color
from .order_store import JsonFileOrderStore, MemoryOrderStore, OrderStore, SqlOrderStore

__all__ = [
    "CatalogQueryEngine",
    "Product",
    "ProductFilter",
    "QueryResult",
    "PersistenceError",
    "StorefrontError",
    "ValidationError",
    "CartItem",
    "Order",
    "OrderLedger",
    "OrderStatus",
    "status_color",
    "JsonFileOrderStore",
    "MemoryOrderStore",
    "OrderStore",
    "SqlOrderStore",
]
