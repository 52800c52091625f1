"""Client-scoped order ledger persisted as one JSON blob."""

from __future__ import annotations

import json
import random
import time
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from ..common.services.logging import log_event
from ..common.utils.validators import ensure_non_negative, ensure_positive_int
from .errors import PersistenceError, ValidationError
from .order_store import OrderStore


DEFAULT_ORDER_KEY = "customer_orders"
DEFAULT_SHIPPING = Decimal("15.00")
DEFAULT_TAX_RATE = Decimal("0.08")
NO_ADDRESS = "No address provided"
NEUTRAL_COLOR = "#6b7280"

_CENT = Decimal("0.01")
_MONEY_PRECISION = 60


class OrderStatus(str, Enum):
    PROCESSING = "Processing"
    CONFIRMED = "Confirmed"
    SHIPPED = "Shipped"
    IN_TRANSIT = "In Transit"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    REFUNDED = "Refunded"


_STATUS_COLORS = {
    OrderStatus.PROCESSING: "#f59e0b",
    OrderStatus.CONFIRMED: "#3b82f6",
    OrderStatus.SHIPPED: "#8b5cf6",
    OrderStatus.IN_TRANSIT: "#3b82f6",
    OrderStatus.OUT_FOR_DELIVERY: "#06b6d4",
    OrderStatus.DELIVERED: "#10b981",
    OrderStatus.CANCELLED: "#ef4444",
    OrderStatus.REFUNDED: "#6b7280",
}


def status_color(status: Union[OrderStatus, str]) -> str:
    """Badge colour for a status; unknown statuses get the neutral grey."""
    try:
        return _STATUS_COLORS[OrderStatus(status)]
    except ValueError:
        return NEUTRAL_COLOR


def _status_value(status: Union[OrderStatus, str]) -> str:
    return status.value if isinstance(status, OrderStatus) else str(status)


def round2(value: Union[Decimal, float, int, str]) -> Decimal:
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def generate_order_id() -> str:
    """``#`` + epoch millis + a random 0-999 suffix, cut to 10 characters."""
    timestamp = int(time.time() * 1000)
    return f"#{timestamp}{random.randint(0, 999)}"[:10]


def current_date() -> str:
    return datetime.now().strftime("%m/%d/%Y")


@dataclass
class CartItem:
    id: Any
    name: str
    price: float
    quantity: int
    image: Optional[str] = None
    description: str = ""

    @classmethod
    def from_value(cls, value: Union["CartItem", Mapping[str, Any]], position: int = 0) -> "CartItem":
        """Validate one cart entry; raises ``ValidationError``."""
        if isinstance(value, CartItem):
            value = value.to_dict()
        if not isinstance(value, Mapping):
            raise ValidationError(f"cart item {position} must be an object")
        try:
            price = ensure_non_negative(value.get("price"), f"items[{position}].price")
            quantity = ensure_positive_int(value.get("quantity"), f"items[{position}].quantity")
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        return cls(
            id=value.get("id"),
            name=str(value.get("name") or ""),
            price=price,
            quantity=quantity,
            image=value.get("image") or None,
            description=value.get("description") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "image": self.image,
            "description": self.description,
        }


@dataclass
class Order:
    id: str
    date: str
    items: List[CartItem]
    subtotal: float
    shipping: float
    tax: float
    total: float
    status: str = OrderStatus.PROCESSING.value
    shipping_address: str = NO_ADDRESS
    status_color: str = field(init=False)

    def __post_init__(self) -> None:
        self.status = _status_value(self.status)
        self.status_color = status_color(self.status)

    def relabel(self, status: Union[OrderStatus, str]) -> None:
        self.status = _status_value(status)
        self.status_color = status_color(self.status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "items": [item.to_dict() for item in self.items],
            "subtotal": self.subtotal,
            "shipping": self.shipping,
            "tax": self.tax,
            "total": self.total,
            "status": self.status,
            "statusColor": self.status_color,
            "shippingAddress": self.shipping_address,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Order":
        # statusColor is derived; a stored value is ignored
        return cls(
            id=data["id"],
            date=data.get("date", ""),
            items=[CartItem(**item) for item in data.get("items", [])],
            subtotal=data.get("subtotal", 0.0),
            shipping=data.get("shipping", 0.0),
            tax=data.get("tax", 0.0),
            total=data.get("total", 0.0),
            status=data.get("status", OrderStatus.PROCESSING.value),
            shipping_address=data.get("shippingAddress", NO_ADDRESS),
        )


class OrderLedger:
    """Orders for one client context, most recent first.

    Every mutation is a read-modify-write of the whole collection under a
    single key. There is no locking: one writer per key is assumed.
    """

    def __init__(
        self,
        store: OrderStore,
        *,
        key: str = DEFAULT_ORDER_KEY,
        tax_rate: Union[Decimal, float, str] = DEFAULT_TAX_RATE,
        default_shipping: Union[Decimal, float, str] = DEFAULT_SHIPPING,
        id_factory: Callable[[], str] = generate_order_id,
        date_factory: Callable[[], str] = current_date,
    ) -> None:
        self._store = store
        self._key = key
        self._tax_rate = Decimal(str(tax_rate))
        self._default_shipping = Decimal(str(default_shipping))
        self._id_factory = id_factory
        self._date_factory = date_factory

    @property
    def key(self) -> str:
        return self._key

    def create(
        self,
        cart_items: Sequence[Union[CartItem, Mapping[str, Any]]],
        order_details: Optional[Mapping[str, Any]] = None,
    ) -> Union[Order, PersistenceError]:
        """Create and persist an order from a cart snapshot.

        Raises ``ValidationError`` for an empty or malformed cart. A failed
        write is returned as ``PersistenceError`` with the computed order
        attached; the stored collection is left as it was.
        """
        if isinstance(cart_items, (str, bytes)) or not isinstance(cart_items, Sequence):
            raise ValidationError("cart items must be a list")
        if not cart_items:
            raise ValidationError("cart is empty")
        items = [CartItem.from_value(item, i) for i, item in enumerate(cart_items)]
        if order_details is not None and not isinstance(order_details, Mapping):
            raise ValidationError("order details must be an object")
        details = dict(order_details or {})

        try:
            with localcontext() as ctx:
                ctx.prec = _MONEY_PRECISION
                subtotal = round2(sum((Decimal(str(it.price)) * it.quantity for it in items), Decimal("0")))
                shipping = self._money_override(details.get("shipping"), "shipping", self._default_shipping)
                tax = self._money_override(details.get("tax"), "tax", subtotal * self._tax_rate)
                total = round2(subtotal + shipping + tax)
        except InvalidOperation as exc:
            raise ValidationError("order amounts are out of range") from exc
        address = details.get("shippingAddress", details.get("shipping_address")) or NO_ADDRESS

        order = Order(
            id=self._id_factory(),
            date=self._date_factory(),
            items=items,
            subtotal=float(subtotal),
            shipping=float(shipping),
            tax=float(tax),
            total=float(total),
            status=details.get("status") or OrderStatus.PROCESSING,
            shipping_address=str(address),
        )

        orders = self.list()
        orders.insert(0, order)
        if not self._write(orders):
            log_event("error", "order.persist_failed", key=self._key, order_id=order.id)
            return PersistenceError("order was not saved", key=self._key, order=order)
        log_event(
            "info",
            "order.created",
            key=self._key,
            order_id=order.id,
            items=len(items),
            total=order.total,
        )
        return order

    def list(self) -> List[Order]:
        blob = self._store.get(self._key)
        if not blob:
            return []
        try:
            payload = json.loads(blob)
            if not isinstance(payload, list):
                raise ValueError("order collection is not a list")
            return [Order.from_dict(entry) for entry in payload]
        except (ValueError, TypeError, KeyError) as exc:
            log_event("warning", "orders.load_failed", key=self._key, error=str(exc))
            return []

    def count(self) -> int:
        return len(self.list())

    def update_status(
        self, order_id: str, new_status: Union[OrderStatus, str]
    ) -> Union[List[Order], PersistenceError]:
        orders = self.list()
        hits = [o for o in orders if o.id == order_id]
        if not hits:
            return orders
        for order in hits:
            order.relabel(new_status)
        if not self._write(orders):
            return PersistenceError("status update was not saved", key=self._key)
        log_event("info", "order.status_updated", key=self._key, order_id=order_id, status=_status_value(new_status))
        return orders

    def delete(self, order_id: str) -> Union[List[Order], PersistenceError]:
        orders = self.list()
        remaining = [o for o in orders if o.id != order_id]
        if len(remaining) == len(orders):
            return orders
        if not self._write(remaining):
            return PersistenceError("delete was not saved", key=self._key)
        log_event("info", "order.deleted", key=self._key, order_id=order_id)
        return remaining

    def clear(self) -> bool:
        ok = self._store.remove(self._key)
        log_event("info" if ok else "error", "orders.cleared", key=self._key, ok=ok)
        return ok

    def get_by_id(self, order_id: str) -> Optional[Order]:
        for order in self.list():
            if order.id == order_id:
                return order
        return None

    def get_by_status(self, status: Union[OrderStatus, str]) -> List[Order]:
        wanted = _status_value(status)
        return [o for o in self.list() if o.status == wanted]

    @staticmethod
    def _money_override(value: Any, field_name: str, default: Decimal) -> Decimal:
        if value is None:
            return round2(default)
        try:
            return round2(ensure_non_negative(value, field_name))
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

    def _write(self, orders: List[Order]) -> bool:
        try:
            blob = json.dumps([o.to_dict() for o in orders], ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            log_event("error", "store.write_failed", key=self._key, error=str(exc))
            return False
        return self._store.set(self._key, blob)
