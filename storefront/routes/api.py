"""JSON API for the catalog and the session's order ledger."""

from __future__ import annotations

from typing import Any, Dict
from uuid import uuid4

from flask import Blueprint, current_app, jsonify, request, session

from ..services import OrderLedger, PersistenceError, ProductFilter, ValidationError


api_bp = Blueprint("storefront_api", __name__, url_prefix="/api")


def _components() -> Dict[str, Any]:
    return current_app.extensions["storefront_components"]


def _config():
    return current_app.config["STOREFRONT_CONFIG"]


def _client_id() -> str:
    cid = session.get("client_id")
    if not cid:
        cid = uuid4().hex
        session["client_id"] = cid
    return cid


def _ledger() -> OrderLedger:
    config = _config()
    return OrderLedger(
        _components()["order_store"],
        key=f"{config.order_key}:{_client_id()}",
        tax_rate=config.tax_rate,
        default_shipping=config.default_shipping,
    )


def _orders_payload(orders):
    return [o.to_dict() for o in orders]


def _persistence_failed(exc: PersistenceError):
    return jsonify({"success": False, "message": str(exc)}), 503


@api_bp.get("/products")
def list_products():
    args = request.args
    product_filter = ProductFilter.from_params(args)
    result = _components()["catalog_service"].list_products(
        product_filter,
        category=(args.get("category") or "").strip() or None,
        page=args.get("page", 1),
        page_size=args.get("limit", 20),
        sort=args.get("sort"),
    )
    return jsonify(
        {
            "success": True,
            "products": result["items"],
            "pagination": {
                "total": result["total"],
                "page": result["page"],
                "pages": result["pages"],
                "limit": result["page_size"],
            },
        }
    )


@api_bp.get("/products/<product_id>")
def get_product(product_id: str):
    product = _components()["catalog_service"].get_product(product_id)
    if not product:
        return jsonify({"success": False, "message": "Product not found"}), 404
    return jsonify({"success": True, "product": product})


@api_bp.get("/orders")
def list_orders():
    ledger = _ledger()
    status = (request.args.get("status") or "").strip()
    orders = ledger.get_by_status(status) if status else ledger.list()
    return jsonify({"success": True, "orders": _orders_payload(orders), "count": len(orders)})


@api_bp.post("/orders")
def create_order():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    try:
        result = _ledger().create(payload.get("items"), payload.get("details"))
    except ValidationError as exc:
        return jsonify({"success": False, "message": str(exc)}), 400
    if isinstance(result, PersistenceError):
        return _persistence_failed(result)
    return jsonify({"success": True, "order": result.to_dict()}), 201


@api_bp.get("/orders/<order_id>")
def get_order(order_id: str):
    order = _ledger().get_by_id(order_id)
    if order is None:
        return jsonify({"success": False, "message": "Order not found"}), 404
    return jsonify({"success": True, "order": order.to_dict()})


@api_bp.patch("/orders/<order_id>/status")
def update_order_status(order_id: str):
    payload = request.get_json(silent=True) or {}
    status = str(payload.get("status", "")).strip()
    if not status:
        return jsonify({"success": False, "message": "status required"}), 400
    result = _ledger().update_status(order_id, status)
    if isinstance(result, PersistenceError):
        return _persistence_failed(result)
    return jsonify({"success": True, "orders": _orders_payload(result)})


@api_bp.delete("/orders/<order_id>")
def delete_order(order_id: str):
    result = _ledger().delete(order_id)
    if isinstance(result, PersistenceError):
        return _persistence_failed(result)
    return jsonify({"success": True, "orders": _orders_payload(result)})


@api_bp.delete("/orders")
def clear_orders():
    if not _ledger().clear():
        return jsonify({"success": False, "message": "orders could not be cleared"}), 503
    return jsonify({"success": True, "orders": []})
