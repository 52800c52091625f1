from typing import Any, Dict


def to_product_dto(row: Any) -> Dict:
    original_price = getattr(row, "original_price", None)
    created_at = getattr(row, "created_at", None)
    return {
        "id": getattr(row, "id", None),
        "name": getattr(row, "name", None),
        "description": getattr(row, "description", None),
        "price": float(getattr(row, "price", 0) or 0),
        "originalPrice": float(original_price) if original_price is not None else None,
        "category": getattr(row, "category", None),
        "brand": getattr(row, "brand", None),
        "images": getattr(row, "images", None) or [],
        "stock": getattr(row, "stock", 0) or 0,
        "rating": float(getattr(row, "rating", 0) or 0),
        "numReviews": getattr(row, "num_reviews", 0) or 0,
        "featured": bool(getattr(row, "featured", False)),
        "createdAt": created_at.isoformat() if created_at is not None else None,
    }
