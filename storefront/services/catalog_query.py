"""Product filtering over an externally supplied catalog collection."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..common.utils.validators import coerce_number


UNBOUNDED_PRICE = math.inf

_CORE_FIELDS = ("id", "_id", "name", "price", "rating")


@dataclass
class Product:
    """Typed view of a catalog document; unknown attributes ride in ``extra``."""

    id: Any
    name: str
    price: float
    rating: float = 0.0
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, doc: Mapping[str, Any]) -> "Product":
        product_id = doc.get("id")
        if product_id is None and "_id" in doc:
            product_id = str(doc["_id"])
        return cls(
            id=product_id,
            name=str(doc.get("name") or ""),
            price=coerce_number(doc.get("price"), math.nan),
            rating=coerce_number(doc.get("rating"), 0.0),
            extra={k: v for k, v in doc.items() if k not in _CORE_FIELDS},
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({"id": self.id, "name": self.name, "price": self.price, "rating": self.rating})
        return data


@dataclass(frozen=True)
class ProductFilter:
    """Price range, rating floor and optional name substring."""

    min_price: float = 0.0
    max_price: float = UNBOUNDED_PRICE
    min_rating: float = 0.0
    search: Optional[str] = None

    @classmethod
    def from_params(cls, params: Optional[Mapping[str, Any]] = None) -> "ProductFilter":
        """Build a filter from raw query parameters; bad values fall back to defaults."""
        params = params or {}
        search = params.get("search")
        search = str(search).strip() if search is not None else ""
        return cls(
            min_price=coerce_number(params.get("minPrice"), 0.0),
            max_price=coerce_number(params.get("maxPrice"), UNBOUNDED_PRICE),
            min_rating=coerce_number(params.get("minRating"), 0.0),
            search=search or None,
        )

    def matches(self, product: Product) -> bool:
        # NaN price (non-numeric document) fails both comparisons
        if not (self.min_price <= product.price <= self.max_price):
            return False
        if not product.rating >= self.min_rating:
            return False
        if self.search and self.search.lower() not in product.name.lower():
            return False
        return True


@dataclass
class QueryResult:
    matches: List[Product]
    total: int

    def to_dict(self) -> Dict[str, Any]:
        return {"matches": [p.to_dict() for p in self.matches], "total": self.total}


class CatalogQueryEngine:
    """Evaluates a ``ProductFilter`` over an in-memory product collection."""

    def query(
        self,
        params: Union[ProductFilter, Mapping[str, Any], None],
        collection: Iterable[Union[Product, Mapping[str, Any]]],
    ) -> QueryResult:
        product_filter = params if isinstance(params, ProductFilter) else ProductFilter.from_params(params)
        matches = []
        for entry in collection:
            product = entry if isinstance(entry, Product) else Product.from_mapping(entry)
            if product_filter.matches(product):
                matches.append(product)
        return QueryResult(matches=matches, total=len(matches))
