import math
from typing import Dict, Optional

from sqlalchemy import func

from ...services.catalog_query import ProductFilter
from ..db.session import get_session
from ..models.product import Product
from ..utils.dto import to_product_dto
from ..utils.pagination import normalize_paging, page_count
from .logging import log_event


DEFAULT_SORT = "-createdAt"
SORT_COLUMNS = {
    "createdAt": Product.created_at,
    "price": Product.price,
    "rating": Product.rating,
    "name": Product.name,
}


def sort_clause(sort: Optional[str]):
    """Translate ``field`` / ``-field`` into an ORDER BY clause; unknown keys use the default."""
    key = (sort or "").strip()
    descending = key.startswith("-")
    column = SORT_COLUMNS.get(key.lstrip("-"))
    if column is None:
        return sort_clause(DEFAULT_SORT)
    return column.desc() if descending else column.asc()


class CatalogService:
    """Catalog querying backed by the product table.

    Applies the same predicate as ``CatalogQueryEngine`` inside the database,
    plus the optional category filter and pagination used by the HTTP layer.
    """

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def list_products(
        self,
        product_filter: Optional[ProductFilter] = None,
        *,
        category: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
        sort: Optional[str] = DEFAULT_SORT,
    ) -> Dict:
        """Return dict: { items: [ProductDTO], page, page_size, pages, total }"""
        pf = product_filter or ProductFilter()
        p, ps = normalize_paging(page, page_size)
        with self._session_factory() as session:
            q = session.query(Product).filter(
                Product.is_active.is_(True),
                Product.price >= pf.min_price,
                Product.rating >= pf.min_rating,
            )
            if pf.max_price != math.inf:
                q = q.filter(Product.price <= pf.max_price)
            if pf.search:
                q = q.filter(func.lower(Product.name).contains(pf.search.lower(), autoescape=True))
            if category:
                q = q.filter(Product.category == category)
            total = q.count()
            rows = (
                q.order_by(sort_clause(sort), Product.id)
                .offset((p - 1) * ps)
                .limit(ps)
                .all()
            )
            items = [to_product_dto(r) for r in rows]
        log_event("debug", "catalog.query", search=pf.search, category=category, sort=sort, total=total, page=p)
        return {"items": items, "page": p, "page_size": ps, "pages": page_count(total, ps), "total": total}

    def get_product(self, product_id: str) -> dict:
        """Return ProductDTO for given product id."""
        with self._session_factory() as session:
            r = (
                session.query(Product)
                .filter(Product.id == product_id, Product.is_active.is_(True))
                .first()
            )
            return to_product_dto(r) if r else {}
