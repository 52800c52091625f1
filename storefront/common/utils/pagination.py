import math
from typing import Any, Tuple


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def normalize_paging(page: Any, page_size: Any, max_page_size: int = 100) -> Tuple[int, int]:
    p = _as_int(page, 1)
    ps = _as_int(page_size, 20)
    p = p if p > 0 else 1
    ps = ps if ps > 0 else 20
    ps = min(ps, max_page_size)
    return p, ps


def page_count(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size else 0
