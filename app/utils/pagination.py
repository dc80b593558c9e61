import math
from typing import Mapping, Tuple
from sqlalchemy import asc, desc
from sqlalchemy.sql.elements import ColumnElement

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def page_window(page: int, limit: int) -> Tuple[int, int]:
    """page/limit -> (offset, limit)"""
    limit = max(1, min(limit, MAX_LIMIT))
    return max(page - 1, 0) * limit, limit


def pagination_meta(total: int, page: int, limit: int) -> dict:
    limit = max(1, min(limit, MAX_LIMIT))
    return {
        "total": total,
        "limit": limit,
        "page": page,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


def resolve_sort(
    sort_by: str,
    sort_order: str,
    allowed: Mapping[str, ColumnElement],
) -> ColumnElement:
    """Map a public sort key onto a column; unknown keys are rejected"""
    column = allowed.get(sort_by)
    if column is None:
        raise ValueError(
            f"Invalid sortBy '{sort_by}'. Allowed values: {', '.join(sorted(allowed))}"
        )
    if sort_order.lower() not in ("asc", "desc"):
        raise ValueError("sortOrder must be 'asc' or 'desc'")
    return asc(column) if sort_order.lower() == "asc" else desc(column)
