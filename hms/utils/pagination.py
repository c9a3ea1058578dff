# hms/utils/pagination.py
import math
from dataclasses import dataclass
from typing import Any

from fastapi import Query
from sqlalchemy.orm import Query as ORMQuery

MAX_LIMIT = 200


@dataclass
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=MAX_LIMIT),
) -> PageParams:
    return PageParams(page=page, limit=limit)


def paginate(query: ORMQuery, params: PageParams) -> tuple[list[Any], dict[str, int]]:
    """
    Run `query` for one page and count the full result.

    Returns (items, meta) where meta holds page, limit, total and total_pages.
    """
    total = query.order_by(None).count()
    items = query.offset(params.offset).limit(params.limit).all()
    meta = {
        "page": params.page,
        "limit": params.limit,
        "total": total,
        "total_pages": math.ceil(total / params.limit) if total else 0,
    }
    return items, meta
