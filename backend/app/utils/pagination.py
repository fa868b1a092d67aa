import math
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from app.core.errors import ValidationError

SORT_ORDERS = ("asc", "desc")


@dataclass
class PaginationOptions:
    page: int = 1
    limit: int = 10
    sort_by: str = "createdAt"
    sort_order: str = "desc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page:
    """One page of results plus the numbers needed to navigate the rest."""
    items: List[Any]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def with_items(self, items: List[Any]) -> "Page":
        """Same pagination metadata, different items (used by post-filters)."""
        return replace(self, items=items)

    def pagination(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


def paginate(query: Query, options: PaginationOptions, sort_columns: Dict[str, Any], tiebreaker: Optional[Any] = None) -> Page:
    """
    Apply sorting, offset and limit to a query and count the full result set.

    sort_columns maps the public sortBy names to columns; an unknown name is
    a validation error rather than a silent fallback.
    """
    column = sort_columns.get(options.sort_by)
    if column is None:
        raise ValidationError(errors={
            "sortBy": [f"sortBy must be one of: {', '.join(sorted(sort_columns))}"]
        })
    if options.sort_order not in SORT_ORDERS:
        raise ValidationError(errors={"sortOrder": ["sortOrder must be 'asc' or 'desc'"]})

    direction = asc if options.sort_order == "asc" else desc
    ordering = [direction(column)]
    # Stable ordering across pages when the sort column has duplicates
    if tiebreaker is not None:
        ordering.append(direction(tiebreaker))

    total = query.order_by(None).count()
    items = query.order_by(*ordering).offset(options.offset).limit(options.limit).all()
    return Page(items=items, page=options.page, limit=options.limit, total=total)


def contains_ci(column, term: str):
    """Case-insensitive substring match with LIKE wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")

