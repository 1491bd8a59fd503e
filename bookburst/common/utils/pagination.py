"""
Utilities for pagination.
"""

import math
from typing import Any, Dict, List, Optional

from fastapi import Query

from bookburst.core.config import get_settings

settings = get_settings()


def page_count(total: int, limit: int) -> int:
    """Number of pages needed to show ``total`` items ``limit`` at a time."""
    return math.ceil(total / limit) if limit > 0 else 0


def build_page(items: List[Any], total: int, page: int, limit: int) -> Dict[str, Any]:
    """Assemble the ``{items, page, pages, total}`` envelope every list endpoint returns."""
    return {
        "items": items,
        "page": page,
        "pages": page_count(total, limit),
        "total": total,
    }


class PaginationParams:
    """
    Page/limit query parameters for list endpoints.
    """

    default_limit: int = settings.DEFAULT_PAGE_SIZE

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number, starting at 1"),
        limit: Optional[int] = Query(
            None,
            ge=1,
            le=settings.MAX_PAGE_SIZE,
            description="Items per page",
        ),
    ):
        self.page = page
        self.limit = limit or self.default_limit

    @property
    def skip(self) -> int:
        """
        Number of items to skip.

        Returns:
            Offset of the first item on this page
        """
        return (self.page - 1) * self.limit


class BookshelfPaginationParams(PaginationParams):
    """Bookshelf listing is the main view, so it loads more per page."""

    default_limit: int = settings.BOOKSHELF_PAGE_SIZE
