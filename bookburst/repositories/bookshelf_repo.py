from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bookburst.models.bookshelf import BookshelfItem


class BookshelfRepository:
    """Repository for shelf items (one user's relation to one book)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _with_book(self):
        return (
            select(BookshelfItem)
            .options(selectinload(BookshelfItem.book))
            .execution_options(populate_existing=True)
        )

    async def get_by_id(self, item_id: int) -> Optional[BookshelfItem]:
        """Get a shelf item with its book loaded.

        Args:
            item_id: Shelf item ID

        Returns:
            The shelf item or None
        """
        result = await self.db.execute(
            self._with_book().where(BookshelfItem.id == item_id)
        )
        return result.scalars().first()

    async def get_by_user_and_book(
        self, user_id: int, book_id: int
    ) -> Optional[BookshelfItem]:
        result = await self.db.execute(
            select(BookshelfItem).where(
                BookshelfItem.user_id == user_id, BookshelfItem.book_id == book_id
            )
        )
        return result.scalars().first()

    async def list_for_user(
        self,
        user_id: int,
        status: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[BookshelfItem], int]:
        """List a user's shelf, most recently updated first.

        Args:
            user_id: Owner of the shelf
            status: Only items with this status
            skip: Items to skip
            limit: Maximum items to return, None for all

        Returns:
            (items, total matching items)
        """
        filters = [BookshelfItem.user_id == user_id]
        if status:
            filters.append(BookshelfItem.status == status)

        query = (
            self._with_book()
            .where(*filters)
            .order_by(BookshelfItem.updated_at.desc(), BookshelfItem.id.desc())
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        items = list(result.scalars().all())

        count_result = await self.db.execute(
            select(func.count(BookshelfItem.id)).where(*filters)
        )
        return items, count_result.scalar_one()

    async def create(self, item_data: Dict[str, Any]) -> BookshelfItem:
        """Insert a shelf item.

        Raises:
            IntegrityError: The (user, book) pair is already on the shelf
        """
        allowed_fields = {
            "user_id",
            "book_id",
            "status",
            "rating",
            "notes",
            "start_date",
            "finish_date",
        }
        item = BookshelfItem(**{k: v for k, v in item_data.items() if k in allowed_fields})
        self.db.add(item)
        await self.db.commit()
        return await self.get_by_id(item.id)

    async def update(
        self, item: BookshelfItem, item_data: Dict[str, Any]
    ) -> BookshelfItem:
        allowed_fields = {"status", "rating", "notes", "start_date", "finish_date"}
        for key, value in item_data.items():
            if key in allowed_fields:
                setattr(item, key, value)

        await self.db.commit()
        return await self.get_by_id(item.id)

    async def delete(self, item: BookshelfItem) -> None:
        await self.db.delete(item)
        await self.db.commit()

    def _shelved_book_ids(self, status: Optional[str], book_ids: Optional[Sequence[int]]):
        query = select(BookshelfItem.book_id)
        if status:
            query = query.where(BookshelfItem.status == status)
        if book_ids is not None:
            query = query.where(BookshelfItem.book_id.in_(list(book_ids)))
        return query

    async def count_by_book(
        self,
        status: Optional[str] = None,
        book_ids: Optional[Sequence[int]] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> List[Tuple[int, int]]:
        """Group shelf items by book and rank by item count.

        Ties are broken by ascending book id.

        Args:
            status: Only count items with this status
            book_ids: Restrict to these books, None for every book

        Returns:
            (book_id, count) pairs for the requested page
        """
        item_count = func.count(BookshelfItem.id).label("item_count")
        query = (
            self._shelved_book_ids(status, book_ids)
            .add_columns(item_count)
            .group_by(BookshelfItem.book_id)
            .order_by(item_count.desc(), BookshelfItem.book_id.asc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return [(row.book_id, row.item_count) for row in result.all()]

    async def count_books(
        self, status: Optional[str] = None, book_ids: Optional[Sequence[int]] = None
    ) -> int:
        """Number of distinct books with at least one matching shelf item."""
        query = self._shelved_book_ids(status, book_ids).distinct().subquery()
        result = await self.db.execute(select(func.count()).select_from(query))
        return result.scalar_one()
