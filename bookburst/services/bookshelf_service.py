from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookburst.common.utils.date_utils import utcnow
from bookburst.common.utils.pagination import build_page
from bookburst.core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
)
from bookburst.logging.setup import get_logger
from bookburst.models.bookshelf import BookshelfItem, BookshelfStatus
from bookburst.repositories.book_repo import BookRepository
from bookburst.repositories.bookshelf_repo import BookshelfRepository
from bookburst.schemas.bookshelf import BookshelfItemCreate
from bookburst.services.book_service import BookService

logger = get_logger(__name__)

ALREADY_SHELVED = "This book is already in your bookshelf"


def _status_value(status) -> str:
    return status.value if isinstance(status, BookshelfStatus) else status


class BookshelfService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.bookshelf_repo = BookshelfRepository(db)
        self.book_repo = BookRepository(db)
        self.book_service = BookService(db)

    async def list_books(
        self,
        user_id: int,
        status: Optional[BookshelfStatus] = None,
        page: int = 1,
        limit: int = 50,
    ) -> Dict[str, Any]:
        """
        List the user's shelf, most recently updated first.

        Args:
            user_id: Owner of the shelf
            status: Only items with this reading status
            page: Page number, starting at 1
            limit: Items per page

        Returns:
            Page envelope of shelf items with their books
        """
        items, total = await self.bookshelf_repo.list_for_user(
            user_id,
            status=_status_value(status) if status else None,
            skip=(page - 1) * limit,
            limit=limit,
        )
        return build_page(items, total, page, limit)

    async def add_book(self, user_id: int, data: BookshelfItemCreate) -> BookshelfItem:
        """
        Put a book on the user's shelf.

        ``book_id`` takes precedence over inline book details. Inline books go
        through the same de-duplication as catalog creation.

        Raises:
            NotFoundException: book_id does not exist
            ConflictException: The book is already on this user's shelf
        """
        if data.book_id is not None:
            book = await self.book_repo.get_by_id(data.book_id)
            if not book:
                raise NotFoundException(detail="Book not found")
        else:
            book, _ = await self.book_service.create_book(data.book)

        book_id = book.id
        if await self.bookshelf_repo.get_by_user_and_book(user_id, book_id):
            raise ConflictException(detail=ALREADY_SHELVED)

        status = _status_value(data.status)
        item_data = {"user_id": user_id, "book_id": book_id, "status": status}
        now = utcnow()
        if status == BookshelfStatus.READING.value:
            item_data["start_date"] = now
        if status == BookshelfStatus.FINISHED.value:
            item_data["finish_date"] = now

        try:
            item = await self.bookshelf_repo.create(item_data)
        except IntegrityError:
            await self.db.rollback()
            logger.warning(
                f"Duplicate shelf item rejected by the database: user {user_id}, book {book_id}"
            )
            raise ConflictException(detail=ALREADY_SHELVED)

        logger.info(f"User {user_id} shelved book {book_id} as {status}")
        return item

    async def _get_owned_item(self, item_id: int, user_id: int) -> BookshelfItem:
        item = await self.bookshelf_repo.get_by_id(item_id)
        if not item:
            raise NotFoundException(detail="Bookshelf item not found")
        if item.user_id != user_id:
            raise ForbiddenException(
                detail="Not authorized to update this bookshelf item"
            )
        return item

    async def update_status(
        self, item_id: int, user_id: int, status: BookshelfStatus
    ) -> BookshelfItem:
        """
        Change the reading status.

        The start date is set on the first move to ``reading`` and the finish
        date on the first move to ``finished``; neither is ever overwritten.
        """
        item = await self._get_owned_item(item_id, user_id)
        status = _status_value(status)
        update_data: Dict[str, Any] = {"status": status}
        now = utcnow()
        if status == BookshelfStatus.READING.value and item.start_date is None:
            update_data["start_date"] = now
        if status == BookshelfStatus.FINISHED.value and item.finish_date is None:
            update_data["finish_date"] = now

        return await self.bookshelf_repo.update(item, update_data)

    async def update_rating(
        self, item_id: int, user_id: int, rating: float
    ) -> BookshelfItem:
        item = await self._get_owned_item(item_id, user_id)
        return await self.bookshelf_repo.update(item, {"rating": rating})

    async def update_notes(self, item_id: int, user_id: int, notes: str) -> BookshelfItem:
        item = await self._get_owned_item(item_id, user_id)
        return await self.bookshelf_repo.update(item, {"notes": notes})

    async def remove_book(self, item_id: int, user_id: int) -> None:
        item = await self.bookshelf_repo.get_by_id(item_id)
        if not item:
            raise NotFoundException(detail="Bookshelf item not found")
        if item.user_id != user_id:
            raise ForbiddenException(
                detail="Not authorized to delete this bookshelf item"
            )

        await self.bookshelf_repo.delete(item)
        logger.info(f"User {user_id} removed shelf item {item_id}")
