from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from bookburst.common.utils.pagination import build_page
from bookburst.core.config import get_settings
from bookburst.models.book import Book
from bookburst.models.bookshelf import BookshelfStatus
from bookburst.repositories.book_repo import BookRepository
from bookburst.repositories.bookshelf_repo import BookshelfRepository
from bookburst.repositories.review_repo import ReviewRepository
from bookburst.services.book_service import BookService
from bookburst.services.review_service import ReviewService

settings = get_settings()


class ExploreService:
    """
    Community discovery views.

    Every ranking groups shelf items or reviews by book, pages over the
    ranked book IDs, then loads the books in one query and puts them back
    in ranking order.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.book_repo = BookRepository(db)
        self.bookshelf_repo = BookshelfRepository(db)
        self.review_repo = ReviewRepository(db)
        self.review_service = ReviewService(db)
        self.book_service = BookService(db)

    async def _books_in_order(self, book_ids: Sequence[int]) -> List[Book]:
        books = {book.id: book for book in await self.book_repo.get_by_ids(book_ids)}
        # IDs whose book has since been deleted are dropped
        return [books[book_id] for book_id in book_ids if book_id in books]

    async def _shelf_ranking(
        self, status: Optional[str], genre: Optional[str], page: int, limit: int
    ) -> Dict[str, Any]:
        book_ids = await self.book_service.genre_book_ids(genre)
        if book_ids is not None and not book_ids:
            return build_page([], 0, page, limit)

        ranked = await self.bookshelf_repo.count_by_book(
            status=status, book_ids=book_ids, skip=(page - 1) * limit, limit=limit
        )
        total = await self.bookshelf_repo.count_books(status=status, book_ids=book_ids)
        books = await self._books_in_order([book_id for book_id, _ in ranked])
        return build_page(books, total, page, limit)

    async def trending(
        self, genre: Optional[str] = None, page: int = 1, limit: int = 10
    ) -> Dict[str, Any]:
        """Books on the most shelves, any status."""
        return await self._shelf_ranking(None, genre, page, limit)

    async def most_wishlisted(
        self, genre: Optional[str] = None, page: int = 1, limit: int = 10
    ) -> Dict[str, Any]:
        """Books most often marked want-to-read."""
        return await self._shelf_ranking(
            BookshelfStatus.WANT_TO_READ.value, genre, page, limit
        )

    async def top_rated(
        self, genre: Optional[str] = None, page: int = 1, limit: int = 10
    ) -> Dict[str, Any]:
        """
        Books with the highest average review rating.

        Only books with at least TOP_RATED_MIN_REVIEWS reviews qualify.
        """
        book_ids = await self.book_service.genre_book_ids(genre)
        if book_ids is not None and not book_ids:
            return build_page([], 0, page, limit)

        min_reviews = settings.TOP_RATED_MIN_REVIEWS
        ranked = await self.review_repo.top_rated(
            min_reviews, book_ids=book_ids, skip=(page - 1) * limit, limit=limit
        )
        total = await self.review_repo.count_top_rated(min_reviews, book_ids=book_ids)
        books = await self._books_in_order([row[0] for row in ranked])
        return build_page(books, total, page, limit)

    async def recent_reviews(
        self, genre: Optional[str] = None, page: int = 1, limit: int = 10
    ) -> Dict[str, Any]:
        return await self.review_service.list_reviews(genre=genre, page=page, limit=limit)

    async def genres(self) -> List[str]:
        return await self.book_repo.list_genres()
