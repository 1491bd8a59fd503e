from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from bookburst.core.config import get_settings
from bookburst.core.exceptions import NotFoundException, ValidationException
from bookburst.logging.setup import get_logger
from bookburst.models.book import Book
from bookburst.repositories.book_repo import BookRepository
from bookburst.schemas.book import BookCreate

settings = get_settings()
logger = get_logger(__name__)


class BookService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.book_repo = BookRepository(db)

    async def search_books(self, query: str) -> List[Book]:
        """
        Search the catalog.

        Word-level matches over title, author and description are tried first;
        when they find nothing, a substring match on title, author and ISBN is
        used instead.

        Args:
            query: Raw search string

        Returns:
            At most SEARCH_RESULT_LIMIT books

        Raises:
            ValidationException: The trimmed query is too short
        """
        query = (query or "").strip()
        if len(query) < settings.SEARCH_MIN_QUERY_LENGTH:
            raise ValidationException(
                detail=(
                    f"Search query must be at least "
                    f"{settings.SEARCH_MIN_QUERY_LENGTH} characters"
                ),
                field="q",
            )

        books = await self.book_repo.text_search(query, settings.SEARCH_RESULT_LIMIT)
        if books:
            return books

        return await self.book_repo.substring_search(
            query, settings.SEARCH_RESULT_LIMIT
        )

    async def get_book(self, book_id: int) -> Book:
        book = await self.book_repo.get_by_id(book_id)
        if not book:
            raise NotFoundException(detail="Book not found")
        return book

    async def find_existing(self, data: BookCreate) -> Optional[Book]:
        """Match by ISBN when one is given, then by (title, author) ignoring case."""
        if data.isbn:
            book = await self.book_repo.get_by_isbn(data.isbn)
            if book:
                return book
        return await self.book_repo.get_by_title_author(data.title, data.author)

    async def create_book(self, data: BookCreate) -> Tuple[Book, bool]:
        """
        Add a book to the catalog unless it is already there.

        Returns:
            (book, created) where created is False when an existing book matched
        """
        existing = await self.find_existing(data)
        if existing:
            logger.info(f"Reusing existing book {existing.id} for '{data.title}'")
            return existing, False

        book = await self.book_repo.create(data.model_dump())
        logger.info(f"Created book {book.id}: '{book.title}' by {book.author}")
        return book, True

    async def genre_book_ids(self, genre: Optional[str]) -> Optional[List[int]]:
        """Book IDs tagged with ``genre``, or None when no genre filter applies."""
        if not genre:
            return None
        return await self.book_repo.ids_for_genre(genre)
