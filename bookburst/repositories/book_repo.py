from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select, or_, case
from sqlalchemy.ext.asyncio import AsyncSession

from bookburst.models.book import Book, BookGenre, normalize_key, tokenize


class BookRepository:
    """Repository for the shared book catalog and its genre tags."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, book_id: int) -> Optional[Book]:
        result = await self.db.execute(select(Book).where(Book.id == book_id))
        return result.scalars().first()

    async def get_by_ids(self, book_ids: Sequence[int]) -> List[Book]:
        """Fetch several books at once. The result order is unspecified."""
        if not book_ids:
            return []
        result = await self.db.execute(select(Book).where(Book.id.in_(list(book_ids))))
        return list(result.scalars().all())

    async def get_by_isbn(self, isbn: str) -> Optional[Book]:
        result = await self.db.execute(
            select(Book).where(Book.isbn == isbn).order_by(Book.id).limit(1)
        )
        return result.scalars().first()

    async def get_by_title_author(self, title: str, author: str) -> Optional[Book]:
        """Case-insensitive lookup on the (title, author) pair."""
        result = await self.db.execute(
            select(Book)
            .where(
                Book.title_key == normalize_key(title),
                Book.author_key == normalize_key(author),
            )
            .order_by(Book.id)
            .limit(1)
        )
        return result.scalars().first()

    async def create(self, book_data: Dict[str, Any]) -> Book:
        """Insert a book together with its genre tags.

        Args:
            book_data: Book columns plus an optional ``genre`` list

        Returns:
            The stored book
        """
        allowed_fields = {
            "title",
            "author",
            "description",
            "cover_image",
            "isbn",
            "page_count",
            "published_date",
            "publisher",
        }
        book = Book(**{k: v for k, v in book_data.items() if k in allowed_fields})
        book.genres = [
            BookGenre(name=name, position=position)
            for position, name in enumerate(book_data.get("genre") or [])
        ]
        self.db.add(book)
        await self.db.commit()
        return await self.get_by_id(book.id)

    async def text_search(self, query: str, limit: int) -> List[Book]:
        """Word-level search over title, author and description.

        Books are ranked by how many distinct query words they contain, then
        by title.
        """
        words = list(dict.fromkeys(tokenize(query)))
        if not words:
            return []

        matches = [Book.search_text.like(f"% {word} %") for word in words]
        score = sum(case((match, 1), else_=0) for match in matches)
        result = await self.db.execute(
            select(Book)
            .where(or_(*matches))
            .order_by(score.desc(), Book.title, Book.id)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def substring_search(self, query: str, limit: int) -> List[Book]:
        """Case-insensitive substring match on title, author or ISBN."""
        needle = normalize_key(query)
        result = await self.db.execute(
            select(Book)
            .where(
                or_(
                    Book.title_key.contains(needle, autoescape=True),
                    Book.author_key.contains(needle, autoescape=True),
                    Book.isbn_key.contains(needle, autoescape=True),
                )
            )
            .order_by(Book.title, Book.id)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def ids_for_genre(self, genre: str) -> List[int]:
        """IDs of every book tagged with ``genre``."""
        result = await self.db.execute(
            select(BookGenre.book_id).where(BookGenre.name == genre).distinct()
        )
        return list(result.scalars().all())

    async def list_genres(self) -> List[str]:
        result = await self.db.execute(
            select(BookGenre.name).distinct().order_by(BookGenre.name)
        )
        return list(result.scalars().all())
