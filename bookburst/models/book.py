import re
import unicodedata
from typing import List

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Date,
    ForeignKey,
    Index,
    event,
)
from sqlalchemy.orm import relationship

from bookburst.core.db import Base

_WORD_RE = re.compile(r"[^\W_]+", re.UNICODE)


def normalize_key(text: str) -> str:
    """Case-folded NFC form of ``text``, used for every case-insensitive lookup.

    SQLite's ``lower()`` only folds ASCII letters, so folding happens here and
    the result is stored in its own column.
    """
    return unicodedata.normalize("NFC", (text or "").strip()).casefold()


def tokenize(text: str) -> List[str]:
    """Case-folded words of ``text``, the unit the catalog search matches on.

    Underscores split words, which keeps LIKE wildcards out of search terms.
    """
    return _WORD_RE.findall(normalize_key(text))


def build_search_text(*parts: str) -> str:
    """Space-delimited word list, padded so ``% word %`` matches whole words."""
    words = []
    for part in parts:
        words.extend(tokenize(part))
    return f" {' '.join(words)} "


class Book(Base):
    __tablename__ = "books"
    __table_args__ = (
        Index("idx_books_isbn", "isbn"),
        Index("idx_books_title", "title"),
        Index("idx_books_title_author_key", "title_key", "author_key"),
    )

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    cover_image = Column(String(500), nullable=False, default="")
    isbn = Column(String(20), nullable=True)
    page_count = Column(Integer, nullable=True)
    published_date = Column(Date, nullable=True)
    publisher = Column(String(255), nullable=False, default="")
    # Maintained by the before_insert/before_update listeners below
    search_text = Column(Text, nullable=False, default=" ")
    title_key = Column(String(500), nullable=False, default="")
    author_key = Column(String(500), nullable=False, default="")
    isbn_key = Column(String(20), nullable=False, default="")

    # Relationships
    genres = relationship(
        "BookGenre",
        back_populates="book",
        cascade="all, delete-orphan",
        order_by="BookGenre.position",
        lazy="selectin",
    )
    bookshelf_items = relationship("BookshelfItem", back_populates="book")
    reviews = relationship("Review", back_populates="book")

    @property
    def genre(self) -> List[str]:
        return [g.name for g in self.genres]

    def __repr__(self) -> str:
        return f"<Book id={self.id} title={self.title!r} author={self.author!r}>"


class BookGenre(Base):
    __tablename__ = "book_genres"
    __table_args__ = (
        Index("idx_book_genres_name", "name"),
        Index("idx_book_genres_book_id_name", "book_id", "name", unique=True),
    )

    id = Column(Integer, primary_key=True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    book = relationship("Book", back_populates="genres")


@event.listens_for(Book, "before_insert")
@event.listens_for(Book, "before_update")
def _refresh_search_text(mapper, connection, target: Book) -> None:
    target.search_text = build_search_text(
        target.title, target.author, target.description
    )
    target.title_key = normalize_key(target.title)
    target.author_key = normalize_key(target.author)
    target.isbn_key = normalize_key(target.isbn)
