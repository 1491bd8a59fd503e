import enum

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Float,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from bookburst.core.db import Base


class BookshelfStatus(str, enum.Enum):
    """Reading status of a book on a user's shelf"""

    READING = "reading"
    FINISHED = "finished"
    WANT_TO_READ = "want-to-read"


class BookshelfItem(Base):
    __tablename__ = "bookshelf_items"
    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_bookshelf_items_user_book"),
        Index("idx_bookshelf_items_book_id", "book_id"),
        Index("idx_bookshelf_items_status", "status"),
        Index("idx_bookshelf_items_updated_at", "updated_at"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False, default=BookshelfStatus.WANT_TO_READ.value)
    rating = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    start_date = Column(DateTime, nullable=True)
    finish_date = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User", back_populates="bookshelf_items")
    book = relationship("Book", back_populates="bookshelf_items")
