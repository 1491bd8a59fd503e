from bookburst.models.user import User
from bookburst.models.book import Book, BookGenre
from bookburst.models.bookshelf import BookshelfItem, BookshelfStatus
from bookburst.models.review import Review

__all__ = ["User", "Book", "BookGenre", "BookshelfItem", "BookshelfStatus", "Review"]
