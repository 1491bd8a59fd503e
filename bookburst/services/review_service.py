from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookburst.common.utils.pagination import build_page
from bookburst.core.exceptions import ConflictException, NotFoundException
from bookburst.logging.setup import get_logger
from bookburst.models.review import Review
from bookburst.repositories.book_repo import BookRepository
from bookburst.repositories.review_repo import ReviewRepository
from bookburst.schemas.review import ReviewCreate
from bookburst.services.book_service import BookService

logger = get_logger(__name__)

ALREADY_REVIEWED = "You have already reviewed this book"


class ReviewService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.review_repo = ReviewRepository(db)
        self.book_repo = BookRepository(db)
        self.book_service = BookService(db)

    async def create_review(self, user_id: int, data: ReviewCreate) -> Review:
        """
        Write a review.

        Args:
            user_id: Author of the review
            data: Book, rating, content and recommend flag

        Returns:
            The review with its author and book loaded

        Raises:
            NotFoundException: The book does not exist
            ConflictException: The user already reviewed this book
        """
        book = await self.book_repo.get_by_id(data.book_id)
        if not book:
            raise NotFoundException(detail="Book not found")

        if await self.review_repo.get_by_user_and_book(user_id, data.book_id):
            raise ConflictException(detail=ALREADY_REVIEWED)

        try:
            review = await self.review_repo.create(
                {"user_id": user_id, **data.model_dump()}
            )
        except IntegrityError:
            await self.db.rollback()
            logger.warning(
                f"Duplicate review rejected by the database: user {user_id}, book {data.book_id}"
            )
            raise ConflictException(detail=ALREADY_REVIEWED)

        logger.info(f"User {user_id} reviewed book {data.book_id} ({data.rating}/5)")
        return review

    async def list_reviews(
        self,
        book_id: Optional[int] = None,
        user_id: Optional[int] = None,
        genre: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        """List reviews newest first, optionally for one book, one author or one genre."""
        book_ids = await self.book_service.genre_book_ids(genre)
        if book_ids is not None and not book_ids:
            return build_page([], 0, page, limit)

        reviews, total = await self.review_repo.list_reviews(
            book_id=book_id,
            user_id=user_id,
            book_ids=book_ids,
            skip=(page - 1) * limit,
            limit=limit,
        )
        return build_page(reviews, total, page, limit)
