from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bookburst.models.review import Review


class ReviewRepository:
    """Repository for book reviews."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _with_relations(self):
        return (
            select(Review)
            .options(selectinload(Review.user), selectinload(Review.book))
            .execution_options(populate_existing=True)
        )

    @staticmethod
    def _filters(
        book_id: Optional[int] = None,
        user_id: Optional[int] = None,
        book_ids: Optional[Sequence[int]] = None,
    ) -> list:
        filters = []
        if book_id is not None:
            filters.append(Review.book_id == book_id)
        if user_id is not None:
            filters.append(Review.user_id == user_id)
        if book_ids is not None:
            filters.append(Review.book_id.in_(list(book_ids)))
        return filters

    async def get_by_id(self, review_id: int) -> Optional[Review]:
        """Get a review with its author and book loaded."""
        result = await self.db.execute(
            self._with_relations().where(Review.id == review_id)
        )
        return result.scalars().first()

    async def get_by_user_and_book(self, user_id: int, book_id: int) -> Optional[Review]:
        result = await self.db.execute(
            select(Review).where(Review.user_id == user_id, Review.book_id == book_id)
        )
        return result.scalars().first()

    async def create(self, review_data: Dict[str, Any]) -> Review:
        """Insert a review.

        Raises:
            IntegrityError: The user already reviewed this book
        """
        allowed_fields = {"user_id", "book_id", "rating", "content", "recommend"}
        review = Review(**{k: v for k, v in review_data.items() if k in allowed_fields})
        self.db.add(review)
        await self.db.commit()
        return await self.get_by_id(review.id)

    async def list_reviews(
        self,
        book_id: Optional[int] = None,
        user_id: Optional[int] = None,
        book_ids: Optional[Sequence[int]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[Review], int]:
        """List reviews newest first.

        Args:
            book_id: Only reviews of this book
            user_id: Only reviews written by this user
            book_ids: Only reviews of these books, None for every book
            skip: Items to skip
            limit: Maximum items to return, None for all

        Returns:
            (reviews, total matching reviews)
        """
        filters = self._filters(book_id, user_id, book_ids)
        query = (
            self._with_relations()
            .where(*filters)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        reviews = list(result.scalars().all())

        count_result = await self.db.execute(
            select(func.count(Review.id)).where(*filters)
        )
        return reviews, count_result.scalar_one()

    def _top_rated_groups(self, book_ids: Optional[Sequence[int]], min_reviews: int):
        average = func.avg(Review.rating).label("average_rating")
        review_count = func.count(Review.id).label("review_count")
        query = (
            select(Review.book_id, average, review_count)
            .where(Review.rating > 0, *self._filters(book_ids=book_ids))
            .group_by(Review.book_id)
            .having(func.count(Review.id) >= min_reviews)
        )
        return query, average

    async def top_rated(
        self,
        min_reviews: int,
        book_ids: Optional[Sequence[int]] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> List[Tuple[int, float, int]]:
        """Rank books by average rating among those with enough reviews.

        Ties are broken by ascending book id.

        Returns:
            (book_id, average_rating, review_count) rows for the requested page
        """
        query, average = self._top_rated_groups(book_ids, min_reviews)
        query = (
            query.order_by(average.desc(), Review.book_id.asc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return [
            (row.book_id, float(row.average_rating), row.review_count)
            for row in result.all()
        ]

    async def count_top_rated(
        self, min_reviews: int, book_ids: Optional[Sequence[int]] = None
    ) -> int:
        query, _ = self._top_rated_groups(book_ids, min_reviews)
        result = await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )
        return result.scalar_one()
