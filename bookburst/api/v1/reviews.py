from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookburst.api.deps import get_current_user
from bookburst.common.utils.pagination import PaginationParams
from bookburst.core.db import get_session
from bookburst.core.exceptions import APIException, ServerException
from bookburst.logging.setup import get_logger
from bookburst.models.user import User
from bookburst.schemas.common import Page
from bookburst.schemas.review import ReviewCreate, ReviewResponse
from bookburst.services.review_service import ReviewService

router = APIRouter()
logger = get_logger("bookburst.api.reviews")


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    review_data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """
    Review a book. Each user can review a book once.

    - **book_id**: The reviewed book
    - **rating**: 1 to 5
    - **content**: Review text
    - **recommend**: Whether the reviewer recommends the book (default: true)
    """
    user_id = current_user.id
    try:
        return await ReviewService(db).create_review(user_id, review_data)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error creating review for user {user_id}: {e}", exc_info=True)
        raise ServerException(detail="Server error creating review")


@router.get("/book/{book_id}", response_model=Page[ReviewResponse])
async def list_book_reviews(
    book_id: int = Path(..., gt=0),
    genre: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_session),
):
    try:
        return await ReviewService(db).list_reviews(
            book_id=book_id, genre=genre, page=pagination.page, limit=pagination.limit
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error fetching reviews of book {book_id}: {e}", exc_info=True)
        raise ServerException(detail="Server error fetching book reviews")


@router.get("/user/{user_id}", response_model=Page[ReviewResponse])
async def list_user_reviews(
    user_id: int = Path(..., gt=0),
    genre: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_session),
):
    try:
        return await ReviewService(db).list_reviews(
            user_id=user_id, genre=genre, page=pagination.page, limit=pagination.limit
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error fetching reviews of user {user_id}: {e}", exc_info=True)
        raise ServerException(detail="Server error fetching user reviews")


@router.get("/recent", response_model=Page[ReviewResponse])
async def list_recent_reviews(
    genre: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_session),
):
    """Newest reviews across all users, optionally within one genre."""
    try:
        return await ReviewService(db).list_reviews(
            genre=genre, page=pagination.page, limit=pagination.limit
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error fetching recent reviews: {e}", exc_info=True)
        raise ServerException(detail="Server error fetching recent reviews")
