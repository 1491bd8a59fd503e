from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bookburst.common.utils.pagination import PaginationParams
from bookburst.core.db import get_session
from bookburst.core.exceptions import APIException, ServerException
from bookburst.logging.setup import get_logger
from bookburst.schemas.book import BookResponse
from bookburst.schemas.common import Page
from bookburst.schemas.review import ReviewResponse
from bookburst.services.explore_service import ExploreService

router = APIRouter()
logger = get_logger("bookburst.api.explore")


@router.get("/trending", response_model=Page[BookResponse])
async def trending(
    genre: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_session),
):
    """Books on the most shelves."""
    try:
        return await ExploreService(db).trending(
            genre=genre, page=pagination.page, limit=pagination.limit
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error fetching trending books: {e}", exc_info=True)
        raise ServerException(detail="Server error fetching trending books")


@router.get("/top-rated", response_model=Page[BookResponse])
async def top_rated(
    genre: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_session),
):
    """Highest average review rating among books with at least two reviews."""
    try:
        return await ExploreService(db).top_rated(
            genre=genre, page=pagination.page, limit=pagination.limit
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error fetching top rated books: {e}", exc_info=True)
        raise ServerException(detail="Server error fetching top rated books")


@router.get("/most-wishlisted", response_model=Page[BookResponse])
async def most_wishlisted(
    genre: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_session),
):
    try:
        return await ExploreService(db).most_wishlisted(
            genre=genre, page=pagination.page, limit=pagination.limit
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error fetching most wishlisted books: {e}", exc_info=True)
        raise ServerException(detail="Server error fetching most wishlisted books")


@router.get("/recent-reviews", response_model=Page[ReviewResponse])
async def recent_reviews(
    genre: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_session),
):
    try:
        return await ExploreService(db).recent_reviews(
            genre=genre, page=pagination.page, limit=pagination.limit
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error fetching recent reviews: {e}", exc_info=True)
        raise ServerException(detail="Server error fetching recent reviews")


@router.get("/genres", response_model=List[str])
async def genres(db: AsyncSession = Depends(get_session)):
    """Every genre tag in the catalog, alphabetically."""
    try:
        return await ExploreService(db).genres()
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error fetching genres: {e}", exc_info=True)
        raise ServerException(detail="Server error fetching genres")
