from typing import List

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookburst.api.deps import get_current_user
from bookburst.common.utils.pagination import PaginationParams
from bookburst.core.db import get_session
from bookburst.core.exceptions import APIException, ServerException
from bookburst.logging.setup import get_logger
from bookburst.models.user import User
from bookburst.schemas.book import BookCreate, BookResponse
from bookburst.schemas.common import Page
from bookburst.services.book_service import BookService
from bookburst.services.explore_service import ExploreService

router = APIRouter()
logger = get_logger("bookburst.api.books")


@router.get("/search", response_model=List[BookResponse])
async def search_books(
    q: str = Query("", description="Title, author, description or ISBN text"),
    db: AsyncSession = Depends(get_session),
):
    """
    Search the catalog.

    Returns at most 20 books, best match first.
    """
    try:
        return await BookService(db).search_books(q)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error searching books for '{q}': {e}", exc_info=True)
        raise ServerException(detail="Server error during book search")


@router.get("/trending", response_model=Page[BookResponse])
async def trending_books(
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_session),
):
    """Same ranking as /explore/trending without a genre filter."""
    try:
        return await ExploreService(db).trending(
            page=pagination.page, limit=pagination.limit
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error fetching trending books: {e}", exc_info=True)
        raise ServerException(detail="Server error fetching trending books")


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: int = Path(..., gt=0), db: AsyncSession = Depends(get_session)
):
    try:
        return await BookService(db).get_book(book_id)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error fetching book {book_id}: {e}", exc_info=True)
        raise ServerException(detail="Server error fetching book")


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def create_book(
    book_data: BookCreate,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """
    Add a book to the catalog.

    When a book with the same ISBN, or the same title and author, already
    exists it is returned with status 200 instead of creating a duplicate.
    """
    user_id = current_user.id
    try:
        book, created = await BookService(db).create_book(book_data)
        if not created:
            response.status_code = status.HTTP_200_OK
        return book
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error creating book for user {user_id}: {e}", exc_info=True)
        raise ServerException(detail="Server error creating book")
