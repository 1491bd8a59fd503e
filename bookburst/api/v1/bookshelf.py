from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookburst.api.deps import get_current_user
from bookburst.common.utils.pagination import BookshelfPaginationParams
from bookburst.core.db import get_session
from bookburst.core.exceptions import APIException, ServerException
from bookburst.logging.setup import get_logger
from bookburst.models.bookshelf import BookshelfStatus
from bookburst.models.user import User
from bookburst.schemas.bookshelf import (
    BookshelfItemCreate,
    BookshelfItemResponse,
    BookshelfNotesUpdate,
    BookshelfRatingUpdate,
    BookshelfStatusUpdate,
)
from bookburst.schemas.common import MessageResponse, Page
from bookburst.services.bookshelf_service import BookshelfService

router = APIRouter()
logger = get_logger("bookburst.api.bookshelf")


async def _list_my_books(
    current_user: User,
    db: AsyncSession,
    pagination: BookshelfPaginationParams,
    status_filter: Optional[BookshelfStatus],
):
    user_id = current_user.id
    try:
        return await BookshelfService(db).list_books(
            user_id,
            status=status_filter,
            page=pagination.page,
            limit=pagination.limit,
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error fetching bookshelf of user {user_id}: {e}", exc_info=True)
        raise ServerException(detail="Server error fetching bookshelf")


@router.get("", response_model=Page[BookshelfItemResponse])
async def list_my_books(
    status_filter: Optional[BookshelfStatus] = Query(None, alias="status"),
    pagination: BookshelfPaginationParams = Depends(),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """
    List the signed-in user's shelf, most recently updated first.

    - **status**: Only books with this reading status (optional)
    """
    return await _list_my_books(current_user, db, pagination, status_filter)


@router.get("/my-books", response_model=Page[BookshelfItemResponse])
async def list_my_books_alias(
    status_filter: Optional[BookshelfStatus] = Query(None, alias="status"),
    pagination: BookshelfPaginationParams = Depends(),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await _list_my_books(current_user, db, pagination, status_filter)


@router.post(
    "", response_model=BookshelfItemResponse, status_code=status.HTTP_201_CREATED
)
async def add_to_bookshelf(
    item_data: BookshelfItemCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """
    Put a book on the shelf.

    - **book_id**: An existing book, or
    - **book**: Details of a new book (title and author required)
    - **status**: reading, finished or want-to-read
    """
    user_id = current_user.id
    try:
        return await BookshelfService(db).add_book(user_id, item_data)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error adding book for user {user_id}: {e}", exc_info=True)
        raise ServerException(detail="Server error adding book to bookshelf")


@router.put("/{item_id}", response_model=BookshelfItemResponse)
async def update_status(
    status_data: BookshelfStatusUpdate,
    item_id: int = Path(..., gt=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    user_id = current_user.id
    try:
        return await BookshelfService(db).update_status(
            item_id, user_id, status_data.status
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error updating shelf item {item_id}: {e}", exc_info=True)
        raise ServerException(detail="Server error updating bookshelf item")


@router.put("/{item_id}/rating", response_model=BookshelfItemResponse)
async def update_rating(
    rating_data: BookshelfRatingUpdate,
    item_id: int = Path(..., gt=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    user_id = current_user.id
    try:
        return await BookshelfService(db).update_rating(
            item_id, user_id, rating_data.rating
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error rating shelf item {item_id}: {e}", exc_info=True)
        raise ServerException(detail="Server error updating rating")


@router.put("/{item_id}/notes", response_model=BookshelfItemResponse)
async def update_notes(
    notes_data: BookshelfNotesUpdate,
    item_id: int = Path(..., gt=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    user_id = current_user.id
    try:
        return await BookshelfService(db).update_notes(
            item_id, user_id, notes_data.notes
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error updating notes of shelf item {item_id}: {e}", exc_info=True)
        raise ServerException(detail="Server error updating notes")


@router.delete("/{item_id}", response_model=MessageResponse)
async def remove_from_bookshelf(
    item_id: int = Path(..., gt=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    user_id = current_user.id
    try:
        await BookshelfService(db).remove_book(item_id, user_id)
        return {"message": "Book removed from bookshelf"}
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Error removing shelf item {item_id}: {e}", exc_info=True)
        raise ServerException(detail="Server error removing book from bookshelf")
