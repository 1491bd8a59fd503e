from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, model_validator

from bookburst.models.bookshelf import BookshelfStatus
from bookburst.schemas.book import BookCreate, BookResponse


class BookshelfItemCreate(BaseModel):
    """Either reference an existing book or describe a new one inline."""

    book_id: Optional[int] = Field(None, gt=0)
    book: Optional[BookCreate] = None
    status: BookshelfStatus

    @model_validator(mode="after")
    def require_book_reference(self) -> "BookshelfItemCreate":
        if self.book_id is None and self.book is None:
            raise ValueError("Either book_id or book details are required")
        return self


class BookshelfStatusUpdate(BaseModel):
    status: BookshelfStatus


class BookshelfRatingUpdate(BaseModel):
    rating: float = Field(..., ge=0, le=5)


class BookshelfNotesUpdate(BaseModel):
    notes: str


class BookshelfItemResponse(BaseModel):
    id: int
    user_id: int
    book_id: int
    status: BookshelfStatus
    rating: Optional[float] = None
    notes: Optional[str] = None
    start_date: Optional[datetime] = None
    finish_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    book: BookResponse

    class Config:
        from_attributes = True
