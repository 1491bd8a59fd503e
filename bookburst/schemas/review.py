from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from bookburst.schemas.book import BookResponse


class ReviewAuthor(BaseModel):
    id: int
    username: str
    profile_picture: str = ""

    class Config:
        from_attributes = True


class ReviewCreate(BaseModel):
    book_id: int = Field(..., gt=0)
    rating: int = Field(..., ge=1, le=5)
    content: str = Field(..., min_length=1)
    recommend: bool = True

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v


class ReviewResponse(BaseModel):
    id: int
    user_id: int
    book_id: int
    rating: int
    content: str
    recommend: bool
    created_at: datetime
    updated_at: datetime
    user: ReviewAuthor
    book: BookResponse

    class Config:
        from_attributes = True
