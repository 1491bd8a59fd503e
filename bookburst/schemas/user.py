from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator

from bookburst.core.config import get_settings
from bookburst.schemas.bookshelf import BookshelfItemResponse
from bookburst.schemas.review import ReviewResponse

settings = get_settings()

USERNAME_FIELD = dict(
    min_length=settings.USERNAME_MIN_LENGTH, max_length=settings.USERNAME_MAX_LENGTH
)


class UserCreate(BaseModel):
    username: str = Field(..., **USERNAME_FIELD)
    email: EmailStr
    password: str = Field(..., min_length=settings.PASSWORD_MIN_LENGTH)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, **USERNAME_FIELD)
    profile_picture: Optional[str] = None

    @field_validator("username", "profile_picture", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    profile_picture: str = ""
    created_at: datetime

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    user: UserResponse
    token: str


class UserProfileResponse(BaseModel):
    user: UserResponse
    books: List[BookshelfItemResponse]
    reviews: List[ReviewResponse]


class ReadingHistoryMonth(BaseModel):
    month: str
    date: datetime
    books: List[BookshelfItemResponse]


class ReadingHistoryResponse(BaseModel):
    history: List[ReadingHistoryMonth]
