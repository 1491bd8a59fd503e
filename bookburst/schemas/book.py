from typing import Any, List, Optional
from datetime import date, datetime
from pydantic import BaseModel, Field, field_validator


class BookBase(BaseModel):
    title: str
    author: str
    description: str = ""
    cover_image: str = ""
    isbn: Optional[str] = None
    page_count: Optional[int] = Field(None, ge=0)
    published_date: Optional[date] = None
    publisher: str = ""
    genre: List[str] = []


class BookCreate(BookBase):
    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)

    @field_validator("title", "author", mode="before")
    @classmethod
    def strip_required(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("description", "cover_image", "publisher", mode="before")
    @classmethod
    def default_empty(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("isbn", mode="before")
    @classmethod
    def normalize_isbn(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("genre", mode="before")
    @classmethod
    def normalize_genre(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, list):
            return v
        seen = []
        for tag in v:
            if isinstance(tag, str):
                tag = tag.strip()
                if not tag:
                    continue
            if tag not in seen:
                seen.append(tag)
        return seen


class BookResponse(BookBase):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
