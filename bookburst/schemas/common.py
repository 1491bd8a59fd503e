from typing import Generic, List, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """Paginated list envelope."""

    items: List[T]
    page: int
    pages: int
    total: int


class MessageResponse(BaseModel):
    message: str
