"""
Async HTTP client for the BookBurst API.

The access token lives on the client instance and is sent with every request,
so several clients (for different users) can coexist in one process.
"""

from typing import Any, Dict, List, Optional

import httpx

from bookburst.logging.setup import get_logger

logger = get_logger(__name__)


class BookBurstAPIError(Exception):
    """Non-2xx response from the API."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail
        self.errors = errors or []


class AuthenticationError(BookBurstAPIError):
    """401 from the API. The client has already dropped its token."""


class BookBurstClient:
    def __init__(
        self,
        base_url: str = "http://localhost:5000/api",
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: API root including the prefix, e.g. ``http://host:5000/api``
            token: Access token from an earlier login
            timeout: Request timeout in seconds
            transport: Custom httpx transport (an ``ASGITransport`` in tests)
        """
        self.token = token
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"), timeout=timeout, transport=transport
        )

    async def __aenter__(self) -> "BookBurstClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def logout(self) -> None:
        self.token = None

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        response = await self._http.request(
            method, path, json=json, params=params, headers=headers
        )
        if response.is_success:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        detail = body.get("detail") or response.reason_phrase or "Request failed"
        errors = body.get("errors")

        if response.status_code == 401:
            logger.warning(f"{method} {path} unauthorized, clearing token")
            self.token = None
            raise AuthenticationError(response.status_code, detail, errors)
        raise BookBurstAPIError(response.status_code, detail, errors)

    @staticmethod
    def _page(page: Optional[int], limit: Optional[int], **extra) -> Dict[str, Any]:
        return {"page": page, "limit": limit, **extra}

    # Users

    async def register(self, username: str, email: str, password: str) -> Dict[str, Any]:
        """Create an account; the returned token is kept for later calls."""
        data = await self._request(
            "POST",
            "/users/register",
            json={"username": username, "email": email, "password": password},
        )
        self.token = data["token"]
        return data

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        data = await self._request(
            "POST", "/users/login", json={"email": email, "password": password}
        )
        self.token = data["token"]
        return data

    async def get_profile(self) -> Dict[str, Any]:
        return await self._request("GET", "/users/profile")

    async def update_profile(
        self, username: Optional[str] = None, profile_picture: Optional[str] = None
    ) -> Dict[str, Any]:
        payload = {"username": username, "profile_picture": profile_picture}
        return await self._request(
            "PUT",
            "/users/profile",
            json={k: v for k, v in payload.items() if v is not None},
        )

    async def get_user_profile(self, user_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/users/{user_id}/profile")

    async def get_reading_history(self, user_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/users/{user_id}/reading-history")

    # Books

    async def search_books(self, query: str) -> List[Dict[str, Any]]:
        return await self._request("GET", "/books/search", params={"q": query})

    async def get_book(self, book_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/books/{book_id}")

    async def create_book(self, book: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/books", json=book)

    async def get_trending_books(
        self, page: Optional[int] = None, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        return await self._request("GET", "/books/trending", params=self._page(page, limit))

    # Bookshelf

    async def get_bookshelf(
        self,
        status: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        return await self._request(
            "GET", "/bookshelf", params=self._page(page, limit, status=status)
        )

    async def add_to_bookshelf(
        self,
        status: str,
        book_id: Optional[int] = None,
        book: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Shelve an existing book by id, or a new one described by ``book``."""
        if book_id is None and book is None:
            raise ValueError("Either book_id or book is required")
        payload: Dict[str, Any] = {"status": status}
        if book_id is not None:
            payload["book_id"] = book_id
        else:
            payload["book"] = book
        return await self._request("POST", "/bookshelf", json=payload)

    async def update_bookshelf_status(self, item_id: int, status: str) -> Dict[str, Any]:
        return await self._request("PUT", f"/bookshelf/{item_id}", json={"status": status})

    async def update_bookshelf_rating(self, item_id: int, rating: float) -> Dict[str, Any]:
        return await self._request(
            "PUT", f"/bookshelf/{item_id}/rating", json={"rating": rating}
        )

    async def update_bookshelf_notes(self, item_id: int, notes: str) -> Dict[str, Any]:
        return await self._request(
            "PUT", f"/bookshelf/{item_id}/notes", json={"notes": notes}
        )

    async def remove_from_bookshelf(self, item_id: int) -> Dict[str, Any]:
        return await self._request("DELETE", f"/bookshelf/{item_id}")

    # Reviews

    async def create_review(
        self, book_id: int, rating: int, content: str, recommend: bool = True
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/reviews",
            json={
                "book_id": book_id,
                "rating": rating,
                "content": content,
                "recommend": recommend,
            },
        )

    async def get_book_reviews(
        self, book_id: int, page: Optional[int] = None, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        return await self._request(
            "GET", f"/reviews/book/{book_id}", params=self._page(page, limit)
        )

    async def get_user_reviews(
        self, user_id: int, page: Optional[int] = None, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        return await self._request(
            "GET", f"/reviews/user/{user_id}", params=self._page(page, limit)
        )

    async def get_recent_reviews(
        self,
        genre: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        return await self._request(
            "GET", "/reviews/recent", params=self._page(page, limit, genre=genre)
        )

    # Explore

    async def _explore(
        self, view: str, genre: Optional[str], page: Optional[int], limit: Optional[int]
    ) -> Dict[str, Any]:
        return await self._request(
            "GET", f"/explore/{view}", params=self._page(page, limit, genre=genre)
        )

    async def explore_trending(self, genre=None, page=None, limit=None) -> Dict[str, Any]:
        return await self._explore("trending", genre, page, limit)

    async def explore_top_rated(self, genre=None, page=None, limit=None) -> Dict[str, Any]:
        return await self._explore("top-rated", genre, page, limit)

    async def explore_most_wishlisted(
        self, genre=None, page=None, limit=None
    ) -> Dict[str, Any]:
        return await self._explore("most-wishlisted", genre, page, limit)

    async def explore_recent_reviews(
        self, genre=None, page=None, limit=None
    ) -> Dict[str, Any]:
        return await self._explore("recent-reviews", genre, page, limit)

    async def get_genres(self) -> List[str]:
        return await self._request("GET", "/explore/genres")
