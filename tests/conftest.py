"""
Test configuration and fixtures for the BookBurst API tests.
"""
import itertools
import os
from typing import Any, AsyncGenerator, Dict, Optional

# Settings are read on first import, so the test environment must be in place first
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DB_AUTO_CREATE_TABLES"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from bookburst.core.db import build_session_factory, get_session, init_models
from bookburst.main import create_app

# Use in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
API = "/api"


@pytest_asyncio.fixture
async def engine():
    """A fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def app(session_factory) -> FastAPI:
    """Create app instance wired to the test database."""
    app = create_app()

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    async with AsyncClient(
        base_url="http://test", transport=ASGITransport(app=app)
    ) as ac:
        yield ac


@pytest.fixture
def register_user(client: AsyncClient):
    """Factory registering a user through the API."""
    counter = itertools.count(1)

    async def _register(
        username: Optional[str] = None,
        email: Optional[str] = None,
        password: str = "password123",
    ) -> Dict[str, Any]:
        username = username or f"reader{next(counter)}"
        email = email or f"{username}@example.com"
        response = await client.post(
            f"{API}/users/register",
            json={"username": username, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        data = response.json()
        return {
            "user": data["user"],
            "token": data["token"],
            "headers": {"Authorization": f"Bearer {data['token']}"},
        }

    return _register


@pytest_asyncio.fixture
async def test_user(register_user) -> Dict[str, Any]:
    return await register_user("alice", "alice@example.com")


@pytest_asyncio.fixture
async def other_user(register_user) -> Dict[str, Any]:
    return await register_user("bob", "bob@example.com")


@pytest.fixture
def auth_headers(test_user) -> Dict[str, str]:
    return test_user["headers"]


@pytest.fixture
def create_book(client: AsyncClient, auth_headers):
    """Factory adding a book to the catalog through the API."""

    async def _create(
        title: str, author: str = "Test Author", **fields: Any
    ) -> Dict[str, Any]:
        response = await client.post(
            f"{API}/books",
            json={"title": title, "author": author, **fields},
            headers=auth_headers,
        )
        assert response.status_code in (200, 201), response.text
        return response.json()

    return _create


@pytest.fixture
def shelve(client: AsyncClient):
    """Factory putting an existing book on a user's shelf."""

    async def _shelve(headers: Dict[str, str], book_id: int, status: str = "want-to-read"):
        response = await client.post(
            f"{API}/bookshelf",
            json={"book_id": book_id, "status": status},
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _shelve


@pytest.fixture
def review(client: AsyncClient):
    """Factory writing a review through the API."""

    async def _review(
        headers: Dict[str, str],
        book_id: int,
        rating: int = 4,
        content: str = "Worth reading",
        recommend: bool = True,
    ):
        response = await client.post(
            f"{API}/reviews",
            json={
                "book_id": book_id,
                "rating": rating,
                "content": content,
                "recommend": recommend,
            },
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _review
