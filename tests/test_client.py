import pytest
import pytest_asyncio
from httpx import ASGITransport

from bookburst.client import AuthenticationError, BookBurstAPIError, BookBurstClient


@pytest_asyncio.fixture
async def api_client(app):
    async with BookBurstClient(
        base_url="http://test/api", transport=ASGITransport(app=app)
    ) as api_client:
        yield api_client


class TestBookBurstClient:
    """The HTTP client against the in-process app"""

    async def test_register_keeps_token(self, api_client: BookBurstClient):
        data = await api_client.register("carol", "carol@example.com", "password123")
        assert api_client.token == data["token"]
        assert api_client.is_authenticated

        profile = await api_client.get_profile()
        assert profile["username"] == "carol"

    async def test_shelf_workflow(self, api_client: BookBurstClient):
        await api_client.register("carol", "carol@example.com", "password123")

        item = await api_client.add_to_bookshelf(
            "reading", book={"title": "Dune", "author": "Frank Herbert", "genre": ["Science Fiction"]}
        )
        assert item["book"]["title"] == "Dune"

        item = await api_client.update_bookshelf_status(item["id"], "finished")
        assert item["finish_date"] is not None
        await api_client.update_bookshelf_rating(item["id"], 4.5)
        await api_client.update_bookshelf_notes(item["id"], "Spice must flow")

        shelf = await api_client.get_bookshelf(status="finished")
        assert shelf["total"] == 1
        assert shelf["items"][0]["notes"] == "Spice must flow"

        review = await api_client.create_review(item["book_id"], 5, "Loved it")
        assert review["rating"] == 5

        assert await api_client.get_genres() == ["Science Fiction"]
        trending = await api_client.explore_trending(genre="Science Fiction")
        assert [book["title"] for book in trending["items"]] == ["Dune"]

        removed = await api_client.remove_from_bookshelf(item["id"])
        assert removed["message"] == "Book removed from bookshelf"

    async def test_login_and_logout(self, api_client: BookBurstClient, test_user):
        await api_client.login("alice@example.com", "password123")
        assert api_client.is_authenticated

        api_client.logout()
        assert api_client.token is None

    async def test_unauthorized_clears_token(self, api_client: BookBurstClient):
        api_client.token = "not-a-real-token"

        with pytest.raises(AuthenticationError) as exc_info:
            await api_client.get_profile()

        assert exc_info.value.status_code == 401
        assert api_client.token is None

    async def test_other_errors_keep_token(self, api_client: BookBurstClient):
        await api_client.register("carol", "carol@example.com", "password123")
        token = api_client.token

        with pytest.raises(BookBurstAPIError) as exc_info:
            await api_client.get_book(9999)

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Book not found"
        assert not isinstance(exc_info.value, AuthenticationError)
        assert api_client.token == token

    async def test_validation_errors_are_exposed(self, api_client: BookBurstClient):
        with pytest.raises(BookBurstAPIError) as exc_info:
            await api_client.register("ab", "carol@example.com", "password123")

        assert exc_info.value.status_code == 400
        assert exc_info.value.errors[0]["field"] == "username"

    async def test_add_to_bookshelf_needs_a_book(self, api_client: BookBurstClient):
        with pytest.raises(ValueError):
            await api_client.add_to_bookshelf("reading")
