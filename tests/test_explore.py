from httpx import AsyncClient

from bookburst.services.explore_service import ExploreService

API = "/api"


class TestTrending:
    """Books ranked by how many shelves they are on"""

    async def _build_shelves(self, register_user, create_book, shelve):
        books = [await create_book(f"Book {i:02d}", "Author") for i in range(15)]
        readers = [await register_user() for _ in range(3)]
        # Books 0-2 on three shelves, 3-7 on two, the rest on one
        for reader, count in zip(readers, (15, 8, 3)):
            for book in books[:count]:
                await shelve(reader["headers"], book["id"], "reading")
        return books

    async def test_ranking_and_pagination(
        self, client: AsyncClient, register_user, create_book, shelve
    ):
        books = await self._build_shelves(register_user, create_book, shelve)

        page_one = (await client.get(f"{API}/explore/trending", params={"limit": 10})).json()
        page_two = (
            await client.get(f"{API}/explore/trending", params={"page": 2, "limit": 10})
        ).json()
        combined = (await client.get(f"{API}/explore/trending", params={"limit": 20})).json()

        ids_one = [book["id"] for book in page_one["items"]]
        ids_two = [book["id"] for book in page_two["items"]]
        assert ids_one + ids_two == [book["id"] for book in combined["items"]]
        assert not set(ids_one) & set(ids_two)
        assert ids_one + ids_two == [book["id"] for book in books]
        assert page_one["total"] == 15
        assert page_one["pages"] == 2
        assert combined["pages"] == 1

    async def test_books_trending_alias(
        self, client: AsyncClient, register_user, create_book, shelve
    ):
        await self._build_shelves(register_user, create_book, shelve)

        explore = (await client.get(f"{API}/explore/trending")).json()
        alias = (await client.get(f"{API}/books/trending")).json()
        assert alias == explore

    async def test_genre_filter(
        self, client: AsyncClient, auth_headers, create_book, shelve
    ):
        dune = await create_book("Dune", "Frank Herbert", genre=["Science Fiction"])
        emma = await create_book("Emma", "Jane Austen", genre=["Romance"])
        await shelve(auth_headers, dune["id"])
        await shelve(auth_headers, emma["id"])

        response = await client.get(
            f"{API}/explore/trending", params={"genre": "Science Fiction"}
        )
        data = response.json()
        assert [book["title"] for book in data["items"]] == ["Dune"]
        assert data["total"] == 1

        empty = await client.get(f"{API}/explore/trending", params={"genre": "Horror"})
        assert empty.json()["items"] == []
        assert empty.json()["total"] == 0


class TestMostWishlisted:
    """Books most often marked want-to-read"""

    async def test_only_counts_want_to_read(
        self, client: AsyncClient, auth_headers, other_user, create_book, shelve
    ):
        dune = await create_book("Dune", "Frank Herbert")
        emma = await create_book("Emma", "Jane Austen")
        await shelve(auth_headers, dune["id"], "reading")
        await shelve(other_user["headers"], dune["id"], "finished")
        await shelve(auth_headers, emma["id"], "want-to-read")

        data = (await client.get(f"{API}/explore/most-wishlisted")).json()
        assert [book["title"] for book in data["items"]] == ["Emma"]
        assert data["total"] == 1


class TestTopRated:
    """Books ranked by average review rating"""

    async def test_needs_two_reviews(
        self, client: AsyncClient, auth_headers, other_user, create_book, review
    ):
        lonely = await create_book("Lonely Masterpiece", "Solo")
        good = await create_book("Good", "Writer")
        okay = await create_book("Okay", "Writer")

        await review(auth_headers, lonely["id"], rating=5)
        await review(auth_headers, good["id"], rating=5)
        await review(other_user["headers"], good["id"], rating=4)
        await review(auth_headers, okay["id"], rating=4)
        await review(other_user["headers"], okay["id"], rating=2)

        data = (await client.get(f"{API}/explore/top-rated")).json()
        assert [book["title"] for book in data["items"]] == ["Good", "Okay"]
        assert data["total"] == 2
        assert data["pages"] == 1


class TestRankingOrderDiffersFromCreationOrder:
    """The newer book ranks first when its aggregate is higher"""

    async def test_trending(
        self, client: AsyncClient, auth_headers, other_user, create_book, shelve
    ):
        low = await create_book("Low", "Writer")
        high = await create_book("High", "Writer")
        await shelve(auth_headers, low["id"], "reading")
        await shelve(auth_headers, high["id"], "reading")
        await shelve(other_user["headers"], high["id"], "finished")

        data = (await client.get(f"{API}/explore/trending")).json()
        assert [book["title"] for book in data["items"]] == ["High", "Low"]

    async def test_most_wishlisted(
        self, client: AsyncClient, auth_headers, other_user, create_book, shelve
    ):
        low = await create_book("Low", "Writer")
        high = await create_book("High", "Writer")
        await shelve(auth_headers, low["id"], "want-to-read")
        await shelve(auth_headers, high["id"], "want-to-read")
        await shelve(other_user["headers"], high["id"], "want-to-read")

        data = (await client.get(f"{API}/explore/most-wishlisted")).json()
        assert [book["title"] for book in data["items"]] == ["High", "Low"]

    async def test_top_rated(
        self, client: AsyncClient, auth_headers, other_user, create_book, review
    ):
        earlier = await create_book("Earlier", "Writer")
        later = await create_book("Later", "Writer")
        await review(auth_headers, earlier["id"], rating=3)
        await review(other_user["headers"], earlier["id"], rating=3)
        await review(auth_headers, later["id"], rating=5)
        await review(other_user["headers"], later["id"], rating=5)

        data = (await client.get(f"{API}/explore/top-rated")).json()
        assert [book["title"] for book in data["items"]] == ["Later", "Earlier"]


class TestRankingFiltersAndPages:
    """Genre filter and page totals on the rating and wishlist views"""

    async def _rate(self, review, readers, book, ratings):
        for reader, rating in zip(readers, ratings):
            await review(reader["headers"], book["id"], rating=rating)

    async def test_top_rated_genre_filter(
        self, client: AsyncClient, test_user, other_user, create_book, review
    ):
        readers = [test_user, other_user]
        dune = await create_book("Dune", "Frank Herbert", genre=["Science Fiction"])
        emma = await create_book("Emma", "Jane Austen", genre=["Romance"])
        await self._rate(review, readers, dune, (3, 4))
        await self._rate(review, readers, emma, (5, 5))

        data = (
            await client.get(
                f"{API}/explore/top-rated", params={"genre": "Science Fiction"}
            )
        ).json()
        assert [book["title"] for book in data["items"]] == ["Dune"]
        assert data["total"] == 1

        empty = (
            await client.get(f"{API}/explore/top-rated", params={"genre": "Horror"})
        ).json()
        assert empty["items"] == []
        assert empty["total"] == 0
        assert empty["pages"] == 0

    async def test_top_rated_pages(
        self, client: AsyncClient, test_user, other_user, create_book, review
    ):
        readers = [test_user, other_user]
        first = await create_book("First", "Writer")
        second = await create_book("Second", "Writer")
        third = await create_book("Third", "Writer")
        await self._rate(review, readers, first, (2, 2))
        await self._rate(review, readers, second, (4, 5))
        await self._rate(review, readers, third, (3, 3))

        titles = []
        for page in (1, 2, 3):
            data = (
                await client.get(
                    f"{API}/explore/top-rated", params={"page": page, "limit": 1}
                )
            ).json()
            assert data["total"] == 3
            assert data["pages"] == 3
            assert data["page"] == page
            titles.extend(book["title"] for book in data["items"])
        assert titles == ["Second", "Third", "First"]

    async def test_most_wishlisted_genre_filter(
        self, client: AsyncClient, auth_headers, other_user, create_book, shelve
    ):
        dune = await create_book("Dune", "Frank Herbert", genre=["Science Fiction"])
        emma = await create_book("Emma", "Jane Austen", genre=["Romance"])
        await shelve(auth_headers, dune["id"])
        await shelve(auth_headers, emma["id"])
        await shelve(other_user["headers"], emma["id"])

        data = (
            await client.get(f"{API}/explore/most-wishlisted", params={"genre": "Romance"})
        ).json()
        assert [book["title"] for book in data["items"]] == ["Emma"]
        assert data["total"] == 1

    async def test_most_wishlisted_pages(
        self, client: AsyncClient, register_user, create_book, shelve
    ):
        books = [await create_book(f"Wish {i}", "Writer") for i in range(3)]
        readers = [await register_user() for _ in range(3)]
        # Wish 2 on three wishlists, Wish 1 on two, Wish 0 on one
        for count, book in enumerate(books, start=1):
            for reader in readers[:count]:
                await shelve(reader["headers"], book["id"], "want-to-read")

        page_one = (
            await client.get(f"{API}/explore/most-wishlisted", params={"limit": 2})
        ).json()
        page_two = (
            await client.get(
                f"{API}/explore/most-wishlisted", params={"page": 2, "limit": 2}
            )
        ).json()
        assert [book["title"] for book in page_one["items"]] == ["Wish 2", "Wish 1"]
        assert [book["title"] for book in page_two["items"]] == ["Wish 0"]
        assert page_one["total"] == page_two["total"] == 3
        assert page_one["pages"] == page_two["pages"] == 2


class TestRecentReviewsAndGenres:
    async def test_recent_reviews_matches_reviews_endpoint(
        self, client: AsyncClient, auth_headers, create_book, review
    ):
        book = await create_book("Dune", "Frank Herbert")
        await review(auth_headers, book["id"])

        explore = (await client.get(f"{API}/explore/recent-reviews")).json()
        recent = (await client.get(f"{API}/reviews/recent")).json()
        assert explore == recent
        assert explore["total"] == 1

    async def test_genres_sorted_and_unique(self, client: AsyncClient, create_book):
        await create_book("Dune", "Frank Herbert", genre=["Science Fiction", "Classics"])
        await create_book("Emma", "Jane Austen", genre=["Romance", "Classics"])
        await create_book("Untagged", "Nobody")

        response = await client.get(f"{API}/explore/genres")
        assert response.status_code == 200
        assert response.json() == ["Classics", "Romance", "Science Fiction"]

    async def test_unexpected_error_is_generic(self, client: AsyncClient, monkeypatch):
        async def broken(self):
            raise RuntimeError("connection string with secrets")

        monkeypatch.setattr(ExploreService, "genres", broken)

        response = await client.get(f"{API}/explore/genres")
        assert response.status_code == 500
        assert response.json() == {
            "detail": "Server error fetching genres",
            "code": "server_error",
        }
