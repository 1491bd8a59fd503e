from httpx import AsyncClient

from bookburst.repositories.bookshelf_repo import BookshelfRepository

API = "/api"


class TestAddToBookshelf:
    """Adding books to a shelf"""

    async def test_add_existing_book(self, client: AsyncClient, auth_headers, create_book):
        book = await create_book("Dune", "Frank Herbert")
        response = await client.post(
            f"{API}/bookshelf",
            json={"book_id": book["id"], "status": "reading"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "reading"
        assert data["book"]["title"] == "Dune"
        assert data["start_date"] is not None
        assert data["finish_date"] is None

    async def test_add_finished_sets_finish_date(
        self, client: AsyncClient, auth_headers, create_book
    ):
        book = await create_book("Dune", "Frank Herbert")
        response = await client.post(
            f"{API}/bookshelf",
            json={"book_id": book["id"], "status": "finished"},
            headers=auth_headers,
        )
        assert response.json()["finish_date"] is not None
        assert response.json()["start_date"] is None

    async def test_add_twice_is_rejected(
        self, client: AsyncClient, auth_headers, create_book, shelve
    ):
        book = await create_book("Dune", "Frank Herbert")
        await shelve(auth_headers, book["id"])

        response = await client.post(
            f"{API}/bookshelf",
            json={"book_id": book["id"], "status": "reading"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "This book is already in your bookshelf"

        shelf = await client.get(f"{API}/bookshelf", headers=auth_headers)
        assert shelf.json()["total"] == 1

    async def test_database_duplicate_maps_to_same_error(
        self, client: AsyncClient, auth_headers, create_book, shelve, monkeypatch
    ):
        book = await create_book("Dune", "Frank Herbert")
        await shelve(auth_headers, book["id"])

        async def never_found(self, user_id, book_id):
            return None

        monkeypatch.setattr(BookshelfRepository, "get_by_user_and_book", never_found)

        response = await client.post(
            f"{API}/bookshelf",
            json={"book_id": book["id"], "status": "reading"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "This book is already in your bookshelf"

    async def test_add_unknown_book(self, client: AsyncClient, auth_headers):
        response = await client.post(
            f"{API}/bookshelf",
            json={"book_id": 9999, "status": "reading"},
            headers=auth_headers,
        )
        assert response.status_code == 404

    async def test_add_requires_book_reference(self, client: AsyncClient, auth_headers):
        response = await client.post(
            f"{API}/bookshelf", json={"status": "reading"}, headers=auth_headers
        )
        assert response.status_code == 400

    async def test_add_requires_valid_status(
        self, client: AsyncClient, auth_headers, create_book
    ):
        book = await create_book("Dune", "Frank Herbert")
        response = await client.post(
            f"{API}/bookshelf",
            json={"book_id": book["id"], "status": "abandoned"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "status"

    async def test_book_id_wins_over_inline_book(
        self, client: AsyncClient, auth_headers, create_book
    ):
        book = await create_book("Dune", "Frank Herbert")
        response = await client.post(
            f"{API}/bookshelf",
            json={
                "book_id": book["id"],
                "book": {"title": "Emma", "author": "Jane Austen"},
                "status": "want-to-read",
            },
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["book_id"] == book["id"]

        search = await client.get(f"{API}/books/search", params={"q": "emma"})
        assert search.json() == []

    async def test_inline_book_reuses_existing_catalog_entry(
        self, client: AsyncClient, create_book, other_user
    ):
        book = await create_book("Dune", "Frank Herbert")

        response = await client.post(
            f"{API}/bookshelf",
            json={
                "book": {"title": "dune", "author": "FRANK HERBERT"},
                "status": "reading",
            },
            headers=other_user["headers"],
        )
        assert response.status_code == 201
        assert response.json()["book_id"] == book["id"]

        shelf = await client.get(f"{API}/bookshelf", headers=other_user["headers"])
        assert shelf.json()["total"] == 1

    async def test_inline_book_is_validated(self, client: AsyncClient, auth_headers):
        response = await client.post(
            f"{API}/bookshelf",
            json={"book": {"title": "Dune", "author": "  "}, "status": "reading"},
            headers=auth_headers,
        )
        assert response.status_code == 400


class TestUpdateBookshelf:
    """Status, rating and notes updates"""

    async def test_finish_date_survives_status_changes(
        self, client: AsyncClient, auth_headers, create_book, shelve
    ):
        book = await create_book("Dune", "Frank Herbert")
        item = await shelve(auth_headers, book["id"], "reading")
        start_date = item["start_date"]

        finished = await client.put(
            f"{API}/bookshelf/{item['id']}",
            json={"status": "finished"},
            headers=auth_headers,
        )
        assert finished.status_code == 200
        finish_date = finished.json()["finish_date"]
        assert finish_date is not None

        rereading = await client.put(
            f"{API}/bookshelf/{item['id']}",
            json={"status": "reading"},
            headers=auth_headers,
        )
        assert rereading.json()["finish_date"] == finish_date
        assert rereading.json()["start_date"] == start_date

        finished_again = await client.put(
            f"{API}/bookshelf/{item['id']}",
            json={"status": "finished"},
            headers=auth_headers,
        )
        assert finished_again.json()["finish_date"] == finish_date

    async def test_update_rating(self, client: AsyncClient, auth_headers, create_book, shelve):
        book = await create_book("Dune", "Frank Herbert")
        item = await shelve(auth_headers, book["id"])

        response = await client.put(
            f"{API}/bookshelf/{item['id']}/rating",
            json={"rating": 4.5},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["rating"] == 4.5
        assert response.json()["status"] == "want-to-read"

    async def test_rating_out_of_range(
        self, client: AsyncClient, auth_headers, create_book, shelve
    ):
        book = await create_book("Dune", "Frank Herbert")
        item = await shelve(auth_headers, book["id"])

        response = await client.put(
            f"{API}/bookshelf/{item['id']}/rating",
            json={"rating": 6},
            headers=auth_headers,
        )
        assert response.status_code == 400

    async def test_update_notes(self, client: AsyncClient, auth_headers, create_book, shelve):
        book = await create_book("Dune", "Frank Herbert")
        item = await shelve(auth_headers, book["id"])

        response = await client.put(
            f"{API}/bookshelf/{item['id']}/notes",
            json={"notes": "Re-read the appendix"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["notes"] == "Re-read the appendix"

    async def test_only_owner_can_update(
        self, client: AsyncClient, auth_headers, other_user, create_book, shelve
    ):
        book = await create_book("Dune", "Frank Herbert")
        item = await shelve(auth_headers, book["id"])

        for path, payload in (
            ("", {"status": "reading"}),
            ("/rating", {"rating": 1}),
            ("/notes", {"notes": "mine now"}),
        ):
            response = await client.put(
                f"{API}/bookshelf/{item['id']}{path}",
                json=payload,
                headers=other_user["headers"],
            )
            assert response.status_code == 403

        response = await client.delete(
            f"{API}/bookshelf/{item['id']}", headers=other_user["headers"]
        )
        assert response.status_code == 403

    async def test_update_missing_item(self, client: AsyncClient, auth_headers):
        response = await client.put(
            f"{API}/bookshelf/9999", json={"status": "reading"}, headers=auth_headers
        )
        assert response.status_code == 404


class TestListAndRemove:
    """Listing, removing and re-adding shelf items"""

    async def test_list_newest_update_first_with_status_filter(
        self, client: AsyncClient, auth_headers, create_book, shelve
    ):
        first = await create_book("First", "A")
        second = await create_book("Second", "B")
        third = await create_book("Third", "C")
        first_item = await shelve(auth_headers, first["id"], "reading")
        await shelve(auth_headers, second["id"], "want-to-read")
        await shelve(auth_headers, third["id"], "reading")

        await client.put(
            f"{API}/bookshelf/{first_item['id']}/notes",
            json={"notes": "bumped"},
            headers=auth_headers,
        )

        response = await client.get(f"{API}/bookshelf", headers=auth_headers)
        data = response.json()
        assert [item["book"]["title"] for item in data["items"]] == [
            "First",
            "Third",
            "Second",
        ]
        assert data["page"] == 1
        assert data["pages"] == 1
        assert data["total"] == 3

        reading = await client.get(
            f"{API}/bookshelf/my-books", params={"status": "reading"}, headers=auth_headers
        )
        assert reading.json()["total"] == 2
        assert {item["status"] for item in reading.json()["items"]} == {"reading"}

    async def test_list_pagination(
        self, client: AsyncClient, auth_headers, create_book, shelve
    ):
        for i in range(5):
            book = await create_book(f"Book {i}", "Author")
            await shelve(auth_headers, book["id"])

        response = await client.get(
            f"{API}/bookshelf", params={"page": 2, "limit": 2}, headers=auth_headers
        )
        data = response.json()
        assert len(data["items"]) == 2
        assert data["pages"] == 3
        assert data["total"] == 5

    async def test_list_requires_auth(self, client: AsyncClient):
        response = await client.get(f"{API}/bookshelf")
        assert response.status_code == 401

    async def test_remove_then_re_add(
        self, client: AsyncClient, auth_headers, create_book, shelve
    ):
        book = await create_book("Dune", "Frank Herbert")
        item = await shelve(auth_headers, book["id"])

        response = await client.delete(f"{API}/bookshelf/{item['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Book removed from bookshelf"}

        again = await client.post(
            f"{API}/bookshelf",
            json={"book_id": book["id"], "status": "reading"},
            headers=auth_headers,
        )
        assert again.status_code == 201

    async def test_remove_missing_item(self, client: AsyncClient, auth_headers):
        response = await client.delete(f"{API}/bookshelf/9999", headers=auth_headers)
        assert response.status_code == 404
