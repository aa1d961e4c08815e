"""Tests for the manga API endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.models import Collection, Manga


class TestListMangas:
    """Tests for GET /api/mangas."""

    @pytest.mark.asyncio
    async def test_appendices_excluded(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/api/mangas")
        assert response.status_code == 200
        data = response.json()

        assert data["total_mangas"] == 3
        assert data["current_page"] == 1
        assert data["per_page"] == 40
        assert data["total_pages"] == 1
        assert [m["title"] for m in data["mangas"]] == ["Berserk", "Naruto", "One Piece"]

    @pytest.mark.asyncio
    async def test_list_entry_shape(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/api/mangas", params={"sort_by": "id_asc"})
        first = response.json()["mangas"][0]

        assert first["id"] == 1
        assert first["is_favorited"] is False
        assert first["cover_image_url"] == "http://test/data/manga_images/One%20Piece/cover.jpg"

    @pytest.mark.asyncio
    async def test_sort_by_page_count(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get(
            "/api/mangas", params={"sort_by": "page_count_desc"}
        )
        assert [m["id"] for m in response.json()["mangas"]] == [3, 1, 4]

    @pytest.mark.asyncio
    async def test_pagination(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get(
            "/api/mangas", params={"per_page": 2, "page": 2}
        )
        data = response.json()
        assert data["total_pages"] == 2
        assert [m["title"] for m in data["mangas"]] == ["One Piece"]

    @pytest.mark.asyncio
    async def test_search_term(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/api/mangas", params={"search_term": "miura"})
        assert [m["title"] for m in response.json()["mangas"]] == ["Berserk"]

    @pytest.mark.asyncio
    async def test_author_overrides_search_term(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get(
            "/api/mangas", params={"author": "Oda", "search_term": "Berserk"}
        )
        data = response.json()
        assert data["total_mangas"] == 1
        assert data["mangas"][0]["title"] == "One Piece"

    @pytest.mark.asyncio
    async def test_collection_filter(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/api/mangas", params={"collection_id": 1})
        data = response.json()
        assert data["total_mangas"] == 2
        assert {m["id"] for m in data["mangas"]} == {1, 4}

    @pytest.mark.asyncio
    async def test_invalid_page(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/api/mangas", params={"page": 0})
        assert response.status_code == 400


class TestMangaItem:
    """Tests for GET /api/manga_item/{id}."""

    @pytest.mark.asyncio
    async def test_detail(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/api/manga_item/1")
        assert response.status_code == 200
        data = response.json()

        assert data["title"] == "One Piece"
        assert data["image_urls"] == [
            "http://test/data/manga_images/One%20Piece/001.jpg",
            "http://test/data/manga_images/One%20Piece/002.jpg",
        ]
        assert data["appendices"] == [{"id": 2, "title": "One Piece Extra", "page_count": 1}]
        assert data["member_of_collections"] == [{"id": 1, "name": "Shonen"}]
        assert response.headers["x-served-by"] == "MangaAPI"

    @pytest.mark.asyncio
    async def test_missing(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/api/manga_item/999")
        assert response.status_code == 404
        assert response.json() == {"error": "Manga not found"}

    @pytest.mark.asyncio
    async def test_non_numeric_id(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/api/manga_item/abc")
        assert response.status_code == 400


class TestFavorite:
    """Tests for POST /api/manga_item/{id}/favorite."""

    @pytest.mark.asyncio
    async def test_set_and_clear(
        self, authenticated_client: AsyncClient, seeded_manga: AsyncSession
    ):
        response = await authenticated_client.post(
            "/api/manga_item/3/favorite", json={"favorited": True}
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Manga favorited", "is_favorited": True}
        assert (await seeded_manga.get(Manga, 3)).is_favorited == 1

        response = await authenticated_client.post(
            "/api/manga_item/3/favorite", json={"favorited": False}
        )
        assert response.json() == {"message": "Manga unfavorited", "is_favorited": False}
        assert (await seeded_manga.get(Manga, 3)).is_favorited == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"favorited": "yes"}, {"favorited": 1}, {}])
    async def test_requires_boolean(self, authenticated_client: AsyncClient, payload):
        response = await authenticated_client.post("/api/manga_item/1/favorite", json=payload)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/api/manga_item/999/favorite", json={"favorited": True}
        )
        assert response.status_code == 404


class TestCollectionsAndAuthors:
    """Tests for /api/collections and /api/authors."""

    @pytest.mark.asyncio
    async def test_list_collections(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/api/collections")
        assert response.json() == [{"id": 1, "name": "Shonen"}]

    @pytest.mark.asyncio
    async def test_create_collection(
        self, authenticated_client: AsyncClient, seeded_manga: AsyncSession
    ):
        response = await authenticated_client.post("/api/collections", json={"name": "Seinen"})
        assert response.status_code == 201
        assert response.json() == {"id": 2, "name": "Seinen"}

        response = await authenticated_client.post("/api/collections", json={"name": "Seinen"})
        assert response.status_code == 409
        assert await seeded_manga.scalar(select(func.count(Collection.id))) == 2

    @pytest.mark.asyncio
    async def test_blank_collection_name(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post("/api/collections", json={"name": ""})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_authors(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/api/authors")
        assert response.json() == [
            {"name": "Kishimoto", "manga_count": 1},
            {"name": "Miura", "manga_count": 1},
            {"name": "Oda", "manga_count": 1},
        ]


class TestMangaImages:
    """Tests for GET /data/manga_images/{path}."""

    @pytest.mark.asyncio
    async def test_serve_cover(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/data/manga_images/One%20Piece/cover.jpg")
        assert response.status_code == 200
        assert response.content == b"cover-one-piece"
        assert response.headers["cache-control"] == "public, max-age=604800"
        assert response.headers["x-served-by"] == "R2-MangaImage"

    @pytest.mark.asyncio
    async def test_empty_suffix(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/data/manga_images/")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_page(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/data/manga_images/One%20Piece/999.jpg")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_session(self, client: AsyncClient):
        response = await client.get("/data/manga_images/One%20Piece/cover.jpg")
        assert response.status_code == 307
