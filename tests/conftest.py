"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

# Settings are read once at import time
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOGIN_CODE", "open-sesame")
os.environ.setdefault("SESSION_SECRET_KEY", "test-secret-key-that-is-long-enough-0123456789")
os.environ.setdefault("STORAGE_BACKEND", "local")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from mediavault.db.database import get_manga_db, get_movies_db, make_session_maker
from mediavault.main import app
from mediavault.models import (
    ActorInfo,
    Collection,
    Manga,
    MangaBase,
    Movie,
    MovieBase,
    MovieCollection,
    PrecomputedRelatedMovie,
    manga_collections,
    movie_movie_collections,
)
from mediavault.storage import LocalObjectStore, Storage, get_storage

# Test database URL (uses SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
LOGIN_CODE = os.environ["LOGIN_CODE"]

STREAM_BYTES = b"0123456789" * 10


@pytest_asyncio.fixture
async def movies_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test movies database session."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(MovieBase.metadata.create_all)

    async with make_session_maker(engine)() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def manga_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test manga database session."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(MangaBase.metadata.create_all)

    async with make_session_maker(engine)() as session:
        yield session

    await engine.dispose()


def _write(root: Path, key: str, data: bytes) -> None:
    path = root / key
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


@pytest.fixture
def bucket_root(tmp_path: Path) -> Path:
    """Filesystem buckets holding the objects the seeded rows point at."""
    movies = tmp_path / "movies"
    _write(movies, "ABC-001/poster.jpg", b"poster-abc")
    _write(movies, "ABC-001/fanart.jpg", b"fanart-abc")
    _write(movies, "12345/poster.jpg", b"poster-12345")
    _write(movies, "ZZZ-999/poster.jpg", b"poster-zzz")
    _write(movies, "videos/abc-001.mp4", STREAM_BYTES)
    _write(movies, "actor_thumbs/jane.jpg", b"thumb-jane")

    manga = tmp_path / "manga"
    _write(manga, "One Piece/cover.jpg", b"cover-one-piece")
    _write(manga, "One Piece/001.jpg", b"page-1")

    static = tmp_path / "static_files"
    _write(static, "login.html", b"<html>login</html>")
    _write(static, "main.html", b"<html>main</html>")
    _write(static, "manga.html", b"<html>manga</html>")
    _write(static, "video_detail.html", b"<html>video</html>")
    _write(static, "static/app.css", b"body {}")
    _write(tmp_path, "secret.txt", b"outside every bucket")
    return tmp_path


@pytest.fixture
def storage(bucket_root: Path) -> Storage:
    return Storage(
        movie_assets=LocalObjectStore(bucket_root / "movies"),
        manga=LocalObjectStore(bucket_root / "manga"),
        static_files=LocalObjectStore(bucket_root / "static_files"),
    )


@pytest_asyncio.fixture
async def seeded_movies(movies_session: AsyncSession) -> AsyncSession:
    """Five movies, actor thumbs, one collection and precomputed relations."""
    movies_session.add_all(
        [
            Movie(
                id=1,
                uniqueid_num="ABC-001",
                title="Alpha",
                plot="A heist goes wrong",
                rating=7.5,
                runtime=120,
                premiered="2020-01-01",
                studio="Studio One",
                genres='["Action", "Drama"]',
                tags='["heist"]',
                actors='[{"name": "Jane Roe", "role": "Lead"}]',
                director='["John Doe"]',
                strm_files='["videos/abc-001.mp4"]',
                root_folder="/lib/Movies",
                folder_path_relative="ABC-001",
                poster_file_relative_path="poster.jpg",
                fanart_file_relative_path="fanart.jpg",
            ),
            Movie(
                id=2,
                uniqueid_num="XYZ-002",
                title="Bravo",
                rating=8.0,
                premiered="2021-05-05",
                studio="Studio Two",
                set_name="Saga",
                genres='["Comedy"]',
                actors='[{"name":"John Smith"}]',
                director="Jane Director",
                root_folder="/lib/Anime",
                folder_path_relative="XYZ-002",
                poster_file_relative_path="poster.jpg",
            ),
            Movie(
                id=3,
                uniqueid_num="12345",
                title="Charlie",
                rating=6.0,
                premiered="2019-03-03",
                studio="Studio One",
                set_name="Saga",
                genres='["Action Comedy"]',
                actors='[{"name": "Jane Roe"}]',
                root_folder="/lib/Movies",
                folder_path_relative="12345",
                poster_file_relative_path="poster.jpg",
            ),
            Movie(id=4, title="Delta"),
            Movie(
                id=12345,
                uniqueid_num="ZZZ-999",
                title="Echo",
                premiered="2018-01-01",
                root_folder="/lib/Movies",
                folder_path_relative="ZZZ-999",
                poster_file_relative_path="poster.jpg",
            ),
            ActorInfo(name="Jane Roe", thumb_path="jane.jpg"),
            ActorInfo(name="John Smith", thumb_path=""),
            MovieCollection(id=1, name="Favorites"),
            PrecomputedRelatedMovie(
                source_movie_id=1, related_movie_id=2, relevance_score=0.9, relation_type="genre"
            ),
            PrecomputedRelatedMovie(
                source_movie_id=1, related_movie_id=3, relevance_score=0.5, relation_type="genre"
            ),
            PrecomputedRelatedMovie(
                source_movie_id=1,
                related_movie_id=2,
                relevance_score=0.0,
                relation_type="genre_random_pick",
            ),
            PrecomputedRelatedMovie(
                source_movie_id=1,
                related_movie_id=4,
                relevance_score=0.0,
                relation_type="genre_random_pick",
            ),
            PrecomputedRelatedMovie(
                source_movie_id=1,
                related_movie_id=12345,
                relevance_score=0.0,
                relation_type="genre_random_pick",
            ),
        ]
    )
    await movies_session.flush()
    await movies_session.execute(
        movie_movie_collections.insert().values(movie_id=1, collection_id=1)
    )
    await movies_session.commit()
    return movies_session


@pytest_asyncio.fixture
async def seeded_manga(manga_session: AsyncSession) -> AsyncSession:
    """Three primary mangas, one appendix and one collection."""
    manga_session.add_all(
        [
            Manga(
                id=1,
                title="One Piece",
                author="Oda",
                path="One Piece",
                cover_image="cover.jpg",
                pages_json='["001.jpg", "002.jpg"]',
                page_count=2,
            ),
            Manga(
                id=2,
                title="One Piece Extra",
                author="Oda",
                path="One Piece/extra",
                page_count=1,
                is_appendix_to=1,
            ),
            Manga(id=3, title="Berserk", author="Miura", path="Berserk", page_count=10),
            Manga(id=4, title="Naruto", author="Kishimoto", path="Naruto", is_favorited=1),
            Collection(id=1, name="Shonen"),
        ]
    )
    await manga_session.flush()
    await manga_session.execute(
        manga_collections.insert().values(
            [{"manga_id": 1, "collection_id": 1}, {"manga_id": 4, "collection_id": 1}]
        )
    )
    await manga_session.commit()
    return manga_session


def _session_override(session: AsyncSession):
    """Mirror the real dependency: commit on success, roll back on error."""

    async def override() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    return override


@pytest.fixture
def override_dependencies(
    movies_session: AsyncSession, manga_session: AsyncSession, storage: Storage
):
    app.dependency_overrides[get_movies_db] = _session_override(movies_session)
    app.dependency_overrides[get_manga_db] = _session_override(manga_session)
    app.dependency_overrides[get_storage] = lambda: storage
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(override_dependencies) -> AsyncGenerator[AsyncClient, None]:
    """Create an unauthenticated test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def authenticated_client(
    override_dependencies, seeded_movies: AsyncSession, seeded_manga: AsyncSession
) -> AsyncGenerator[AsyncClient, None]:
    """Create a logged-in test client over seeded libraries."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        response = await ac.post("/login", data={"login_code": LOGIN_CODE})
        assert response.status_code == 303
        yield ac
