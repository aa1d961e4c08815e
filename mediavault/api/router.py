"""Main API routers."""

from fastapi import APIRouter, Depends

from mediavault.api.assets import router as assets_router
from mediavault.api.manga import router as manga_router
from mediavault.api.movies import router as movies_router
from mediavault.constants import MANGA_API_PREFIX, MOVIE_API_PREFIX
from mediavault.utils import served_by

movie_api_router = APIRouter(prefix=MOVIE_API_PREFIX)
movie_api_router.include_router(
    movies_router, tags=["movies"], dependencies=[Depends(served_by("MovieAPI"))]
)
movie_api_router.include_router(assets_router, tags=["movie-assets"])

manga_api_router = APIRouter(prefix=MANGA_API_PREFIX)
manga_api_router.include_router(
    manga_router, tags=["manga"], dependencies=[Depends(served_by("MangaAPI"))]
)
