"""API routers."""

from mediavault.api.router import manga_api_router, movie_api_router

__all__ = ["manga_api_router", "movie_api_router"]
