"""Browser-facing routes."""

from mediavault.web.router import web_router

__all__ = ["web_router"]
