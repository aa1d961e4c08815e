"""Request helpers shared by routers and middleware."""

from fastapi import Request, Response

from mediavault.config import get_settings
from mediavault.constants import API_PATH_PREFIXES, SERVED_BY_HEADER


def get_client_ip(request: Request) -> str:
    """Best-effort client IP: Cloudflare header, then proxy chain, then socket peer."""
    cf_ip = request.headers.get("CF-Connecting-IP")
    if cf_ip:
        return cf_ip
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "Unknown IP"


def get_origin(request: Request) -> str:
    """Origin used to build absolute URLs pointing back at this service."""
    settings = get_settings()
    if settings.app_url:
        return settings.app_url.rstrip("/")
    return str(request.base_url).rstrip("/")


def is_api_path(path: str) -> bool:
    return path.startswith(API_PATH_PREFIXES)


def served_by(label: str):
    """Router dependency tagging successful responses with ``X-Served-By``."""

    def _tag(response: Response) -> None:
        response.headers[SERVED_BY_HEADER] = label

    return _tag
