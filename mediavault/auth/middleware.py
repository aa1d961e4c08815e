"""Gate every non-public route behind a valid session."""

import logging

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from mediavault.auth.session import is_logged_in
from mediavault.constants import (
    LOGIN_PATH,
    PUBLIC_PATH_PREFIXES,
    SERVED_BY_HEADER,
    SESSION_COOKIE_NAME,
)
from mediavault.utils.http import is_api_path

logger = logging.getLogger(__name__)


def is_public_path(path: str) -> bool:
    return path.startswith(PUBLIC_PATH_PREFIXES)


class LoginRequiredMiddleware(BaseHTTPMiddleware):
    """Reject requests without a logged-in session.

    Must run inside ``SessionMiddleware`` so ``request.session`` is decoded.
    API paths get a 401 JSON body; pages are redirected to the login form.
    A cookie that fails verification or has expired is cleared.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if is_public_path(path) or is_logged_in(request):
            return await call_next(request)

        had_cookie = SESSION_COOKIE_NAME in request.cookies
        if is_api_path(path):
            message = "Invalid session." if had_cookie else "Authentication required."
            response: Response = JSONResponse(
                {"error": "Unauthorized", "message": message},
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
        else:
            response = RedirectResponse(LOGIN_PATH, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

        if had_cookie:
            logger.debug(f"Rejected invalid session cookie for {path}")
            response.delete_cookie(SESSION_COOKIE_NAME, path="/")
        response.headers[SERVED_BY_HEADER] = "AuthGate"
        return response
