"""Authentication module."""

from mediavault.auth.middleware import LoginRequiredMiddleware, is_public_path
from mediavault.auth.session import (
    SESSION_FLAG,
    check_login_code,
    end_session,
    is_logged_in,
    start_session,
)

__all__ = [
    "LoginRequiredMiddleware",
    "SESSION_FLAG",
    "check_login_code",
    "end_session",
    "is_logged_in",
    "is_public_path",
    "start_session",
]
