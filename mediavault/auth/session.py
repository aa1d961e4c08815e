"""Login-code sessions stored in the signed session cookie."""

import secrets

from fastapi import Request

SESSION_FLAG = "logged_in"


def check_login_code(submitted: str | None, expected: str) -> bool:
    if not submitted:
        return False
    return secrets.compare_digest(submitted.encode(), expected.encode())


def start_session(request: Request) -> None:
    request.session.clear()
    request.session[SESSION_FLAG] = True


def end_session(request: Request) -> None:
    request.session.clear()


def is_logged_in(request: Request) -> bool:
    return request.session.get(SESSION_FLAG) is True
