from starlette.responses import Response

from eventpass.config import settings

ADMIN_COOKIE = "inv_admin"
PREV_ADMIN_COOKIE = "inv_admin_prev"
SCANNER_COOKIE = "scan_sess"


def set_session_cookie(response: Response, name: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key=name,
        value=value,
        max_age=max_age,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_session_cookie(response: Response, name: str) -> None:
    set_session_cookie(response, name, "", max_age=0)
