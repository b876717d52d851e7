"""Superadmin impersonation of a tenant.

The superadmin's own token is parked in ``inv_admin_prev`` while a freshly
issued tenant session occupies ``inv_admin``. There is a single slot: a second
begin while a previous value is held keeps the original token.
"""
from __future__ import annotations

from starlette import status
from starlette.responses import JSONResponse, RedirectResponse, Response

from eventpass.auth.cookies import ADMIN_COOKIE, PREV_ADMIN_COOKIE, clear_session_cookie, set_session_cookie
from eventpass.auth.sessions import issue_admin_session, loose_admin_session, verify_admin_session
from eventpass.config import settings
from eventpass.directory import TenantRecord, TenantUserRecord
from eventpass.observability import incr_metric, log_event

BEGIN_DEFAULT_REDIRECT = "/admin"
EXIT_DEFAULT_REDIRECT = "/admin/tenants"


def safe_redirect(value: str | None, default: str) -> str:
    """Only same-origin relative paths survive."""
    candidate = (value or "").strip()
    if not candidate.startswith("/") or candidate.startswith("//") or candidate.startswith("/\\"):
        return default
    return candidate


def issue_impersonation_session(tenant: TenantRecord, user: TenantUserRecord | None) -> str:
    return issue_admin_session(
        user.email if user else f"impersonated@{tenant.id}",
        role=(user.role if user and user.role else "admin"),
        tenant_id=tenant.id,
        impersonation={"tenant_name": tenant.name, "tenant_status": tenant.status},
    )


def begin_impersonation(
    response: Response,
    *,
    current_token: str | None,
    previous_token: str | None,
    target_token: str,
) -> None:
    """Swap the session cookie for ``target_token``, parking the current one."""
    ttl = settings.session_ttl_seconds
    if current_token and not previous_token:
        set_session_cookie(response, PREV_ADMIN_COOKIE, current_token, ttl)
    set_session_cookie(response, ADMIN_COOKIE, target_token, ttl)
    incr_metric("auth.impersonation", action="begin")


def exit_impersonation(
    *,
    current_token: str | None,
    previous_token: str | None,
    redirect: str | None = None,
) -> Response:
    """Restore the parked session in one response, or no-op when none is parked."""
    session = loose_admin_session(verify_admin_session(current_token))
    if session is None and not previous_token:
        return JSONResponse({"ok": False, "error": "Unauthorized"}, status_code=status.HTTP_401_UNAUTHORIZED)

    response = RedirectResponse(
        safe_redirect(redirect, EXIT_DEFAULT_REDIRECT),
        status_code=status.HTTP_303_SEE_OTHER,
    )
    if not previous_token:
        return response

    set_session_cookie(response, ADMIN_COOKIE, previous_token, settings.session_ttl_seconds)
    clear_session_cookie(response, PREV_ADMIN_COOKIE)
    incr_metric("auth.impersonation", action="exit")
    log_event(
        "impersonation_ended",
        username=session.username if session else None,
        tenant_id=session.tenant_id if session else None,
    )
    return response
