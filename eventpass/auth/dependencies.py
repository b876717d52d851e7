import logging
from fastapi import Depends, HTTPException, Request, status
from eventpass.auth import cookies
from eventpass.auth.context import AdminContext, EventScope, StationContext
from eventpass.auth.gate import (
    Credentials,
    ScopeDenied,
    admin_context,
    require_admin_for_slug,
    resolve_event_scope,
    resolve_station_scope,
)
from eventpass.auth.sessions import tenant_session, verify_admin_session
from eventpass.observability import log_event


def _raise_denied(denied: ScopeDenied) -> None:
    raise HTTPException(status_code=denied.status, detail=denied.error)


def get_credentials(request: Request) -> Credentials:
    return Credentials.from_request(request)


async def get_admin_session(request: Request) -> AdminContext:
    """
    Strict admin session from the session cookie.
    Scanner sessions and tenant roles without a tenant are rejected.
    """
    result = verify_admin_session(request.cookies.get(cookies.ADMIN_COOKIE))
    session = tenant_session(result)
    if session is None:
        if not result.ok and result.reason != "missing":
            log_event(
                "admin_session_rejected",
                level=logging.INFO,
                request_id=getattr(request.state, "request_id", None),
                reason=result.reason,
            )
        # Expired, tampered and absent sessions look the same to the caller.
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return admin_context(session)


async def get_current_super_admin(admin: AdminContext = Depends(get_admin_session)) -> AdminContext:
    if not admin.is_superadmin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden",
        )
    return admin


async def require_event_scope(slug: str, credentials: Credentials = Depends(get_credentials)) -> EventScope:
    """Tenant key, platform key or session access to the event ``slug``."""
    result = resolve_event_scope(credentials, slug)
    if not result.ok:
        _raise_denied(result)
    return result.scope


async def require_event_admin(slug: str, credentials: Credentials = Depends(get_credentials)) -> EventScope:
    """Event access for bulk mutations: 404 first, active tenant required."""
    result = require_admin_for_slug(credentials, slug)
    if not result.ok:
        _raise_denied(result)
    return result.scope


async def get_current_station(credentials: Credentials = Depends(get_credentials)) -> StationContext:
    result = resolve_station_scope(credentials)
    if not result.ok:
        _raise_denied(result)
    return result.station


def require_scope_permission(permission_key: str):
    async def _require(scope: EventScope = Depends(require_event_admin)) -> EventScope:
        if not scope.allows(permission_key):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden",
            )
        return scope

    return _require
