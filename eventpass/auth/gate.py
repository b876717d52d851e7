"""Scope resolution for every privileged route.

Precedence, first match wins:

1. ``x-api-key`` equal to the owning tenant's key
2. ``x-api-key`` equal to the platform admin key
3. an admin session cookie (superadmin, or ``oid`` equal to the event owner)
4. otherwise 401
"""
from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Literal

from starlette.requests import HTTPConnection

from eventpass import directory
from eventpass.auth import cookies
from eventpass.auth.context import AdminContext, EventScope, StationContext
from eventpass.auth.sessions import AdminSession, tenant_session, verify_admin_session, verify_scanner_session
from eventpass.config import settings
from eventpass.observability import incr_metric, log_event

UNAUTHORIZED = "Unauthorized"
FORBIDDEN = "Forbidden"
EVENT_NOT_FOUND = "Event not found"


@dataclass(frozen=True)
class Credentials:
    api_key: str | None = None
    session_token: str | None = None
    scanner_token: str | None = None

    @classmethod
    def from_request(cls, request: HTTPConnection) -> "Credentials":
        api_key = (request.headers.get("x-api-key") or "").strip()
        if not api_key:
            authorization = request.headers.get("authorization") or ""
            parts = authorization.split()
            if len(parts) == 2 and parts[0].lower() == "bearer":
                api_key = parts[1].strip()
        return cls(
            api_key=api_key or None,
            session_token=request.cookies.get(cookies.ADMIN_COOKIE) or None,
            scanner_token=request.cookies.get(cookies.SCANNER_COOKIE) or None,
        )

    @property
    def is_empty(self) -> bool:
        return not (self.api_key or self.session_token)


@dataclass(frozen=True)
class ScopeGranted:
    scope: EventScope
    ok: Literal[True] = True


@dataclass(frozen=True)
class ScopeDenied:
    status: int
    error: str
    ok: Literal[False] = False


@dataclass(frozen=True)
class StationGranted:
    station: StationContext
    ok: Literal[True] = True


ScopeResult = ScopeGranted | ScopeDenied


def keys_match(provided: str | None, expected: str | None) -> bool:
    provided = (provided or "").strip()
    expected = (expected or "").strip()
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def admin_context(session: AdminSession) -> AdminContext:
    role = session.role or ("admin" if session.tenant_id else "superadmin")
    return AdminContext(
        username=session.username,
        role=role,
        tenant_id=session.tenant_id,
        expires_at=session.expires_at,
        impersonating=session.impersonating,
        tenant_name=session.tenant_name,
    )


def _deny(status: int, error: str, **fields) -> ScopeDenied:
    incr_metric("auth.scope.denied", status=status)
    log_event("scope_denied", level=logging.INFO, status=status, error=error, **fields)
    return ScopeDenied(status=status, error=error)


def _grant(scope: EventScope) -> ScopeGranted:
    incr_metric("auth.scope.granted", mode=scope.mode)
    return ScopeGranted(scope=scope)


def _authorize(
    credentials: Credentials,
    event: directory.EventRecord,
    *,
    require_active_tenant: bool,
) -> ScopeResult:
    if not event.tenant_id:
        return _deny(500, "Event has no organizer", event_id=event.id)

    if credentials.api_key:
        if keys_match(credentials.api_key, directory.find_tenant_api_key(event.tenant_id)):
            return _grant(EventScope(event_id=event.id, tenant_id=event.tenant_id, mode="tenant_key", slug=event.slug))
        if keys_match(credentials.api_key, settings.admin_key):
            return _grant(EventScope(event_id=event.id, tenant_id=event.tenant_id, mode="admin_key", slug=event.slug))

    session = tenant_session(verify_admin_session(credentials.session_token))
    if session is None:
        return _deny(401, UNAUTHORIZED, event_id=event.id)

    admin = admin_context(session)
    if admin.is_superadmin:
        return _grant(EventScope(
            event_id=event.id, tenant_id=event.tenant_id, mode="superadmin", slug=event.slug, admin=admin,
        ))

    if session.tenant_id != event.tenant_id:
        return _deny(403, FORBIDDEN, event_id=event.id)

    if require_active_tenant:
        tenant = directory.find_tenant(event.tenant_id)
        if tenant is None or not tenant.is_active:
            return _deny(403, FORBIDDEN, event_id=event.id, reason="tenant_inactive")

    return _grant(EventScope(event_id=event.id, tenant_id=event.tenant_id, mode="session", slug=event.slug, admin=admin))


def resolve_event_scope(credentials: Credentials, identifier: str) -> ScopeResult:
    """Decide whether ``credentials`` may act on the event ``identifier``."""
    if credentials.is_empty:
        return _deny(401, UNAUTHORIZED, identifier=identifier)

    event = directory.find_event_by_identifier(identifier)
    if event is None:
        return _deny(404, EVENT_NOT_FOUND, identifier=identifier)
    return _authorize(credentials, event, require_active_tenant=False)


def require_admin_for_slug(credentials: Credentials, slug: str) -> ScopeResult:
    """Like resolve_event_scope, for bulk mutations.

    The event is resolved before any credential check, so an unknown slug is
    always 404. Tenant sessions additionally need an active tenant.
    """
    event = directory.find_event_by_identifier(slug)
    if event is None:
        return _deny(404, EVENT_NOT_FOUND, identifier=slug)
    return _authorize(credentials, event, require_active_tenant=True)


def resolve_station_scope(credentials: Credentials, event_id: str | None = None) -> StationGranted | ScopeDenied:
    session = verify_scanner_session(credentials.scanner_token)
    if session is None:
        return _deny(401, UNAUTHORIZED)
    if event_id is not None and session.event_id != event_id:
        return _deny(401, UNAUTHORIZED, station_id=session.station_id)

    station = directory.find_station(session.station_id)
    if station is None or not station.active or station.event_id != session.event_id:
        return _deny(401, UNAUTHORIZED, station_id=session.station_id, reason="station_inactive")
    return StationGranted(StationContext(station_id=station.id, event_id=station.event_id, name=station.name))
