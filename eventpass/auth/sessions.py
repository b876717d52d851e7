from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Literal

from eventpass.auth.permissions import is_known_role, is_superadmin_role, normalize_role
from eventpass.auth.tokens import (
    BadSignature,
    InvalidPayload,
    MalformedToken,
    TokenError,
    decode_token,
    encode_token,
    scanner_signing_secret,
)
from eventpass.config import settings
from eventpass.observability import incr_metric

ADMIN_KIND = "admin"

RejectReason = Literal[
    "missing",
    "format",
    "bad-signature",
    "expired",
    "not-admin",
    "invalid-payload",
    "exception",
]


def now_seconds() -> int:
    return int(time.time())


@dataclass(frozen=True)
class AdminSession:
    username: str
    issued_at: int
    expires_at: int
    role: str | None = None
    tenant_id: str | None = None
    impersonating: bool = False
    tenant_name: str | None = None
    tenant_status: str | None = None

    @property
    def is_superadmin(self) -> bool:
        return is_superadmin_role(self.role)


@dataclass(frozen=True)
class Verified:
    session: AdminSession
    ok: Literal[True] = True


@dataclass(frozen=True)
class Rejected:
    reason: RejectReason
    ok: Literal[False] = False


AdminSessionResult = Verified | Rejected


@dataclass(frozen=True)
class ScannerSession:
    station_id: str
    event_id: str
    issued_at: int
    expires_at: int | None = None


def issue_admin_session(
    username: str,
    *,
    role: str | None = None,
    tenant_id: str | None = None,
    ttl: int | None = None,
    now: int | None = None,
    impersonation: dict[str, Any] | None = None,
    secret: str | None = None,
) -> str:
    """Mint an admin session token.

    ``tenant_id`` is required for every role except superadmin. When
    ``impersonation`` is given it carries the target tenant's name and status.
    """
    if role and not is_superadmin_role(role) and not tenant_id:
        raise ValueError("Tenant sessions require a tenant id")
    iat = now_seconds() if now is None else now
    payload: dict[str, Any] = {
        "u": username,
        "k": ADMIN_KIND,
        "iat": iat,
        "exp": iat + (settings.session_ttl_seconds if ttl is None else ttl),
    }
    if role:
        payload["role"] = role
    if tenant_id:
        payload["oid"] = tenant_id
    if impersonation is not None:
        payload["imp"] = True
        payload["impTenantName"] = impersonation.get("tenant_name")
        payload["impTenantStatus"] = impersonation.get("tenant_status")
    return encode_token(payload, secret)


def _optional_str(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidPayload(f"{key} must be a string")
    return value


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def verify_admin_session(
    token: str | None,
    *,
    now: int | None = None,
    secret: str | None = None,
) -> AdminSessionResult:
    """Verify an admin session token. Never raises."""
    result = _verify_admin_session(token, now=now, secret=secret)
    if not result.ok and result.reason != "missing":
        incr_metric("auth.session.rejected", reason=result.reason)
    return result


def _verify_admin_session(token: str | None, *, now: int | None, secret: str | None) -> AdminSessionResult:
    if not token:
        return Rejected("missing")
    try:
        payload = decode_token(token, secret)
    except MalformedToken:
        return Rejected("format")
    except BadSignature:
        return Rejected("bad-signature")
    except InvalidPayload:
        return Rejected("invalid-payload")
    except Exception:
        return Rejected("exception")

    if payload.get("k") != ADMIN_KIND:
        return Rejected("not-admin")

    username = payload.get("u")
    iat, exp = payload.get("iat"), payload.get("exp")
    if not isinstance(username, str) or not username.strip() or not _is_int(iat) or not _is_int(exp):
        return Rejected("invalid-payload")

    try:
        role = _optional_str(payload, "role")
        tenant_id = _optional_str(payload, "oid")
        tenant_name = _optional_str(payload, "impTenantName")
        tenant_status = _optional_str(payload, "impTenantStatus")
    except InvalidPayload:
        return Rejected("invalid-payload")
    if role is not None and not is_known_role(role):
        return Rejected("invalid-payload")

    current = now_seconds() if now is None else now
    if current >= exp:
        return Rejected("expired")

    return Verified(
        AdminSession(
            username=username,
            issued_at=iat,
            expires_at=exp,
            role=role,
            tenant_id=tenant_id,
            impersonating=payload.get("imp") is True,
            tenant_name=tenant_name,
            tenant_status=tenant_status,
        )
    )


def loose_admin_session(result: AdminSessionResult) -> AdminSession | None:
    """Any verified non-scanner session, without the tenant boundary check."""
    if not result.ok:
        return None
    if result.session.role and normalize_role(result.session.role) == "scanner":
        return None
    return result.session


def tenant_session(result: AdminSessionResult) -> AdminSession | None:
    """A verified session that is either superadmin or bound to one tenant."""
    session = loose_admin_session(result)
    if session is None:
        return None
    if not session.is_superadmin and not session.tenant_id:
        return None
    return session


def issue_scanner_session(
    station_id: str,
    event_id: str,
    *,
    ttl: int | None = None,
    now: int | None = None,
    secret: str | None = None,
) -> str:
    iat = now_seconds() if now is None else now
    payload = {
        "stationId": station_id,
        "eventId": event_id,
        "iat": iat,
        "exp": iat + (settings.scanner_session_ttl_seconds if ttl is None else ttl),
    }
    return encode_token(payload, secret or scanner_signing_secret())


def verify_scanner_session(
    token: str | None,
    *,
    now: int | None = None,
    secret: str | None = None,
) -> ScannerSession | None:
    """Signature and shape check only; callers must confirm the station is still live."""
    if not token:
        return None
    try:
        payload = decode_token(token, secret or scanner_signing_secret())
    except TokenError:
        return None

    station_id, event_id = payload.get("stationId"), payload.get("eventId")
    iat, exp = payload.get("iat"), payload.get("exp")
    if not isinstance(station_id, str) or not station_id or not isinstance(event_id, str) or not event_id:
        return None
    if not _is_int(iat) or (exp is not None and not _is_int(exp)):
        return None

    current = now_seconds() if now is None else now
    if exp is not None and current >= exp:
        return None
    # Older clients stamped iat in milliseconds.
    if iat > 10_000_000_000:
        iat //= 1000
    return ScannerSession(station_id=station_id, event_id=event_id, issued_at=iat, expires_at=exp)
