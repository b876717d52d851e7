"""Lookups for the records the auth layer consults.

Every query goes through the module-level ``supabase`` client so tests can
swap it for an in-memory fake.
"""
from __future__ import annotations

from dataclasses import dataclass

from eventpass import db
from eventpass.db import DatabaseNotConfigured

supabase = db.supabase


@dataclass(frozen=True)
class EventRecord:
    id: str
    slug: str
    tenant_id: str | None
    title: str | None = None


@dataclass(frozen=True)
class TenantRecord:
    id: str
    name: str | None
    status: str | None
    api_key: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"


@dataclass(frozen=True)
class StationRecord:
    id: str
    event_id: str
    name: str
    code: str | None
    active: bool
    secret_hash: str | None = None


@dataclass(frozen=True)
class TenantUserRecord:
    id: str
    tenant_id: str
    email: str
    role: str | None
    password_hash: str | None
    is_active: bool


def client():
    if supabase is None:
        raise DatabaseNotConfigured("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
    return supabase


def _event(row: dict) -> EventRecord:
    return EventRecord(id=row["id"], slug=row["slug"], tenant_id=row.get("organizer_id"), title=row.get("title"))


def _tenant(row: dict) -> TenantRecord:
    return TenantRecord(id=row["id"], name=row.get("name"), status=row.get("status"), api_key=row.get("api_key"))


def _station(row: dict) -> StationRecord:
    return StationRecord(
        id=row["id"],
        event_id=row["event_id"],
        name=row.get("name") or "",
        code=row.get("code"),
        active=bool(row.get("active")),
        secret_hash=row.get("secret_hash"),
    )


def _tenant_user(row: dict) -> TenantUserRecord:
    return TenantUserRecord(
        id=row["id"],
        tenant_id=row["organizer_id"],
        email=row["email"],
        role=row.get("role"),
        password_hash=row.get("password_hash"),
        is_active=bool(row.get("is_active")),
    )


def find_event_by_identifier(identifier: str) -> EventRecord | None:
    """Resolve an event by slug."""
    result = client().table("events").select("id, slug, organizer_id, title").eq(
        "slug", identifier
    ).execute()
    if not result.data:
        return None
    return _event(result.data[0])


def find_tenant(tenant_id: str) -> TenantRecord | None:
    result = client().table("organizers").select("id, name, status, api_key").eq(
        "id", tenant_id
    ).execute()
    if not result.data:
        return None
    return _tenant(result.data[0])


def find_tenant_api_key(tenant_id: str) -> str | None:
    tenant = find_tenant(tenant_id)
    if tenant is None:
        return None
    key = (tenant.api_key or "").strip()
    return key or None


def find_tenant_by_api_key(api_key: str) -> TenantRecord | None:
    result = client().table("organizers").select("id, name, status, api_key").eq(
        "api_key", api_key
    ).execute()
    if not result.data:
        return None
    return _tenant(result.data[0])


def list_tenants() -> list[TenantRecord]:
    result = client().table("organizers").select("id, name, status, api_key").order("name").execute()
    return [_tenant(row) for row in result.data or []]


def update_tenant_status(tenant_id: str, status: str) -> TenantRecord | None:
    result = client().table("organizers").update({"status": status}).eq("id", tenant_id).execute()
    if not result.data:
        return None
    if status == "suspended":
        client().table("organizer_users").update({"is_active": False}).eq(
            "organizer_id", tenant_id
        ).execute()
    return _tenant(result.data[0])


def find_station(station_id: str) -> StationRecord | None:
    result = client().table("stations").select(
        "id, event_id, name, code, active, secret_hash"
    ).eq("id", station_id).execute()
    if not result.data:
        return None
    return _station(result.data[0])


def find_station_by_code(event_id: str, code: str) -> StationRecord | None:
    result = client().table("stations").select(
        "id, event_id, name, code, active, secret_hash"
    ).eq("event_id", event_id).eq("code", code).execute()
    if not result.data:
        return None
    return _station(result.data[0])


def list_stations(event_id: str) -> list[StationRecord]:
    result = client().table("stations").select(
        "id, event_id, name, code, active, secret_hash"
    ).eq("event_id", event_id).order("name").execute()
    return [_station(row) for row in result.data or []]


def insert_station(event_id: str, name: str, code: str, secret_hash: str) -> StationRecord:
    result = client().table("stations").insert({
        "event_id": event_id,
        "name": name,
        "code": code,
        "secret_hash": secret_hash,
        "active": True,
    }).execute()
    return _station(result.data[0])


def update_station(station_id: str, event_id: str, fields: dict) -> StationRecord | None:
    result = client().table("stations").update(fields).eq("id", station_id).eq(
        "event_id", event_id
    ).execute()
    if not result.data:
        return None
    return _station(result.data[0])


def find_tenant_user(email: str) -> TenantUserRecord | None:
    result = client().table("organizer_users").select(
        "id, organizer_id, email, role, password_hash, is_active"
    ).eq("email", email.strip().lower()).execute()
    if not result.data:
        return None
    return _tenant_user(result.data[0])


def find_primary_tenant_user(tenant_id: str) -> TenantUserRecord | None:
    """Oldest admin or editor of the tenant."""
    result = client().table("organizer_users").select(
        "id, organizer_id, email, role, password_hash, is_active, created_at"
    ).eq("organizer_id", tenant_id).order("created_at").execute()
    for row in result.data or []:
        if row.get("role") in ("admin", "editor"):
            return _tenant_user(row)
    return None
