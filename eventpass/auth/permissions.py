from __future__ import annotations

from typing import Final

SUPERADMIN: Final[str] = "superadmin"

LEGACY_ROLE_ALIASES: Final[dict[str, str]] = {
    "owner": "admin",
    "staff": "editor",
}

TENANT_ROLES: Final[set[str]] = {"admin", "editor", "scanner"}
CANONICAL_ROLES: Final[set[str]] = TENANT_ROLES | {SUPERADMIN}

TENANTS_MANAGE: Final[str] = "tenants.manage"
EVENTS_READ: Final[str] = "events.read"
EVENTS_WRITE: Final[str] = "events.write"
REGISTRATIONS_WRITE: Final[str] = "registrations.write"
STATIONS_MANAGE: Final[str] = "stations.manage"
CHECKIN_WRITE: Final[str] = "checkin.write"

ROLE_PERMISSION_BUNDLES: Final[dict[str, set[str]]] = {
    SUPERADMIN: {
        TENANTS_MANAGE,
        EVENTS_READ,
        EVENTS_WRITE,
        REGISTRATIONS_WRITE,
        STATIONS_MANAGE,
        CHECKIN_WRITE,
    },
    "admin": {
        EVENTS_READ,
        EVENTS_WRITE,
        REGISTRATIONS_WRITE,
        STATIONS_MANAGE,
        CHECKIN_WRITE,
    },
    "editor": {
        EVENTS_READ,
        EVENTS_WRITE,
        REGISTRATIONS_WRITE,
        CHECKIN_WRITE,
    },
    "scanner": {
        CHECKIN_WRITE,
    },
}


def normalize_role(role: str | None) -> str:
    raw = (role or "").strip().lower()
    normalized = LEGACY_ROLE_ALIASES.get(raw, raw)
    if normalized not in CANONICAL_ROLES:
        raise ValueError(f"Unsupported role: {role}")
    return normalized


def is_known_role(role: str | None) -> bool:
    try:
        normalize_role(role)
    except ValueError:
        return False
    return True


def permissions_for_role(role: str) -> set[str]:
    return set(ROLE_PERMISSION_BUNDLES[normalize_role(role)])


def role_has_permission(role: str, permission_key: str) -> bool:
    return permission_key in permissions_for_role(role)


def is_superadmin_role(role: str | None) -> bool:
    return (role or "").strip().lower() == SUPERADMIN
