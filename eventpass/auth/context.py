from dataclasses import dataclass
from eventpass.auth.permissions import normalize_role, permissions_for_role


@dataclass
class AdminContext:
    """Identity for a request carrying a valid admin or tenant session."""
    username: str
    role: str
    tenant_id: str | None = None
    expires_at: int | None = None
    impersonating: bool = False
    tenant_name: str | None = None
    permissions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        self.role = normalize_role(self.role)
        if not self.permissions:
            self.permissions = tuple(sorted(permissions_for_role(self.role)))

    @property
    def is_superadmin(self) -> bool:
        return self.role == "superadmin"


@dataclass
class EventScope:
    """Resolved tenant/event context for an authorized request."""
    event_id: str
    tenant_id: str
    mode: str  # "tenant_key" | "admin_key" | "superadmin" | "session"
    slug: str | None = None
    admin: AdminContext | None = None

    def allows(self, permission_key: str) -> bool:
        # Key holders act with full tenant authority.
        if self.admin is None:
            return True
        return permission_key in self.admin.permissions


@dataclass
class StationContext:
    """A signed-in check-in station, cross-checked against its live record."""
    station_id: str
    event_id: str
    name: str
