from eventpass.auth.context import AdminContext, EventScope, StationContext
from eventpass.auth.dependencies import (
    get_admin_session,
    get_current_station,
    get_current_super_admin,
    require_event_admin,
    require_event_scope,
    require_scope_permission,
)
from eventpass.auth.sessions import issue_admin_session, issue_scanner_session

__all__ = [
    "AdminContext",
    "EventScope",
    "StationContext",
    "get_admin_session",
    "get_current_station",
    "get_current_super_admin",
    "require_event_admin",
    "require_event_scope",
    "require_scope_permission",
    "issue_admin_session",
    "issue_scanner_session",
]
