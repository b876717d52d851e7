from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from eventpass import directory
from eventpass.auth import AdminContext, get_current_super_admin, issue_admin_session
from eventpass.auth.cookies import ADMIN_COOKIE, PREV_ADMIN_COOKIE, clear_session_cookie, set_session_cookie
from eventpass.auth.gate import keys_match
from eventpass.auth.impersonation import (
    BEGIN_DEFAULT_REDIRECT,
    begin_impersonation,
    exit_impersonation,
    issue_impersonation_session,
    safe_redirect,
)
from eventpass.auth.permissions import SUPERADMIN
from eventpass.auth.sessions import tenant_session, verify_admin_session
from eventpass.config import settings
from eventpass.models.auth import AdminKeyRequest, AdminKeyStatus
from eventpass.models.tenants import TenantResponse, TenantStatusUpdate
from eventpass.observability import log_event, metrics_snapshot

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _tenant_response(tenant: directory.TenantRecord) -> TenantResponse:
    return TenantResponse(id=tenant.id, name=tenant.name, status=tenant.status)


# --- Key-based admin session ---

@router.get("/session", response_model=AdminKeyStatus)
async def get_admin_key_session(request: Request):
    """Report whether the session cookie holds a valid superadmin session."""
    session = tenant_session(verify_admin_session(request.cookies.get(ADMIN_COOKIE)))
    return AdminKeyStatus(ok=bool(session and session.is_superadmin))


@router.post("/session", response_model=AdminKeyStatus)
async def create_admin_key_session(data: AdminKeyRequest, response: Response):
    """Exchange the platform admin key for a long-lived superadmin session."""
    if not data.key.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing key")
    if not keys_match(data.key, settings.admin_key):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    ttl = settings.admin_key_session_ttl_seconds
    token = issue_admin_session("admin-key", role=SUPERADMIN, ttl=ttl)
    set_session_cookie(response, ADMIN_COOKIE, token, ttl)
    return AdminKeyStatus(ok=True)


@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
async def delete_admin_key_session():
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_session_cookie(response, ADMIN_COOKIE)
    return response


# --- Tenants ---

@router.get("/tenants", response_model=list[TenantResponse])
async def list_tenants(admin: AdminContext = Depends(get_current_super_admin)):
    """List every tenant on the platform."""
    return [_tenant_response(tenant) for tenant in directory.list_tenants()]


@router.post("/tenants/{tenant_id}/status", response_model=TenantResponse)
async def set_tenant_status(
    tenant_id: str,
    data: TenantStatusUpdate,
    admin: AdminContext = Depends(get_current_super_admin),
):
    """Approve or suspend a tenant. Suspension deactivates its staff."""
    tenant = directory.update_tenant_status(tenant_id, data.status)
    if tenant is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")
    log_event("tenant_status_changed", tenant_id=tenant_id, status=data.status, by=admin.username)
    return _tenant_response(tenant)


# --- Impersonation ---

@router.post("/tenants/{tenant_id}/impersonate")
async def impersonate_tenant(
    tenant_id: str,
    request: Request,
    redirect: str | None = None,
    admin: AdminContext = Depends(get_current_super_admin),
):
    """Assume a fresh admin session for the tenant, keeping a way back."""
    tenant_id = tenant_id.strip()
    if not tenant_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing tenant id")

    tenant = directory.find_tenant(tenant_id)
    if tenant is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")

    response = RedirectResponse(
        safe_redirect(redirect, BEGIN_DEFAULT_REDIRECT),
        status_code=status.HTTP_303_SEE_OTHER,
    )
    begin_impersonation(
        response,
        current_token=request.cookies.get(ADMIN_COOKIE),
        previous_token=request.cookies.get(PREV_ADMIN_COOKIE),
        target_token=issue_impersonation_session(tenant, directory.find_primary_tenant_user(tenant.id)),
    )
    log_event(
        "impersonation_started",
        request_id=getattr(request.state, "request_id", None),
        username=admin.username,
        tenant_id=tenant.id,
    )
    return response


@router.api_route("/impersonate/exit", methods=["GET", "POST"])
async def exit_impersonation_route(request: Request, redirect: str | None = None):
    """Restore the superadmin session parked by impersonate."""
    return exit_impersonation(
        current_token=request.cookies.get(ADMIN_COOKIE),
        previous_token=request.cookies.get(PREV_ADMIN_COOKIE),
        redirect=redirect,
    )


# --- Observability ---

@router.get("/metrics")
async def get_metrics(admin: AdminContext = Depends(get_current_super_admin)):
    """Current in-process auth counters."""
    return {"counters": metrics_snapshot()}
