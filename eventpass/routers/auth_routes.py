import logging
from fastapi import APIRouter, Depends, HTTPException, Response, status
from eventpass import directory
from eventpass.auth import AdminContext, get_admin_session, issue_admin_session
from eventpass.auth.cookies import ADMIN_COOKIE, PREV_ADMIN_COOKIE, SCANNER_COOKIE, clear_session_cookie, set_session_cookie
from eventpass.auth.gate import keys_match
from eventpass.auth.hashing import verify_secret
from eventpass.auth.permissions import SUPERADMIN, TENANT_ROLES, normalize_role
from eventpass.auth.sessions import now_seconds
from eventpass.config import settings
from eventpass.models.auth import LoginRequest, LoginResponse, MeResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _env_superadmin_allowed() -> bool:
    # The shipped default password never unlocks production.
    return not (settings.is_production and settings.admin_pass == "admin123")


def _issue(response: Response, username: str, role: str, tenant_id: str | None) -> LoginResponse:
    issued_at = now_seconds()
    token = issue_admin_session(username, role=role, tenant_id=tenant_id, now=issued_at)
    set_session_cookie(response, ADMIN_COOKIE, token, settings.session_ttl_seconds)
    return LoginResponse(
        username=username,
        role=role,
        tenant_id=tenant_id,
        expires_at=issued_at + settings.session_ttl_seconds,
    )


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, response: Response):
    """Login as platform superadmin or tenant staff; sets the session cookie."""
    identifier = data.identifier.strip()
    if not identifier or not data.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing credentials")

    if (
        _env_superadmin_allowed()
        and keys_match(identifier, settings.admin_user)
        and keys_match(data.password, settings.admin_pass)
    ):
        return _issue(response, identifier, SUPERADMIN, None)

    try:
        user = directory.find_tenant_user(identifier)
        tenant = directory.find_tenant(user.tenant_id) if user else None
    except Exception as e:
        logger.error(f"Database error during login: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database connection failed: {type(e).__name__}",
        )

    if user and (tenant is None or not tenant.is_active):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Tenant not active")

    if not user or not user.is_active or not verify_secret(data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    try:
        role = normalize_role(user.role) if (user.role or "").strip() else "admin"
    except ValueError:
        role = None
    if role not in TENANT_ROLES:
        logger.warning(f"Refusing login for {user.email}: unsupported role {user.role!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    return _issue(response, user.email, role, user.tenant_id)


@router.post("/logout")
async def logout(response: Response):
    """Clear every session cookie."""
    clear_session_cookie(response, ADMIN_COOKIE)
    clear_session_cookie(response, PREV_ADMIN_COOKIE)
    clear_session_cookie(response, SCANNER_COOKIE)
    return {"ok": True}


@router.get("/me", response_model=MeResponse)
async def get_me(admin: AdminContext = Depends(get_admin_session)):
    """Get current session info."""
    return MeResponse(
        username=admin.username,
        role=admin.role,
        tenant_id=admin.tenant_id,
        impersonating=admin.impersonating,
        tenant_name=admin.tenant_name,
        expires_at=admin.expires_at,
        permissions=list(admin.permissions),
    )
