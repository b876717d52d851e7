from fastapi import APIRouter, Depends, HTTPException, status
from eventpass import directory
from eventpass.auth.gate import Credentials
from eventpass.auth.dependencies import get_credentials
from eventpass.models.tenants import OrganizerMeResponse, TenantResponse

router = APIRouter(prefix="/api/organizer", tags=["organizer"])


@router.get("/me", response_model=OrganizerMeResponse)
async def get_organizer_me(credentials: Credentials = Depends(get_credentials)):
    """Identify the tenant owning the presented API key."""
    if not credentials.api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    tenant = directory.find_tenant_by_api_key(credentials.api_key)
    if tenant is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    return OrganizerMeResponse(organizer=TenantResponse(id=tenant.id, name=tenant.name, status=tenant.status))
