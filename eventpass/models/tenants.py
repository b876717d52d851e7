from typing import Literal
from pydantic import BaseModel

TenantStatus = Literal["pending", "active", "suspended"]


class TenantResponse(BaseModel):
    id: str
    name: str | None
    status: str | None


class TenantStatusUpdate(BaseModel):
    status: TenantStatus


class OrganizerMeResponse(BaseModel):
    ok: bool = True
    organizer: TenantResponse
