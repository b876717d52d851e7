from pydantic import BaseModel


class LoginRequest(BaseModel):
    identifier: str
    password: str


class LoginResponse(BaseModel):
    ok: bool = True
    username: str
    role: str
    tenant_id: str | None = None
    expires_at: int


class MeResponse(BaseModel):
    username: str
    role: str
    tenant_id: str | None
    impersonating: bool
    tenant_name: str | None = None
    expires_at: int | None
    permissions: list[str]


class AdminKeyRequest(BaseModel):
    key: str


class AdminKeyStatus(BaseModel):
    ok: bool
