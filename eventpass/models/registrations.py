from datetime import datetime
from pydantic import BaseModel


class CheckinRequest(BaseModel):
    token: str


class RegistrationResponse(BaseModel):
    id: str
    email: str | None = None
    qr_token: str | None = None
    paid: bool | None = None
    attended: bool | None = None
    scanned_at: datetime | None = None
    scanned_by: str | None = None


class CheckinResponse(BaseModel):
    ok: bool = True
    registration: RegistrationResponse


class AttendanceResponse(BaseModel):
    event_id: str
    total: int
    attended: int
    remaining: int
    mode: str


class BulkRegistrationUpdate(BaseModel):
    tokens: list[str] = []
    emails: list[str] = []
    paid: bool | None = None
    attended: bool | None = None
    station: str | None = None


class BulkRegistrationResponse(BaseModel):
    ok: bool = True
    count: int
    rows: list[RegistrationResponse]
