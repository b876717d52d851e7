from pydantic import BaseModel, Field, field_validator


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class StationCreate(BaseModel):
    name: str = Field(min_length=1)
    code: str = Field(min_length=1)
    secret: str = Field(min_length=8)

    @field_validator("name", "code", mode="before")
    @classmethod
    def _strip_whitespace(cls, value: str) -> str:
        return _strip(value)


class StationUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    active: bool | None = None
    secret: str | None = Field(default=None, min_length=8)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_whitespace(cls, value: str | None) -> str | None:
        return _strip(value)


class StationResponse(BaseModel):
    id: str
    event_id: str
    name: str
    code: str | None
    active: bool


class ScannerLoginRequest(BaseModel):
    event_slug: str
    code: str
    secret: str


class StationSessionResponse(BaseModel):
    ok: bool = True
    station: StationResponse
    event_slug: str | None = None
    event_title: str | None = None
