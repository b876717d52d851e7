from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from eventpass.auth.tokens import scanner_signing_secret, signing_secret
from eventpass.config import settings
from eventpass.routers import (
    auth_routes,
    super_admin,
    events,
    scanner,
    organizer,
)

# Refuse to boot in production without signing keys.
signing_secret()
scanner_signing_secret()

app = FastAPI(title="EventPass", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.app_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def attach_request_id(request: Request, call_next):
    request_id = (
        request.headers.get("X-Request-ID")
        or request.headers.get("X-Correlation-ID")
        or str(uuid4())
    )
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response

app.include_router(auth_routes.router)
app.include_router(super_admin.router)
app.include_router(events.router)
app.include_router(scanner.router)
app.include_router(organizer.router)


@app.get("/")
async def root():
    return {"status": "ok", "service": "eventpass"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
