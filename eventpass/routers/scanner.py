import logging
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from eventpass import directory, registrations
from eventpass.auth import StationContext, get_current_station, issue_scanner_session
from eventpass.auth.cookies import SCANNER_COOKIE, clear_session_cookie, set_session_cookie
from eventpass.auth.hashing import hash_secret, needs_rehash, verify_secret
from eventpass.auth.tickets import is_likely_jwt, verify_ticket
from eventpass.config import settings
from eventpass.models.registrations import CheckinRequest, CheckinResponse
from eventpass.models.stations import ScannerLoginRequest, StationResponse, StationSessionResponse
from eventpass.observability import log_event

router = APIRouter(prefix="/api/scanner", tags=["scanner"])


def _invalid_station(request: Request, reason: str, **fields) -> HTTPException:
    log_event(
        "station_sign_in_failed",
        level=logging.WARNING,
        request_id=getattr(request.state, "request_id", None),
        reason=reason,
        **fields,
    )
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid station credentials")


@router.get("/session", response_model=StationSessionResponse)
async def get_station_session(station: StationContext = Depends(get_current_station)):
    """Who is this scanner signed in as."""
    record = directory.find_station(station.station_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return StationSessionResponse(
        station=StationResponse(
            id=record.id,
            event_id=record.event_id,
            name=record.name,
            code=record.code,
            active=record.active,
        ),
    )


@router.post("/session", response_model=StationSessionResponse)
async def create_station_session(data: ScannerLoginRequest, request: Request, response: Response):
    """Sign a station in with its code and secret for one event."""
    slug, code = data.event_slug.strip(), data.code.strip()
    if not slug or not code or not data.secret:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing fields")

    event = directory.find_event_by_identifier(slug)
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")

    station = directory.find_station_by_code(event.id, code)
    if station is None or not station.active:
        raise _invalid_station(request, "unknown_or_inactive", event_id=event.id, code=code)
    if not verify_secret(data.secret, station.secret_hash):
        raise _invalid_station(request, "bad_secret", station_id=station.id)

    if needs_rehash(station.secret_hash):
        directory.update_station(station.id, event.id, {"secret_hash": hash_secret(data.secret)})
        log_event("station_secret_rehashed", station_id=station.id)

    token = issue_scanner_session(station.id, event.id)
    set_session_cookie(response, SCANNER_COOKIE, token, settings.scanner_session_ttl_seconds)
    return StationSessionResponse(
        station=StationResponse(
            id=station.id,
            event_id=event.id,
            name=station.name,
            code=station.code,
            active=station.active,
        ),
        event_slug=event.slug,
        event_title=event.title,
    )


@router.delete("/session")
async def delete_station_session(response: Response):
    clear_session_cookie(response, SCANNER_COOKIE)
    return {"ok": True}


@router.post("/checkin", response_model=CheckinResponse)
async def checkin(data: CheckinRequest, station: StationContext = Depends(get_current_station)):
    """Mark the scanned ticket's registration as attended."""
    token = data.token.strip()
    if not token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing token")

    registration = None
    if is_likely_jwt(token):
        ticket = verify_ticket(token)
        if ticket and ticket["eventId"] == station.event_id:
            registration = registrations.find_by_id(station.event_id, ticket["sub"])
    else:
        registration = registrations.find_by_qr_token(station.event_id, token)

    if registration is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Registration not found")

    updated = registrations.mark_attended(registration["id"], station.name)
    return CheckinResponse(registration=updated)
