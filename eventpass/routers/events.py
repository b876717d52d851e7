from fastapi import APIRouter, Depends, HTTPException, status
from eventpass import directory, registrations
from eventpass.auth import EventScope, require_event_admin, require_event_scope, require_scope_permission
from eventpass.auth.hashing import hash_secret
from eventpass.auth.permissions import REGISTRATIONS_WRITE, STATIONS_MANAGE
from eventpass.models.registrations import AttendanceResponse, BulkRegistrationResponse, BulkRegistrationUpdate
from eventpass.models.stations import StationCreate, StationResponse, StationUpdate

router = APIRouter(tags=["events"])


def _station_response(station: directory.StationRecord) -> StationResponse:
    return StationResponse(
        id=station.id,
        event_id=station.event_id,
        name=station.name,
        code=station.code,
        active=station.active,
    )


@router.get("/api/events/{slug}/attendance", response_model=AttendanceResponse)
async def get_attendance(scope: EventScope = Depends(require_event_scope)):
    """Attendance counts for an event."""
    stats = registrations.attendance_stats(scope.event_id)
    return AttendanceResponse(event_id=scope.event_id, mode=scope.mode, **stats)


@router.patch("/api/admin/events/{slug}/registration/bulk", response_model=BulkRegistrationResponse)
async def bulk_update_registrations(
    data: BulkRegistrationUpdate,
    scope: EventScope = Depends(require_event_admin),
):
    """Mark many registrations paid or attended at once."""
    if not scope.allows(REGISTRATIONS_WRITE):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    changes: dict = {}
    if data.paid is not None:
        changes["paid"] = data.paid
    if data.attended is not None:
        changes["attended"] = data.attended
        if data.attended:
            changes["scanned_by"] = (data.station or "bulk").strip() or "bulk"
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    rows = registrations.bulk_update(scope.event_id, tokens=data.tokens, emails=data.emails, changes=changes)
    return BulkRegistrationResponse(count=len(rows), rows=rows)


@router.get("/api/admin/events/{slug}/stations", response_model=list[StationResponse])
async def list_stations(scope: EventScope = Depends(require_event_admin)):
    return [_station_response(station) for station in directory.list_stations(scope.event_id)]


@router.post(
    "/api/admin/events/{slug}/stations",
    response_model=StationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_station(
    data: StationCreate,
    scope: EventScope = Depends(require_scope_permission(STATIONS_MANAGE)),
):
    """Create a check-in station. The secret is stored hashed."""
    code = data.code
    if directory.find_station_by_code(scope.event_id, code):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Station code already in use")
    station = directory.insert_station(scope.event_id, data.name, code, hash_secret(data.secret))
    return _station_response(station)


@router.patch("/api/admin/events/{slug}/stations/{station_id}", response_model=StationResponse)
async def update_station(
    station_id: str,
    data: StationUpdate,
    scope: EventScope = Depends(require_scope_permission(STATIONS_MANAGE)),
):
    """Rename, deactivate or rotate the secret of a station."""
    fields = data.model_dump(exclude_unset=True, exclude={"secret"})
    if data.secret is not None:
        fields["secret_hash"] = hash_secret(data.secret)
    if not fields:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    station = directory.update_station(station_id, scope.event_id, fields)
    if station is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Station not found")
    return _station_response(station)
