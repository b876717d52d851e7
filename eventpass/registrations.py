"""Registration reads and writes used by check-in and bulk admin routes."""
from __future__ import annotations

from datetime import datetime, timezone

from eventpass import directory

REGISTRATION_FIELDS = "id, event_id, email, qr_token, paid, attended, scanned_at, scanned_by"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def find_by_qr_token(event_id: str, qr_token: str) -> dict | None:
    result = directory.client().table("registrations").select(REGISTRATION_FIELDS).eq(
        "event_id", event_id
    ).eq("qr_token", qr_token).execute()
    return result.data[0] if result.data else None


def find_by_id(event_id: str, registration_id: str) -> dict | None:
    result = directory.client().table("registrations").select(REGISTRATION_FIELDS).eq(
        "event_id", event_id
    ).eq("id", registration_id).execute()
    return result.data[0] if result.data else None


def mark_attended(registration_id: str, scanned_by: str) -> dict:
    result = directory.client().table("registrations").update({
        "attended": True,
        "scanned_at": _now_iso(),
        "scanned_by": scanned_by,
    }).eq("id", registration_id).execute()
    return result.data[0]


def attendance_stats(event_id: str) -> dict:
    result = directory.client().table("registrations").select("id, attended").eq(
        "event_id", event_id
    ).execute()
    rows = result.data or []
    attended = sum(1 for row in rows if row.get("attended"))
    return {"total": len(rows), "attended": attended, "remaining": len(rows) - attended}


def bulk_update(event_id: str, *, tokens: list[str], emails: list[str], changes: dict) -> list[dict]:
    """Apply ``changes`` to registrations matched by QR token or email."""
    wanted_tokens = {t.strip() for t in tokens if t.strip()}
    wanted_emails = {e.strip().lower() for e in emails if e.strip()}
    if not wanted_tokens and not wanted_emails:
        return []

    result = directory.client().table("registrations").select(REGISTRATION_FIELDS).eq(
        "event_id", event_id
    ).execute()
    matched = [
        row for row in result.data or []
        if row.get("qr_token") in wanted_tokens or (row.get("email") or "").lower() in wanted_emails
    ]

    updated = []
    for row in matched:
        response = directory.client().table("registrations").update(changes).eq(
            "id", row["id"]
        ).eq("event_id", event_id).execute()
        updated.extend(response.data or [])
    return updated
