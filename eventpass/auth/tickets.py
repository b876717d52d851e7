import re
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from eventpass.config import settings

TICKET_LEEWAY_SECONDS = 30

_B64URL_SEGMENT = re.compile(r"^[A-Za-z0-9\-_]+$")


def sign_ticket(registration_id: str, event_id: str, email: str, expires_in_days: int | None = None) -> str:
    """Create a signed ticket JWT carried in the attendee's QR code."""
    days = settings.ticket_expiration_days if expires_in_days is None else expires_in_days
    now = datetime.now(timezone.utc)
    payload = {
        "sub": registration_id,
        "eventId": event_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(days=days),
    }
    return jwt.encode(payload, settings.ticket_jwt_secret, algorithm=settings.ticket_jwt_algorithm)


def verify_ticket(token: str) -> dict | None:
    """Decode and validate a ticket JWT. Returns payload or None if invalid."""
    try:
        payload = jwt.decode(
            token,
            settings.ticket_jwt_secret,
            algorithms=[settings.ticket_jwt_algorithm],
            options={"leeway": TICKET_LEEWAY_SECONDS},
        )
    except JWTError:
        return None
    if not payload.get("sub") or not payload.get("eventId"):
        return None
    return payload


def is_likely_jwt(token: str) -> bool:
    if not isinstance(token, str):
        return False
    parts = token.split(".")
    return len(parts) == 3 and all(_B64URL_SEGMENT.match(part) for part in parts)
