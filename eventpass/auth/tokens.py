"""Signed, URL-safe session tokens.

A token is ``base64url(payload_json) + "." + base64url(hmac_sha256(payload_b64))``.
The MAC covers the encoded payload bytes exactly as transmitted.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
from functools import lru_cache
from typing import Any, Mapping

from eventpass.config import settings
from eventpass.observability import log_event

DEV_FALLBACK_SECRET = "dev-change-me"


class TokenError(Exception):
    """Base class for token decoding failures."""


class MalformedToken(TokenError):
    pass


class BadSignature(TokenError):
    pass


class InvalidPayload(TokenError):
    pass


class MisconfiguredSecret(RuntimeError):
    pass


def b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def b64url_decode(value: str) -> bytes:
    padded = value + "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def resolve_signing_secret(secret: str | None, *, environment: str, name: str = "SESSION_SECRET") -> str:
    """Return the configured secret, or the dev fallback outside production."""
    value = (secret or "").strip()
    if value:
        return value
    if environment.strip().lower() == "production":
        raise MisconfiguredSecret(f"{name} is required in production")
    log_event("insecure_signing_secret", level=logging.WARNING, setting=name, environment=environment)
    return DEV_FALLBACK_SECRET


@lru_cache(maxsize=1)
def signing_secret() -> str:
    return resolve_signing_secret(settings.session_secret, environment=settings.environment)


@lru_cache(maxsize=1)
def scanner_signing_secret() -> str:
    # Scanner tokens share the session secret unless a dedicated one is set.
    if (settings.scanner_session_secret or "").strip():
        return settings.scanner_session_secret.strip()
    return signing_secret()


def _mac(encoded_payload: str, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), encoded_payload.encode("utf-8"), hashlib.sha256).digest()


def encode_token(payload: Mapping[str, Any], secret: str | None = None) -> str:
    secret = secret or signing_secret()
    body = json.dumps(dict(payload), separators=(",", ":"), sort_keys=True).encode("utf-8")
    encoded = b64url_encode(body)
    return f"{encoded}.{b64url_encode(_mac(encoded, secret))}"


def decode_token(token: str, secret: str | None = None) -> dict[str, Any]:
    """Verify ``token`` and return its payload.

    Raises MalformedToken, BadSignature or InvalidPayload.
    """
    secret = secret or signing_secret()
    parts = token.split(".") if isinstance(token, str) else []
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise MalformedToken("Token must have exactly two non-empty parts")
    encoded, signature = parts

    try:
        given = b64url_decode(signature)
    except (binascii.Error, ValueError) as exc:
        raise BadSignature("Signature is not valid base64url") from exc
    expected = _mac(encoded, secret)
    if len(given) != len(expected) or not hmac.compare_digest(given, expected):
        raise BadSignature("Signature mismatch")

    try:
        payload = json.loads(b64url_decode(encoded).decode("utf-8"))
    except (binascii.Error, ValueError) as exc:
        raise InvalidPayload("Payload is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise InvalidPayload("Payload is not an object")
    return payload
