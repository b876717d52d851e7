import json
import logging

import pytest

from eventpass.auth import tokens
from eventpass.auth.tokens import (
    DEV_FALLBACK_SECRET,
    BadSignature,
    InvalidPayload,
    MalformedToken,
    MisconfiguredSecret,
    b64url_decode,
    b64url_encode,
    decode_token,
    encode_token,
    resolve_signing_secret,
)

SECRET = "codec-test-secret"


def _signed(raw_payload: bytes) -> str:
    encoded = b64url_encode(raw_payload)
    return f"{encoded}.{b64url_encode(tokens._mac(encoded, SECRET))}"


def test_round_trip_preserves_payload():
    payloads = [
        {"u": "alice", "k": "admin", "iat": 1000, "exp": 44200},
        {"stationId": "st-1", "eventId": "ev-1", "iat": 5, "exp": 65},
        {"role": "superadmin", "oid": None, "name": "Zoë ✓", "ratio": 1.5},
        {},
    ]
    for payload in payloads:
        assert decode_token(encode_token(payload, SECRET), SECRET) == payload


def test_token_is_two_unpadded_url_safe_segments():
    token = encode_token({"u": "alice", "blob": "??>>~~" * 10}, SECRET)
    parts = token.split(".")

    assert len(parts) == 2
    assert "=" not in token
    assert "+" not in token and "/" not in token
    assert json.loads(b64url_decode(parts[0])) == {"u": "alice", "blob": "??>>~~" * 10}


def test_flipping_any_payload_bit_breaks_signature():
    token = encode_token({"u": "alice", "k": "admin", "iat": 1, "exp": 2}, SECRET)
    encoded, signature = token.split(".")
    raw = b64url_decode(encoded)

    for index in range(len(raw)):
        for bit in range(8):
            mutated = bytearray(raw)
            mutated[index] ^= 1 << bit
            forged = f"{b64url_encode(bytes(mutated))}.{signature}"
            with pytest.raises(BadSignature):
                decode_token(forged, SECRET)


def test_tampered_signature_and_wrong_secret_are_rejected():
    token = encode_token({"u": "alice"}, SECRET)
    encoded, signature = token.split(".")
    swapped = ("B" if signature[0] == "A" else "A") + signature[1:]

    with pytest.raises(BadSignature):
        decode_token(f"{encoded}.{swapped}", SECRET)
    with pytest.raises(BadSignature):
        decode_token(token, "another-secret")
    with pytest.raises(BadSignature):
        decode_token(f"{encoded}.short", SECRET)


@pytest.mark.parametrize("token", ["", "abc", "a.b.c", ".sig", "payload.", "."])
def test_malformed_tokens(token):
    with pytest.raises(MalformedToken):
        decode_token(token, SECRET)


def test_non_object_and_non_json_payloads_are_invalid():
    with pytest.raises(InvalidPayload):
        decode_token(_signed(b"[1, 2, 3]"), SECRET)
    with pytest.raises(InvalidPayload):
        decode_token(_signed(b"not json"), SECRET)
    with pytest.raises(InvalidPayload):
        decode_token(_signed(b"\xff\xfe"), SECRET)


def test_token_errors_share_a_base_class():
    for error in (MalformedToken, BadSignature, InvalidPayload):
        assert issubclass(error, tokens.TokenError)


def test_missing_secret_refuses_production():
    with pytest.raises(MisconfiguredSecret):
        resolve_signing_secret(None, environment="production")
    with pytest.raises(MisconfiguredSecret):
        resolve_signing_secret("   ", environment="Production")


def test_missing_secret_falls_back_in_development_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="eventpass"):
        secret = resolve_signing_secret(None, environment="development")

    assert secret == DEV_FALLBACK_SECRET
    assert any("insecure_signing_secret" in record.getMessage() for record in caplog.records)


def test_configured_secret_is_trimmed():
    assert resolve_signing_secret("  s3cret \n", environment="production") == "s3cret"
