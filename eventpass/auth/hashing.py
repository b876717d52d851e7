"""Station secret hashing.

Stored hashes are self-describing. ``parse_stored_hash`` turns a stored string
into one of the scheme variants below and is the only place that inspects
prefixes. New hashes are always produced with the current scrypt scheme.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import os
from dataclasses import dataclass

import bcrypt as bcrypt_lib

from eventpass.auth.tokens import b64url_decode

SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_DKLEN = 64
SALT_BYTES = 16

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")

# Format written by the first release: "scrypt2$" + b64url(0x01 || salt16 || dk32).
SCRYPT2_N = 1 << 15
SCRYPT2_SALT_BYTES = 16
SCRYPT2_DKLEN = 32
SCRYPT2_VERSION = 1

_MAXMEM = 64 * 1024 * 1024
# Largest cost parameters a stored scrypt$ hash may name.
_MAX_N = 1 << 32
_MAX_RP = 1 << 30


@dataclass(frozen=True)
class ScryptHash:
    n: int
    r: int
    p: int
    salt: bytes
    digest: bytes


@dataclass(frozen=True)
class Scrypt2Hash:
    salt: bytes
    digest: bytes


@dataclass(frozen=True)
class BcryptHash:
    value: str


StoredHash = ScryptHash | Scrypt2Hash | BcryptHash


def _scrypt(secret: str, salt: bytes, *, n: int, r: int, p: int, dklen: int) -> bytes:
    return hashlib.scrypt(secret.encode("utf-8"), salt=salt, n=n, r=r, p=p, dklen=dklen, maxmem=_MAXMEM)


def hash_secret(secret: str) -> str:
    """Hash a station secret with scrypt."""
    salt = os.urandom(SALT_BYTES)
    digest = _scrypt(secret, salt, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P, dklen=SCRYPT_DKLEN)
    salt_b64 = base64.b64encode(salt).decode("ascii")
    return f"scrypt${SCRYPT_N}${SCRYPT_R}${SCRYPT_P}${salt_b64}${digest.hex()}"


def _parse_scrypt(stored: str) -> ScryptHash | None:
    parts = stored.split("$")
    if len(parts) != 6 or parts[0] != "scrypt":
        return None
    try:
        n, r, p = int(parts[1]), int(parts[2]), int(parts[3])
        salt = base64.b64decode(parts[4], validate=True)
        digest = bytes.fromhex(parts[5])
    except (ValueError, binascii.Error):
        return None
    # n must be a power of two greater than one; r * p is capped by RFC 7914
    if n < 2 or n & (n - 1) or n > _MAX_N or r < 1 or p < 1 or r * p >= _MAX_RP:
        return None
    if not salt or not digest:
        return None
    return ScryptHash(n=n, r=r, p=p, salt=salt, digest=digest)


def _parse_scrypt2(stored: str) -> Scrypt2Hash | None:
    try:
        raw = b64url_decode(stored[len("scrypt2$"):])
    except (ValueError, binascii.Error):
        return None
    if len(raw) != 1 + SCRYPT2_SALT_BYTES + SCRYPT2_DKLEN or raw[0] != SCRYPT2_VERSION:
        return None
    return Scrypt2Hash(
        salt=raw[1:1 + SCRYPT2_SALT_BYTES],
        digest=raw[1 + SCRYPT2_SALT_BYTES:],
    )


def parse_stored_hash(stored: str | None) -> StoredHash | None:
    if not stored or not isinstance(stored, str):
        return None
    if stored.startswith(BCRYPT_PREFIXES):
        return BcryptHash(value=stored)
    if stored.startswith("scrypt2$"):
        return _parse_scrypt2(stored)
    if stored.startswith("scrypt$"):
        return _parse_scrypt(stored)
    return None


def _digests_match(derived: bytes, expected: bytes) -> bool:
    if len(derived) != len(expected):
        return False
    return hmac.compare_digest(derived, expected)


def verify_secret(secret: str, stored: str | None) -> bool:
    """Check ``secret`` against a stored hash. Never raises."""
    parsed = parse_stored_hash(stored)
    if parsed is None or not isinstance(secret, str):
        return False

    try:
        if isinstance(parsed, BcryptHash):
            return bcrypt_lib.checkpw(secret.encode("utf-8"), parsed.value.encode("utf-8"))
        if isinstance(parsed, Scrypt2Hash):
            derived = _scrypt(secret, parsed.salt, n=SCRYPT2_N, r=8, p=1, dklen=SCRYPT2_DKLEN)
            return _digests_match(derived, parsed.digest)
        derived = _scrypt(secret, parsed.salt, n=parsed.n, r=parsed.r, p=parsed.p, dklen=len(parsed.digest))
        return _digests_match(derived, parsed.digest)
    except (ValueError, TypeError, OverflowError, MemoryError):
        return False


def needs_rehash(stored: str | None) -> bool:
    """True when a stored hash uses a legacy scheme or weaker scrypt parameters."""
    parsed = parse_stored_hash(stored)
    if isinstance(parsed, ScryptHash):
        return (parsed.n, parsed.r, parsed.p, len(parsed.digest)) != (
            SCRYPT_N, SCRYPT_R, SCRYPT_P, SCRYPT_DKLEN,
        )
    return parsed is not None
