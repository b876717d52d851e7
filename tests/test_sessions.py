import pytest

from eventpass.auth.sessions import (
    Rejected,
    Verified,
    issue_admin_session,
    issue_scanner_session,
    loose_admin_session,
    tenant_session,
    verify_admin_session,
    verify_scanner_session,
)
from eventpass.auth.tokens import decode_token, encode_token

SECRET = "session-test-secret"
TWELVE_HOURS = 43200


def test_admin_session_expiry_example():
    token = issue_admin_session("alice", now=1000, ttl=TWELVE_HOURS, secret=SECRET)

    before = verify_admin_session(token, now=1000 + 43199, secret=SECRET)
    after = verify_admin_session(token, now=1000 + 43201, secret=SECRET)

    assert isinstance(before, Verified)
    assert before.ok is True
    assert before.session.username == "alice"
    assert before.session.issued_at == 1000
    assert before.session.expires_at == 1000 + TWELVE_HOURS
    assert after == Rejected("expired")
    assert after.ok is False


def test_expiry_boundary_is_consistent():
    token = issue_admin_session("alice", now=5000, ttl=100, secret=SECRET)
    exp = 5100

    assert verify_admin_session(token, now=exp - 1, secret=SECRET).ok is True
    assert verify_admin_session(token, now=exp, secret=SECRET) == Rejected("expired")
    assert verify_admin_session(token, now=exp + 1, secret=SECRET) == Rejected("expired")


def test_plain_admin_payload_shape():
    token = issue_admin_session("alice", now=1000, ttl=TWELVE_HOURS, secret=SECRET)

    assert decode_token(token, SECRET) == {"u": "alice", "k": "admin", "iat": 1000, "exp": 44200}


def test_tenant_session_carries_role_and_tenant():
    token = issue_admin_session("ops@org-a.test", role="editor", tenant_id="org-a", now=1000, secret=SECRET)
    result = verify_admin_session(token, now=1001, secret=SECRET)

    assert result.session.role == "editor"
    assert result.session.tenant_id == "org-a"
    assert tenant_session(result) == result.session


def test_tenant_roles_require_a_tenant_at_issue():
    with pytest.raises(ValueError):
        issue_admin_session("bob", role="admin", secret=SECRET)


@pytest.mark.parametrize(
    "token, reason",
    [
        (None, "missing"),
        ("", "missing"),
        ("not-a-token", "format"),
        ("a.b.c", "format"),
    ],
)
def test_structural_rejections(token, reason):
    assert verify_admin_session(token, now=1, secret=SECRET) == Rejected(reason)


def test_signature_and_kind_rejections():
    foreign = issue_admin_session("alice", now=1000, secret="someone-else")
    scanner_kind = encode_token({"u": "alice", "k": "scanner", "iat": 1000, "exp": 9000}, SECRET)

    assert verify_admin_session(foreign, now=1001, secret=SECRET) == Rejected("bad-signature")
    assert verify_admin_session(scanner_kind, now=1001, secret=SECRET) == Rejected("not-admin")


@pytest.mark.parametrize(
    "payload",
    [
        {"k": "admin", "iat": 1000, "exp": 9000},
        {"u": "  ", "k": "admin", "iat": 1000, "exp": 9000},
        {"u": "alice", "k": "admin", "iat": 1000, "exp": "9000"},
        {"u": "alice", "k": "admin", "iat": 1000},
        {"u": "alice", "k": "admin", "iat": True, "exp": 9000},
        {"u": "alice", "k": "admin", "iat": 1000, "exp": 9000, "role": "root"},
        {"u": "alice", "k": "admin", "iat": 1000, "exp": 9000, "oid": 42},
    ],
)
def test_invalid_payloads(payload):
    token = encode_token(payload, SECRET)

    assert verify_admin_session(token, now=1001, secret=SECRET) == Rejected("invalid-payload")


def test_strict_and_loose_accessors():
    no_tenant = encode_token({"u": "bob", "k": "admin", "role": "admin", "iat": 1000, "exp": 9000}, SECRET)
    scanner_role = encode_token(
        {"u": "gate", "k": "admin", "role": "scanner", "oid": "org-a", "iat": 1000, "exp": 9000}, SECRET
    )
    superadmin = issue_admin_session("root", role="superadmin", now=1000, secret=SECRET)

    no_tenant_result = verify_admin_session(no_tenant, now=1001, secret=SECRET)
    assert tenant_session(no_tenant_result) is None
    assert loose_admin_session(no_tenant_result).username == "bob"

    scanner_result = verify_admin_session(scanner_role, now=1001, secret=SECRET)
    assert tenant_session(scanner_result) is None
    assert loose_admin_session(scanner_result) is None

    super_result = verify_admin_session(superadmin, now=1001, secret=SECRET)
    assert tenant_session(super_result).is_superadmin is True
    assert tenant_session(super_result).tenant_id is None

    assert tenant_session(Rejected("expired")) is None


def test_scanner_role_is_rejected_in_any_casing():
    for role in ("Scanner", "SCANNER", " scanner "):
        token = encode_token(
            {"u": "gate", "k": "admin", "role": role, "oid": "org-a", "iat": 1000, "exp": 9000}, SECRET
        )
        result = verify_admin_session(token, now=1001, secret=SECRET)

        assert result.ok is True
        assert loose_admin_session(result) is None
        assert tenant_session(result) is None


def test_impersonation_markers_round_trip():
    token = issue_admin_session(
        "owner@org-a.test",
        role="admin",
        tenant_id="org-a",
        now=1000,
        impersonation={"tenant_name": "Org A", "tenant_status": "active"},
        secret=SECRET,
    )
    session = verify_admin_session(token, now=1001, secret=SECRET).session

    assert session.impersonating is True
    assert session.tenant_name == "Org A"
    assert session.tenant_status == "active"


def test_scanner_session_embeds_and_enforces_expiry():
    token = issue_scanner_session("st-1", "ev-1", now=1000, ttl=60, secret=SECRET)

    assert decode_token(token, SECRET) == {"stationId": "st-1", "eventId": "ev-1", "iat": 1000, "exp": 1060}
    session = verify_scanner_session(token, now=1059, secret=SECRET)
    assert session.station_id == "st-1"
    assert session.event_id == "ev-1"
    assert verify_scanner_session(token, now=1060, secret=SECRET) is None


def test_scanner_session_normalizes_millisecond_iat():
    token = encode_token({"stationId": "st-1", "eventId": "ev-1", "iat": 1_700_000_000_123}, SECRET)
    session = verify_scanner_session(token, now=1_700_000_100, secret=SECRET)

    assert session.issued_at == 1_700_000_000
    assert session.expires_at is None


@pytest.mark.parametrize(
    "payload",
    [
        {"eventId": "ev-1", "iat": 1000, "exp": 2000},
        {"stationId": "st-1", "iat": 1000, "exp": 2000},
        {"stationId": "", "eventId": "ev-1", "iat": 1000, "exp": 2000},
        {"stationId": "st-1", "eventId": "ev-1", "iat": "1000", "exp": 2000},
        {"u": "alice", "k": "admin", "iat": 1000, "exp": 2000},
    ],
)
def test_scanner_session_structural_checks(payload):
    assert verify_scanner_session(encode_token(payload, SECRET), now=1001, secret=SECRET) is None


def test_scanner_session_rejects_garbage_without_raising():
    assert verify_scanner_session(None) is None
    assert verify_scanner_session("garbage", secret=SECRET) is None
    assert verify_scanner_session(issue_scanner_session("st-1", "ev-1", secret="other"), secret=SECRET) is None
