"""Tests for password hashing and token issue/verify."""
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.shop.security import (
    TokenExpired,
    TokenInvalidSignature,
    TokenMalformed,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

SECRET = "test-secret"


def _token(**kwargs):
    params = dict(secret=SECRET, user_id=7, email="a@x.com", name="A", role="user")
    params.update(kwargs)
    return create_access_token(**params)


def test_hash_is_salted_and_verifies():
    h1 = hash_password("p1")
    h2 = hash_password("p1")
    assert h1 != h2
    assert "p1" not in h1
    assert verify_password("p1", h1)
    assert verify_password("p1", h2)


def test_verify_wrong_password_returns_false():
    h = hash_password("p1")
    assert verify_password("p2", h) is False
    assert verify_password("", h) is False


def test_verify_garbage_hash_returns_false():
    assert verify_password("p1", "not-a-hash") is False
    assert verify_password("p1", "") is False


def test_hash_blank_password_raises():
    with pytest.raises(ValueError):
        hash_password("")


def test_token_roundtrip_claims():
    claims = decode_access_token(token=_token(role="admin"), secret=SECRET)
    assert claims.id == 7
    assert claims.email == "a@x.com"
    assert claims.name == "A"
    assert claims.role == "admin"
    assert claims.is_admin
    assert claims.expires_at - claims.issued_at == timedelta(days=7)


def test_token_is_url_safe():
    token = _token()
    assert all(c.isalnum() or c in "-_." for c in token)


def test_token_valid_just_before_expiry():
    issued = datetime.now(timezone.utc) - timedelta(days=7) + timedelta(minutes=1)
    claims = decode_access_token(token=_token(now=issued), secret=SECRET)
    assert claims.id == 7


def test_token_expired_at_seven_days():
    issued = datetime.now(timezone.utc) - timedelta(days=7)
    with pytest.raises(TokenExpired):
        decode_access_token(token=_token(now=issued), secret=SECRET)


def test_token_expired_long_ago():
    issued = datetime.now(timezone.utc) - timedelta(days=30)
    with pytest.raises(TokenExpired) as exc:
        decode_access_token(token=_token(now=issued), secret=SECRET)
    assert exc.value.message == "token expired"
    assert exc.value.status_code == 401


def test_tampered_signature_rejected():
    token = _token()
    header, payload, sig = token.split(".")
    c = sig[10]
    tampered_sig = sig[:10] + ("A" if c != "A" else "B") + sig[11:]
    with pytest.raises(TokenInvalidSignature):
        decode_access_token(token=".".join([header, payload, tampered_sig]), secret=SECRET)


def test_wrong_secret_rejected_as_invalid_signature():
    with pytest.raises(TokenInvalidSignature) as exc:
        decode_access_token(token=_token(), secret="other-secret")
    assert exc.value.message == "invalid token"


def test_tampered_payload_rejected():
    token = _token(role="user")
    forged = jwt.encode({"sub": "7", "role": "admin", "iat": 0, "exp": 9999999999}, "x", algorithm="HS256")
    header, _, sig = token.split(".")
    _, forged_payload, _ = forged.split(".")
    with pytest.raises(TokenInvalidSignature):
        decode_access_token(token=".".join([header, forged_payload, sig]), secret=SECRET)


@pytest.mark.parametrize("garbage", ["garbage", "a.b", "a.b.c", "...", "Zm9v.YmFy.YmF6"])
def test_malformed_token(garbage):
    with pytest.raises(TokenMalformed) as exc:
        decode_access_token(token=garbage, secret=SECRET)
    assert exc.value.message == "invalid token"


def test_missing_required_claim_is_malformed():
    token = jwt.encode({"sub": "7", "exp": 9999999999, "iat": 0}, SECRET, algorithm="HS256")
    with pytest.raises(TokenMalformed):
        decode_access_token(token=token, secret=SECRET)


def test_unknown_role_is_malformed():
    now = int(datetime.now(timezone.utc).timestamp())
    token = jwt.encode({"sub": "7", "role": "root", "iat": now, "exp": now + 60}, SECRET, algorithm="HS256")
    with pytest.raises(TokenMalformed):
        decode_access_token(token=token, secret=SECRET)


def test_issue_rejects_unknown_role_and_blank_secret():
    with pytest.raises(ValueError):
        _token(role="root")
    with pytest.raises(ValueError):
        _token(secret="")
