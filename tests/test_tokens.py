from datetime import datetime, timedelta, timezone

import jwt
import pytest

from emergency_id.errors import TokenExpired, TokenInvalid
from emergency_id.tokens import TokenService

SECRET = "unit-test-secret-with-enough-length-for-hs256"


@pytest.fixture
def tokens():
    return TokenService(SECRET, timedelta(days=7))


def test_issue_then_verify(tokens):
    token = tokens.issue("usr_1", "doctor", "doc@x.com")
    claims = tokens.verify(token)
    assert claims.user_id == "usr_1"
    assert claims.role == "doctor"
    assert claims.email == "doc@x.com"
    assert claims.expires_at - claims.issued_at == timedelta(days=7)


def test_claims_are_readable_without_secret(tokens):
    token = tokens.issue("usr_1", "patient", "a@x.com")
    payload = jwt.decode(token, options={"verify_signature": False})
    assert payload["sub"] == "usr_1"
    assert payload["role"] == "patient"


def test_expired_token(tokens):
    issued = datetime.now(timezone.utc) - timedelta(days=8)
    token = tokens.issue("usr_1", "patient", "a@x.com", now=issued)
    with pytest.raises(TokenExpired):
        tokens.verify(token)


def test_wrong_secret(tokens):
    other = TokenService("another-secret-with-enough-length-for-hs256", timedelta(days=7))
    with pytest.raises(TokenInvalid):
        tokens.verify(other.issue("usr_1", "patient", "a@x.com"))


def test_tampered_role(tokens):
    token = tokens.issue("usr_1", "patient", "a@x.com")
    header, payload, signature = token.split(".")
    forged = jwt.encode({"sub": "usr_1", "role": "doctor", "email": "a@x.com",
                         "iat": 0, "exp": 4102444800}, "guess", algorithm="HS256")
    with pytest.raises(TokenInvalid):
        tokens.verify(".".join([header, forged.split(".")[1], signature]))


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed(tokens, token):
    with pytest.raises(TokenInvalid):
        tokens.verify(token)


def test_unknown_role_rejected(tokens):
    now = datetime.now(timezone.utc)
    token = jwt.encode({"sub": "usr_1", "role": "admin", "email": "a@x.com",
                        "iat": now, "exp": now + timedelta(hours=1)}, SECRET, algorithm="HS256")
    with pytest.raises(TokenInvalid):
        tokens.verify(token)


def test_missing_subject_rejected(tokens):
    now = datetime.now(timezone.utc)
    token = jwt.encode({"role": "patient", "email": "a@x.com",
                        "iat": now, "exp": now + timedelta(hours=1)}, SECRET, algorithm="HS256")
    with pytest.raises(TokenInvalid):
        tokens.verify(token)
