"""Tests for token issuance and verification."""

import time
from datetime import UTC, datetime, timedelta

import jwt
import pytest

from conftest import TEST_SECRET
from rosterdesk.modules.auth import (
    ConfigurationError,
    ExpiredTokenError,
    MalformedTokenError,
    TokenService,
)


def test_issue_then_verify_returns_identity(tokens):
    token = tokens.issue("abc123")

    assert tokens.verify(token) == "abc123"


def test_payload_contains_id_iat_exp(tokens):
    token = tokens.issue("abc123")
    payload = jwt.decode(token, TEST_SECRET, algorithms=["HS256"])

    assert payload["id"] == "abc123"
    assert "iat" in payload
    assert "exp" in payload
    assert payload["exp"] - payload["iat"] == 30 * 24 * 3600


def test_decode_returns_claims(tokens):
    now = datetime(2026, 1, 1, tzinfo=UTC)
    token = tokens.issue("abc123", ttl=timedelta(days=36500), now=now)

    claims = tokens.decode(token)

    assert claims.id == "abc123"
    assert claims.iat == now
    assert claims.exp == now + timedelta(days=36500)


def test_verify_is_idempotent(tokens):
    token = tokens.issue("abc123")

    assert tokens.verify(token) == tokens.verify(token) == "abc123"


def test_expired_token(tokens):
    past = datetime.now(UTC) - timedelta(days=31)
    token = tokens.issue("abc123", now=past)

    with pytest.raises(ExpiredTokenError):
        tokens.verify(token)


def test_tampered_token(tokens):
    token = tokens.issue("abc123")
    header, payload, signature = token.split(".")
    replacement = "AAAA" if not signature.startswith("AAAA") else "BBBB"
    tampered = f"{header}.{payload}.{replacement}{signature[4:]}"

    with pytest.raises(MalformedTokenError):
        tokens.verify(tampered)


def test_token_signed_with_other_secret(tokens):
    other = TokenService("another_secret").issue("abc123")

    with pytest.raises(MalformedTokenError):
        tokens.verify(other)


@pytest.mark.parametrize("token", ["invalidtoken123", "", "a.b.c"])
def test_garbage_tokens(tokens, token):
    with pytest.raises(MalformedTokenError):
        tokens.verify(token)


def test_missing_id_claim(tokens):
    now = int(datetime.now(UTC).timestamp())
    token = jwt.encode({"iat": now, "exp": now + 60}, TEST_SECRET, algorithm="HS256")

    with pytest.raises(MalformedTokenError):
        tokens.verify(token)


def test_non_string_id_claim(tokens):
    now = int(datetime.now(UTC).timestamp())
    token = jwt.encode({"id": 42, "iat": now, "exp": now + 60}, TEST_SECRET, algorithm="HS256")

    with pytest.raises(MalformedTokenError):
        tokens.verify(token)


def test_unconfigured_service_refuses_to_work():
    service = TokenService(None)

    assert not service.is_configured
    with pytest.raises(ConfigurationError):
        service.issue("abc123")
    with pytest.raises(ConfigurationError):
        service.verify("anything")


def test_token_valid_until_expiry_instant(tokens):
    now_ts = int(time.time())
    issued_at = datetime.fromtimestamp(now_ts - 58, tz=UTC)
    token = tokens.issue("abc123", ttl=timedelta(seconds=60), now=issued_at)

    claims = tokens.decode(token)

    assert claims.exp == datetime.fromtimestamp(now_ts + 2, tz=UTC)
    assert claims.exp > claims.iat


@pytest.mark.parametrize("offset", [0, 1])
def test_token_expired_at_or_after_expiry_instant(tokens, offset):
    now_ts = int(time.time())
    issued_at = datetime.fromtimestamp(now_ts - 60 - offset, tz=UTC)
    token = tokens.issue("abc123", ttl=timedelta(seconds=60), now=issued_at)

    with pytest.raises(ExpiredTokenError):
        tokens.verify(token)
