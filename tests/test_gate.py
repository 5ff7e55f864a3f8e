"""
Tests for the access gate.

The gate is exercised without HTTP: it takes the raw Authorization header
value and returns Proceed or Reject.
"""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from conftest import MISSING_USER_ID
from rosterdesk.modules.auth import (
    AccessGate,
    GateFailure,
    Proceed,
    Reject,
    parse_authorization,
)


async def make_user(users):
    return await users.create_user(
        name="Alice Doe", user_name="alice", email="alice@example.com", password="secret123"
    )


# Header parsing

@pytest.mark.parametrize("header", [None, "", "   "])
def test_parse_missing_header(header):
    assert parse_authorization(header) == (None, GateFailure.NO_TOKEN)


@pytest.mark.parametrize(
    "header",
    ["InvalidFormat token", "Bearer", "Bearer a b", "Basic dXNlcjpwYXNz", "token-only"],
)
def test_parse_wrong_format(header):
    assert parse_authorization(header) == (None, GateFailure.TOKEN_FAILED)


@pytest.mark.parametrize("scheme", ["Bearer", "bearer", "BEARER"])
def test_parse_bearer_any_case(scheme):
    assert parse_authorization(f"{scheme} abc.def.ghi") == ("abc.def.ghi", None)


# Gate decisions

@pytest.mark.asyncio
async def test_no_header_rejects_no_token(gate):
    result = await gate.check(None)

    assert isinstance(result, Reject)
    assert result.message == "Not authorized, no token"


@pytest.mark.asyncio
async def test_invalid_format_rejects_token_failed(gate):
    result = await gate.check("InvalidFormat token")

    assert isinstance(result, Reject)
    assert result.failure is GateFailure.TOKEN_FAILED


@pytest.mark.asyncio
async def test_garbage_token_rejects_token_failed(gate):
    result = await gate.check("Bearer invalidtoken123")

    assert isinstance(result, Reject)
    assert result.message == "Not authorized, token failed"


@pytest.mark.asyncio
async def test_expired_token_rejects_token_failed(gate, tokens, users):
    principal = await make_user(users)
    token = tokens.issue(principal.id, now=datetime.now(UTC) - timedelta(days=31))

    result = await gate.check(f"Bearer {token}")

    assert isinstance(result, Reject)
    assert result.failure is GateFailure.TOKEN_FAILED


@pytest.mark.asyncio
async def test_unknown_identity_rejects_user_not_found(gate, tokens):
    token = tokens.issue(MISSING_USER_ID)

    result = await gate.check(f"Bearer {token}")

    assert isinstance(result, Reject)
    assert result.message == "Not authorized, user not found"


@pytest.mark.asyncio
async def test_valid_token_proceeds_with_public_principal(gate, tokens, users):
    principal = await make_user(users)
    token = tokens.issue(principal.id)

    result = await gate.check(f"bearer {token}")

    assert isinstance(result, Proceed)
    assert result.principal.id == principal.id
    assert result.principal.user_name == "alice"
    assert not hasattr(result.principal, "password_hash")
    assert "password" not in result.principal.to_dict()


@pytest.mark.asyncio
async def test_deleted_user_token_rejected(gate, tokens, users):
    principal = await make_user(users)
    token = tokens.issue(principal.id)
    await users.delete_user(principal.id)

    result = await gate.check(f"Bearer {token}")

    assert result == Reject(GateFailure.USER_NOT_FOUND)


@pytest.mark.asyncio
async def test_lookup_not_called_for_bad_token(tokens):
    lookup = AsyncMock()
    lookup.get_principal = AsyncMock(return_value=None)
    gate = AccessGate(token_verifier=tokens, user_lookup=lookup)

    await gate.check("Bearer invalidtoken123")

    lookup.get_principal.assert_not_called()


@pytest.mark.asyncio
async def test_lookup_timeout_propagates(tokens):
    async def slow_lookup(identity_id):
        await asyncio.sleep(1)

    lookup = AsyncMock()
    lookup.get_principal = AsyncMock(side_effect=slow_lookup)
    gate = AccessGate(token_verifier=tokens, user_lookup=lookup, lookup_timeout=0.01)

    with pytest.raises(asyncio.TimeoutError):
        await gate.check(f"Bearer {tokens.issue(MISSING_USER_ID)}")


@pytest.mark.asyncio
async def test_concurrent_checks_are_independent(gate, tokens, users):
    principal = await make_user(users)
    good = f"Bearer {tokens.issue(principal.id)}"

    results = await asyncio.gather(
        gate.check(good), gate.check(None), gate.check(good), gate.check("Bearer nope")
    )

    assert isinstance(results[0], Proceed)
    assert results[1] == Reject(GateFailure.NO_TOKEN)
    assert isinstance(results[2], Proceed)
    assert results[3] == Reject(GateFailure.TOKEN_FAILED)
