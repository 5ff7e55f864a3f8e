"""
Shared pytest fixtures for Rosterdesk tests.

This module provides common fixtures including:
- Auth components with a fixed test secret and cheap bcrypt rounds
- In-memory document stores and the modules built on them
- Redis mocks for the Redis document store
- FastAPI test client wired to the memory backend
"""

import os
import sys
from unittest.mock import AsyncMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from rosterdesk.config.provider import APIConfig, AuthConfig, StoreConfig
from rosterdesk.modules.attendance import AttendanceModule
from rosterdesk.modules.auth import AccessGate, CredentialStore, LoginService, TokenService
from rosterdesk.modules.staff import StaffModule
from rosterdesk.modules.storage import MemoryDocumentStore
from rosterdesk.modules.users import UNIQUE_FIELDS, UserModule

TEST_SECRET = "test_secret_key"
MISSING_USER_ID = "507f1f77bcf86cd799439011"


# =============================================================================
# Configuration
# =============================================================================

class StaticConfigProvider:
    """Config provider returning fixed values for tests."""

    def __init__(self, jwt_secret=TEST_SECRET, backend="memory"):
        self.jwt_secret = jwt_secret
        self.backend = backend

    def get_auth_config(self) -> AuthConfig:
        return AuthConfig(
            jwt_secret=self.jwt_secret,
            jwt_algorithm="HS256",
            token_ttl_days=30,
            bcrypt_rounds=4,
            user_lookup_timeout=1.0,
        )

    def get_api_config(self) -> APIConfig:
        return APIConfig(port=3000, host="127.0.0.1", debug=False, log_level="WARNING")

    def get_store_config(self) -> StoreConfig:
        return StoreConfig(backend=self.backend, redis_url="redis://localhost:6379/15")


# =============================================================================
# Auth components
# =============================================================================

@pytest.fixture(scope="session")
def credentials():
    """Credential store with the minimum bcrypt cost to keep tests fast."""
    return CredentialStore(rounds=4)


@pytest.fixture
def tokens():
    return TokenService(TEST_SECRET)


@pytest.fixture
def users(credentials):
    return UserModule(MemoryDocumentStore("users", unique=UNIQUE_FIELDS), credentials)


@pytest.fixture
def gate(tokens, users):
    return AccessGate(token_verifier=tokens, user_lookup=users, lookup_timeout=1.0)


@pytest.fixture
def login_service(users, credentials, tokens):
    return LoginService(users=users, credentials=credentials, tokens=tokens)


# =============================================================================
# Domain modules
# =============================================================================

@pytest.fixture
def staff_module():
    return StaffModule(MemoryDocumentStore("staff", unique=("staffId",)))


@pytest.fixture
def attendance_module(staff_module):
    store = MemoryDocumentStore("attendance", unique=AttendanceModule.UNIQUE_FIELDS)
    return AttendanceModule(store, staff_module)


# =============================================================================
# Redis Mocking
# =============================================================================

@pytest.fixture
def mock_redis():
    """Create a mock Redis client for document store tests."""
    redis = AsyncMock()

    # Basic operations
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.mget = AsyncMock(return_value=[])
    redis.delete = AsyncMock(return_value=1)

    # Set operations
    redis.sadd = AsyncMock()
    redis.srem = AsyncMock()
    redis.smembers = AsyncMock(return_value=set())

    redis.ping = AsyncMock(return_value=True)
    return redis


# =============================================================================
# FastAPI Test Client
# =============================================================================

@pytest.fixture
def client():
    """Test client running the full app on the memory backend."""
    from rosterdesk.main import create_app

    app = create_app(StaticConfigProvider())
    with TestClient(app) as test_client:
        yield test_client


def register_user(client, user_name="alice", email="alice@example.com", password="secret123"):
    """Register a user through the API and return the response body data."""
    response = client.post(
        "/api/auth/register",
        json={"name": "Alice Doe", "userName": user_name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
def auth_headers(client):
    """Authorization headers for a freshly registered user."""
    data = register_user(client)
    return {"Authorization": f"Bearer {data['token']}"}
