"""
Token service - signed, time-bounded identity tokens.

Tokens are HS256 JWTs carrying ``id`` (identity reference), ``iat`` and
``exp``. They are never stored; a token is valid while its signature checks
out and ``exp`` has not passed.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Optional

import jwt

from .errors import ConfigurationError, ExpiredTokenError, MalformedTokenError

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(days=30)


@dataclass(frozen=True)
class TokenClaims:
    """Decoded token payload."""
    id: str
    iat: datetime
    exp: datetime


class TokenService:
    """
    Issues and verifies identity tokens.

    The signing secret is injected once at construction and never changes.
    """

    def __init__(
        self,
        secret: Optional[str],
        algorithm: str = "HS256",
        default_ttl: timedelta = DEFAULT_TTL,
    ):
        """
        Initialize token service.

        Args:
            secret: Shared signing secret (None leaves the service unusable)
            algorithm: JWT HMAC algorithm
            default_ttl: Lifetime used when issue() gets no ttl
        """
        self._secret = secret or None
        self.algorithm = algorithm
        self.default_ttl = default_ttl

    @property
    def is_configured(self) -> bool:
        return self._secret is not None

    def _require_secret(self) -> str:
        if self._secret is None:
            raise ConfigurationError("JWT signing secret is not configured")
        return self._secret

    def issue(
        self,
        identity_id: str,
        ttl: Optional[timedelta] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Issue a token for an identity.

        Args:
            identity_id: Identity record id
            ttl: Token lifetime (defaults to default_ttl)
            now: Issuance instant (defaults to the current time)

        Returns:
            Encoded JWT

        Raises:
            ConfigurationError: If no signing secret is configured
        """
        secret = self._require_secret()
        if not identity_id:
            raise ValueError("identity_id required")

        issued_at = now or datetime.now(UTC)
        expires_at = issued_at + (ttl if ttl is not None else self.default_ttl)
        payload = {
            "id": str(identity_id),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def decode(self, token: str) -> TokenClaims:
        """
        Verify a token and return its claims.

        Raises:
            MalformedTokenError: Wrong format, decode error, bad signature or missing id
            ExpiredTokenError: Token parsed but exp is in the past
            ConfigurationError: If no signing secret is configured
        """
        secret = self._require_secret()
        if not token or not isinstance(token, str):
            raise MalformedTokenError("Token must be a non-empty string")

        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={"require": ["id", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredTokenError(f"Token expired: {e}") from e
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(f"Invalid token: {e}") from e

        identity_id = payload["id"]
        if not isinstance(identity_id, str) or not identity_id:
            raise MalformedTokenError("Token id claim must be a non-empty string")

        try:
            iat = datetime.fromtimestamp(payload["iat"], tz=UTC)
            exp = datetime.fromtimestamp(payload["exp"], tz=UTC)
        except (TypeError, ValueError, OverflowError) as e:
            raise MalformedTokenError(f"Invalid timestamp: {e}") from e

        return TokenClaims(id=identity_id, iat=iat, exp=exp)

    def verify(self, token: str) -> str:
        """
        Verify a token and return the identity id it carries.

        Raises:
            MalformedTokenError, ExpiredTokenError, ConfigurationError
        """
        return self.decode(token).id
