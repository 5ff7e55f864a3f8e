"""
Access gate - per-request authentication policy.

The gate runs extract -> format-check -> verify -> resolve and stops at the
first failure. It never touches HTTP objects: callers pass the raw
Authorization header value and get back a tagged result.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple, Union

from .errors import ExpiredTokenError, GateFailure, MalformedTokenError
from .interfaces import TokenVerifier, UserLookup

if TYPE_CHECKING:
    from ..users.models import Principal

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


@dataclass(frozen=True)
class Proceed:
    """Request may continue with the resolved principal."""
    principal: "Principal"


@dataclass(frozen=True)
class Reject:
    """Request must stop with the given category."""
    failure: GateFailure

    @property
    def message(self) -> str:
        return self.failure.message


GateResult = Union[Proceed, Reject]


def parse_authorization(header: Optional[str]) -> Tuple[Optional[str], Optional[GateFailure]]:
    """
    Split an Authorization header into its bearer token.

    Returns:
        (token, None) on success, otherwise (None, failure)
    """
    if header is None or not header.strip():
        return None, GateFailure.NO_TOKEN

    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
        return None, GateFailure.TOKEN_FAILED

    return parts[1], None


class AccessGate:
    """
    Enforces identity on protected requests.

    Holds no per-request state; one instance serves all concurrent requests.
    """

    def __init__(
        self,
        token_verifier: TokenVerifier,
        user_lookup: UserLookup,
        lookup_timeout: Optional[float] = 5.0,
    ):
        """
        Initialize with injected dependencies.

        Args:
            token_verifier: Verifies tokens and returns identity ids
            user_lookup: Resolves identity ids to principals
            lookup_timeout: Seconds to wait on the user store (None waits forever)
        """
        self.token_verifier = token_verifier
        self.user_lookup = user_lookup
        self.lookup_timeout = lookup_timeout

    async def check(self, authorization: Optional[str]) -> GateResult:
        """
        Run the gate for one request.

        Args:
            authorization: Raw Authorization header value, if any

        Returns:
            Proceed(principal) or Reject(failure)

        Raises:
            asyncio.TimeoutError: If the user store does not answer in time
        """
        token, failure = parse_authorization(authorization)
        if failure is not None:
            return self._reject(failure)

        try:
            identity_id = self.token_verifier.verify(token)
        except ExpiredTokenError:
            logger.debug("Rejected expired token")
            return self._reject(GateFailure.TOKEN_FAILED)
        except MalformedTokenError:
            logger.debug("Rejected malformed token")
            return self._reject(GateFailure.TOKEN_FAILED)

        principal = await asyncio.wait_for(
            self.user_lookup.get_principal(identity_id), timeout=self.lookup_timeout
        )
        if principal is None:
            return self._reject(GateFailure.USER_NOT_FOUND)

        logger.debug(f"Request authenticated for user {principal.id}")
        return Proceed(principal)

    @staticmethod
    def _reject(failure: GateFailure) -> Reject:
        logger.warning(f"Access denied: {failure.message}")
        return Reject(failure)
