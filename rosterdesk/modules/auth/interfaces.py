"""Authentication interfaces following Black Box Design principles."""
from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from ..users.models import Principal


class UserLookup(Protocol):
    """Protocol for resolving a token's identity reference to a principal."""

    async def get_principal(self, identity_id: str) -> Optional["Principal"]:
        """
        Look up an identity record by id.

        Returns:
            The secret-stripped principal, or None if no such record exists
        """
        ...


class TokenVerifier(Protocol):
    """Protocol for token verification - allows swappable implementations."""

    def verify(self, token: str) -> str:
        """
        Verify a token.

        Returns:
            Identity id carried by the token

        Raises:
            MalformedTokenError, ExpiredTokenError
        """
        ...
