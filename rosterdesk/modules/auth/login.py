"""
Login boundary.

Exchanges a login name and password for a session token. An unknown login
name and a wrong password fail the same way and cost one bcrypt check each.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .credentials import CredentialStore
from .errors import InvalidCredentialsError, MissingLoginFieldsError
from .tokens import TokenService

if TYPE_CHECKING:
    from ..users import Principal, UserModule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    """Token plus the public view of the authenticated user."""
    token: str
    principal: "Principal"

    def to_dict(self) -> dict:
        return {"token": self.token, **self.principal.to_dict()}


class LoginService:
    """Credential check and token issuance for interactive users."""

    def __init__(
        self,
        users: "UserModule",
        credentials: CredentialStore,
        tokens: TokenService,
    ):
        self.users = users
        self.credentials = credentials
        self.tokens = tokens

    async def login(self, user_name: Optional[str], password: Optional[str]) -> LoginResult:
        """
        Authenticate and issue a token.

        Raises:
            MissingLoginFieldsError: If either field is absent or blank
            InvalidCredentialsError: Unknown login name or wrong password
        """
        if not user_name or not password:
            raise MissingLoginFieldsError()

        identity = await self.users.get_identity_by_username(user_name)
        if identity is None:
            self.credentials.burn(password)
            logger.warning("Login failed: invalid credentials")
            raise InvalidCredentialsError()

        if not self.credentials.verify(password, identity.password_hash):
            logger.warning("Login failed: invalid credentials")
            raise InvalidCredentialsError()

        logger.info(f"User logged in: {identity.user_name}")
        return LoginResult(token=self.tokens.issue(identity.id), principal=identity.public())

    async def register(
        self, name: str, user_name: str, email: str, password: str
    ) -> LoginResult:
        """Create a user and issue its first token."""
        principal = await self.users.create_user(
            name=name, user_name=user_name, email=email, password=password
        )
        return LoginResult(token=self.tokens.issue(principal.id), principal=principal)
