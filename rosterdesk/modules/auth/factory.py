"""
Authentication Factory following Black Box Design principles.

This factory:
- Constructs the authentication stack based on configuration
- Wires dependencies together
- Fails fast when the signing secret is missing
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from ...config.provider import AuthConfig
from ..users import UserModule
from .credentials import CredentialStore
from .errors import ConfigurationError
from .gate import AccessGate
from .login import LoginService
from .tokens import TokenService

logger = logging.getLogger(__name__)


@dataclass
class AuthStack:
    """The wired authentication components."""
    credentials: CredentialStore
    tokens: TokenService
    gate: AccessGate
    login: LoginService


class AuthFactory:
    """
    Composition root for authentication.

    Creates the credential store, token service, access gate and login
    service, and wires them together via dependency injection.
    """

    @staticmethod
    def build_credentials(auth_config: AuthConfig) -> CredentialStore:
        return CredentialStore(rounds=auth_config.bcrypt_rounds)

    @staticmethod
    def build(
        auth_config: AuthConfig,
        users: UserModule,
    ) -> AuthStack:
        """
        Build the complete authentication stack.

        Args:
            auth_config: Authentication configuration
            users: User module (user lookup collaborator)

        Returns:
            AuthStack

        Raises:
            ConfigurationError: If no signing secret is configured
        """
        if not auth_config.is_configured:
            raise ConfigurationError("JWT_SECRET environment variable is required")

        tokens = TokenService(
            auth_config.jwt_secret,
            algorithm=auth_config.jwt_algorithm,
            default_ttl=timedelta(days=auth_config.token_ttl_days),
        )
        gate = AccessGate(
            token_verifier=tokens,
            user_lookup=users,
            lookup_timeout=auth_config.user_lookup_timeout,
        )
        login = LoginService(users=users, credentials=users.credentials, tokens=tokens)

        logger.info(
            f"Authentication stack built (algo={auth_config.jwt_algorithm}, "
            f"ttl={auth_config.token_ttl_days}d, bcrypt_rounds={auth_config.bcrypt_rounds})"
        )
        return AuthStack(
            credentials=users.credentials,
            tokens=tokens,
            gate=gate,
            login=login,
        )
