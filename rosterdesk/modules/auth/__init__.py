"""
Authentication Module - Black Box Interface

Purpose: Hash passwords, issue/verify session tokens, gate protected requests
Interface: CredentialStore, TokenService, AccessGate, LoginService
Hidden: bcrypt parameters, JWT encoding, header parsing

The stack is wired by auth.factory.AuthFactory; import it from there.
"""

from .credentials import CredentialStore
from .errors import (
    AuthError,
    ConfigurationError,
    ExpiredTokenError,
    GateFailure,
    InvalidCredentialsError,
    MalformedTokenError,
    MissingLoginFieldsError,
    TokenError,
)
from .gate import AccessGate, GateResult, Proceed, Reject, parse_authorization
from .login import LoginResult, LoginService
from .tokens import TokenClaims, TokenService

__all__ = [
    "CredentialStore",
    "TokenService",
    "TokenClaims",
    "AccessGate",
    "GateResult",
    "Proceed",
    "Reject",
    "parse_authorization",
    "LoginService",
    "LoginResult",
    "AuthError",
    "ConfigurationError",
    "TokenError",
    "MalformedTokenError",
    "ExpiredTokenError",
    "InvalidCredentialsError",
    "MissingLoginFieldsError",
    "GateFailure",
]
