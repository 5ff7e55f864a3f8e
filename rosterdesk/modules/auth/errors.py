"""Authentication error taxonomy."""

from enum import Enum


class AuthError(Exception):
    """Base authentication error"""
    pass


class ConfigurationError(AuthError):
    """Signing secret or other startup configuration is missing"""
    pass


class TokenError(AuthError):
    """Base token verification error"""
    pass


class MalformedTokenError(TokenError):
    """Token is structurally invalid, undecodable or badly signed"""
    pass


class ExpiredTokenError(TokenError):
    """Token decoded correctly but its expiry has passed"""
    pass


class InvalidCredentialsError(AuthError):
    """Unknown login name or wrong password (deliberately indistinguishable)"""

    def __init__(self):
        super().__init__("Invalid credentials")


class MissingLoginFieldsError(AuthError):
    """Login attempted without both login name and password"""

    def __init__(self):
        super().__init__("Please provide username and password")


class GateFailure(str, Enum):
    """Outward rejection categories of the access gate."""

    NO_TOKEN = "Not authorized, no token"
    TOKEN_FAILED = "Not authorized, token failed"
    USER_NOT_FOUND = "Not authorized, user not found"

    @property
    def message(self) -> str:
        return self.value
