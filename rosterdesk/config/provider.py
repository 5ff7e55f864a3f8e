"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class AuthConfig:
    """Authentication configuration."""
    jwt_secret: Optional[str]
    jwt_algorithm: str
    token_ttl_days: int
    bcrypt_rounds: int
    user_lookup_timeout: float

    @property
    def is_configured(self) -> bool:
        """Check if a signing secret is available."""
        return bool(self.jwt_secret)


@dataclass(frozen=True)
class APIConfig:
    """API configuration."""
    port: int
    host: str
    debug: bool
    log_level: str


@dataclass(frozen=True)
class StoreConfig:
    """Document store configuration."""
    backend: str
    redis_url: str


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_auth_config(self) -> AuthConfig:
        """Get authentication configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...

    def get_store_config(self) -> StoreConfig:
        """Get document store configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_auth_config(self) -> AuthConfig:
        """Get authentication configuration from environment variables."""
        rounds = int(os.getenv("BCRYPT_ROUNDS", "10"))
        if not 4 <= rounds <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")

        return AuthConfig(
            jwt_secret=os.getenv("JWT_SECRET") or None,
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            token_ttl_days=int(os.getenv("JWT_TTL_DAYS", "30")),
            bcrypt_rounds=rounds,
            user_lookup_timeout=float(os.getenv("USER_LOOKUP_TIMEOUT", "5.0")),
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=int(os.getenv("API_PORT", "3000")),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=os.getenv("API_DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def get_store_config(self) -> StoreConfig:
        """Get document store configuration from environment variables."""
        backend = os.getenv("STORE_BACKEND", "redis").lower()
        if backend not in ("redis", "memory"):
            raise ValueError(f"Unknown STORE_BACKEND: {backend}")

        return StoreConfig(
            backend=backend,
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        )
