"""
Authentication Middleware Module - Black Box Interface

Purpose: Enforce the access gate on FastAPI applications
Interface: AccessGateMiddleware, create_access_gate_middleware(), current_principal()
Hidden: Header extraction, error formatting, principal attachment

The gate decides; this module only turns its result into HTTP.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from ..auth.errors import GateFailure
from ..auth.gate import AccessGate, Reject
from ..users import Principal

logger = logging.getLogger(__name__)

PRINCIPAL_STATE_KEY = "user"

DEFAULT_SKIP_PATHS = {
    "/": ["GET"],
    "/healthz": ["GET"],
    "/api/health": ["GET"],
    "/api/auth/login": ["POST"],
    "/api/auth/register": ["POST"],
    "/docs": ["GET"],
    "/docs/oauth2-redirect": ["GET"],
    "/openapi.json": ["GET"],
}


def format_error(message: str) -> Dict[str, Any]:
    """Structured rejection body."""
    return {"success": False, "error": message}


class AccessGateMiddleware:
    """
    HTTP middleware running the access gate on every non-public request.

    The gate may be given directly or resolved from ``app.state.gate`` at
    request time, so the middleware can be registered before startup wires it.
    """

    def __init__(
        self,
        gate: Optional[AccessGate] = None,
        skip_paths: Optional[Dict[str, list]] = None,
        log_attempts: bool = True,
    ):
        """
        Initialize access gate middleware.

        Args:
            gate: AccessGate instance (None to read app.state.gate per request)
            skip_paths: Dict of {path: [methods]} to skip authentication
            log_attempts: Whether to log authentication attempts
        """
        self.gate = gate
        self.skip_paths = skip_paths if skip_paths is not None else dict(DEFAULT_SKIP_PATHS)
        self.log_attempts = log_attempts

    def should_skip_auth(self, request: Request) -> bool:
        """Check if authentication should be skipped for this request."""
        path = str(request.url.path)
        method = request.method.upper()

        if path in self.skip_paths:
            allowed_methods = self.skip_paths[path]
            if "*" in allowed_methods or method in allowed_methods:
                return True

        return False

    def resolve_gate(self, request: Request) -> Optional[AccessGate]:
        if self.gate is not None:
            return self.gate
        return getattr(request.app.state, "gate", None)

    async def __call__(self, request: Request, call_next):
        """Process the request through the access gate."""
        if self.should_skip_auth(request):
            if self.log_attempts:
                logger.debug(f"Skipping auth for {request.method} {request.url.path}")
            return await call_next(request)

        gate = self.resolve_gate(request)
        if gate is None:
            return JSONResponse(status_code=503, content=format_error("Service not initialized"))

        try:
            result = await gate.check(request.headers.get("authorization"))
        except Exception as e:
            logger.error(f"Error during authentication: {e}")
            return JSONResponse(
                status_code=500,
                content=format_error("Internal error during authentication"),
            )

        if isinstance(result, Reject):
            if self.log_attempts:
                logger.warning(f"{request.method} {request.url.path} rejected: {result.message}")
            return JSONResponse(status_code=401, content=format_error(result.message))

        setattr(request.state, PRINCIPAL_STATE_KEY, result.principal)
        return await call_next(request)


def create_access_gate_middleware(
    gate: Optional[AccessGate] = None,
    skip_paths: Optional[Dict[str, list]] = None,
) -> AccessGateMiddleware:
    """
    Factory function to create access gate middleware.

    Args:
        gate: AccessGate instance, or None to resolve app.state.gate
        skip_paths: Extra public paths {"/path": ["GET", "POST"]}

    Returns:
        Configured AccessGateMiddleware instance
    """
    paths = dict(DEFAULT_SKIP_PATHS)
    if skip_paths:
        paths.update(skip_paths)
    return AccessGateMiddleware(gate=gate, skip_paths=paths)


async def current_principal(request: Request) -> Principal:
    """FastAPI dependency returning the principal attached by the middleware."""
    principal = getattr(request.state, PRINCIPAL_STATE_KEY, None)
    if principal is None:
        raise HTTPException(status_code=401, detail=GateFailure.NO_TOKEN.message)
    return principal


__all__ = [
    "AccessGateMiddleware",
    "create_access_gate_middleware",
    "current_principal",
    "format_error",
    "PRINCIPAL_STATE_KEY",
    "DEFAULT_SKIP_PATHS",
]
