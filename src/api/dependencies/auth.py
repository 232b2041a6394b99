"""Authentication dependencies for FastAPI."""

from typing import Annotated, Optional

from fastapi import Depends, WebSocket
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.exceptions import AuthenticationError, ErrorCode
from domain.entities.identity import Identity
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import IAuthProvider

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)

# Singleton auth provider
_auth_provider: JWTAuthProvider | None = None


def get_auth_provider() -> JWTAuthProvider:
    """Get or create the auth provider singleton."""
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = JWTAuthProvider()
    return _auth_provider


async def get_current_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
) -> Identity:
    """
    Dependency to get the signed-in identity.

    Raises:
        AuthenticationError: If no token provided or token is invalid
    """
    if not credentials:
        raise AuthenticationError(
            message="Authorization header required",
            error_code=ErrorCode.UNAUTHORIZED,
        )

    identity = await auth_provider.validate_token(credentials.credentials)

    if not identity:
        raise AuthenticationError(
            message="Invalid or expired token",
            error_code=ErrorCode.INVALID_TOKEN,
        )

    return identity


async def get_optional_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
) -> Identity | None:
    """
    Dependency to get the identity if signed in.

    Catalog pages are public; this lets them show per-user state
    (favorite flags) without requiring a token.
    """
    if not credentials:
        return None

    return await auth_provider.validate_token(credentials.credentials)


async def authenticate_websocket(
    websocket: WebSocket,
    auth_provider: IAuthProvider,
) -> Optional[Identity]:
    """Resolve the identity of a websocket client.

    Browsers cannot set headers on a websocket handshake, so the token is
    read from the ``token`` query parameter first.
    """
    token = websocket.query_params.get("token")
    if not token:
        header = websocket.headers.get("authorization", "")
        scheme, _, value = header.partition(" ")
        if scheme.lower() == "bearer":
            token = value.strip()
    if not token:
        return None
    return await auth_provider.validate_token(token)


# Type alias for convenience in route handlers
CurrentUser = Annotated[Identity, Depends(get_current_user)]
OptionalUser = Annotated[Identity | None, Depends(get_optional_user)]
