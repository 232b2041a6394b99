"""Unit tests for authentication dependencies."""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from api.dependencies.auth import authenticate_websocket, get_current_user, get_optional_user
from core.exceptions import AuthenticationError, ErrorCode
from domain.entities.identity import Identity
from infrastructure.auth.jwt_provider import JWTAuthProvider


@pytest.fixture
def provider() -> JWTAuthProvider:
    return JWTAuthProvider(secret_key="test-secret", algorithm="HS256", expire_minutes=30)


@pytest.fixture
def identity() -> Identity:
    return Identity(id=uuid4(), email="test@example.com", metadata={"full_name": "Test User"})


def _websocket(query: dict | None = None, headers: dict | None = None) -> MagicMock:
    websocket = MagicMock()
    websocket.query_params = query or {}
    websocket.headers = headers or {}
    return websocket


# --- get_current_user ---


class TestGetCurrentUser:
    @pytest.mark.asyncio
    async def test_returns_identity_with_valid_token(
        self, provider: JWTAuthProvider, identity: Identity
    ):
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials=provider.create_token(identity)
        )

        result = await get_current_user(credentials, provider)

        assert result.id == identity.id
        assert result.display_name == "Test User"

    @pytest.mark.asyncio
    async def test_raises_when_no_credentials(self, provider: JWTAuthProvider):
        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user(None, provider)

        assert exc_info.value.error_code == ErrorCode.UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_raises_when_invalid_token(self, provider: JWTAuthProvider):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="invalid.jwt.token")

        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user(credentials, provider)

        assert exc_info.value.error_code == ErrorCode.INVALID_TOKEN
        assert exc_info.value.status_code == 401


# --- get_optional_user ---


class TestGetOptionalUser:
    @pytest.mark.asyncio
    async def test_none_without_credentials(self, provider: JWTAuthProvider):
        assert await get_optional_user(None, provider) is None

    @pytest.mark.asyncio
    async def test_none_with_invalid_token(self, provider: JWTAuthProvider):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="bad")
        assert await get_optional_user(credentials, provider) is None


# --- authenticate_websocket ---


class TestAuthenticateWebsocket:
    @pytest.mark.asyncio
    async def test_token_from_query(self, provider: JWTAuthProvider, identity: Identity):
        websocket = _websocket(query={"token": provider.create_token(identity)})

        result = await authenticate_websocket(websocket, provider)

        assert result is not None
        assert result.id == identity.id

    @pytest.mark.asyncio
    async def test_token_from_header(self, provider: JWTAuthProvider, identity: Identity):
        websocket = _websocket(
            headers={"authorization": f"Bearer {provider.create_token(identity)}"}
        )

        result = await authenticate_websocket(websocket, provider)

        assert result is not None

    @pytest.mark.asyncio
    async def test_no_token(self, provider: JWTAuthProvider):
        assert await authenticate_websocket(_websocket(), provider) is None
