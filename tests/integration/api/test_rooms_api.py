"""Integration tests for the chat room API."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient
from starlette.websockets import WebSocketDisconnect

from api.dependencies.auth import get_auth_provider
from api.v1.dependencies import get_chat_service, get_synchronizer_factory
from domain.entities.identity import Identity
from infrastructure.auth.jwt_provider import JWTAuthProvider
from main import create_app

DEFAULT_ORDER = ["general", "chatgpt", "claude", "midjourney", "news"]


class TestRoomsAPI:
    """Room listing, creation and joining."""

    @pytest.mark.asyncio
    async def test_list_default_rooms(self, anonymous_client: AsyncClient):
        """Test GET /api/v1/rooms."""
        response = await anonymous_client.get("/api/v1/rooms")

        assert response.status_code == 200
        rooms = response.json()["data"]
        assert [r["id"] for r in rooms] == DEFAULT_ORDER
        assert all(r["is_default"] for r in rooms)

    @pytest.mark.asyncio
    async def test_created_room_is_listed_after_defaults(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/api/v1/rooms",
            json={"id": "local-llms", "name": "Local LLMs", "description": "Running models at home"},
        )
        assert response.status_code == 201
        assert response.json()["data"]["is_default"] is False

        rooms = (await authenticated_client.get("/api/v1/rooms")).json()["data"]
        assert [r["id"] for r in rooms] == DEFAULT_ORDER + ["local-llms"]

    @pytest.mark.asyncio
    async def test_create_duplicate_room(self, authenticated_client: AsyncClient):
        body = {"id": "agents", "name": "Agents"}
        await authenticated_client.post("/api/v1/rooms", json=body)

        response = await authenticated_client.post("/api/v1/rooms", json=body)

        assert response.status_code == 409
        assert response.json()["error_code"] == "ROOM_ALREADY_EXISTS"

    @pytest.mark.asyncio
    async def test_create_room_with_default_slug(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/api/v1/rooms", json={"id": "general", "name": "Mine"}
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_create_room_invalid_slug(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/api/v1/rooms", json={"id": "Not A Slug", "name": "x"}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_join_provisions_profile(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post("/api/v1/rooms/claude/join")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == "claude"

        me = await authenticated_client.get("/api/v1/profiles/me")
        assert me.json()["data"]["username"] == "Test User"

    @pytest.mark.asyncio
    async def test_join_unknown_room(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post("/api/v1/rooms/nowhere/join")

        assert response.status_code == 404
        assert response.json()["error_code"] == "ROOM_NOT_FOUND"


class TestMessagesAPI:
    """Sending and backfilling messages."""

    @pytest.mark.asyncio
    async def test_send_and_list(self, authenticated_client: AsyncClient):
        first = await authenticated_client.post(
            "/api/v1/rooms/general/messages", json={"content": "  hello  "}
        )
        await authenticated_client.post(
            "/api/v1/rooms/general/messages", json={"content": "second"}
        )

        assert first.status_code == 201
        assert first.json()["data"]["content"] == "hello"

        response = await authenticated_client.get(
            "/api/v1/rooms/general/messages", params={"tz": "UTC"}
        )

        assert response.status_code == 200
        messages = response.json()["data"]
        assert [m["content"] for m in messages] == ["hello", "second"]
        assert messages[0]["username"] == "Test User"
        assert messages[0]["day_separator"] == "Today"
        assert messages[1]["day_separator"] is None

    @pytest.mark.asyncio
    async def test_rooms_are_isolated(self, authenticated_client: AsyncClient):
        await authenticated_client.post("/api/v1/rooms/news/messages", json={"content": "news"})

        response = await authenticated_client.get("/api/v1/rooms/general/messages")

        assert response.json()["data"] == []

    @pytest.mark.asyncio
    async def test_blank_message_rejected(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/api/v1/rooms/general/messages", json={"content": "   "}
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "content"

    @pytest.mark.asyncio
    async def test_too_long_message_rejected(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/api/v1/rooms/general/messages", json={"content": "x" * 2001}
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_send_to_unknown_room(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/api/v1/rooms/nowhere/messages", json={"content": "hi"}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_time_zone(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get(
            "/api/v1/rooms/general/messages", params={"tz": "Mars/Olympus"}
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "tz"

    @pytest.mark.asyncio
    async def test_messages_require_auth(self, anonymous_client: AsyncClient):
        response = await anonymous_client.get("/api/v1/rooms/general/messages")

        assert response.status_code == 401


class TestRoomFeedHandshake:
    """Websocket authentication."""

    def _client(self) -> TestClient:
        app = create_app()
        app.dependency_overrides[get_auth_provider] = lambda: JWTAuthProvider(
            secret_key="test-secret-key", algorithm="HS256"
        )
        return TestClient(app)

    def test_missing_token_closes_with_policy_violation(self):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with self._client().websocket_connect("/api/v1/rooms/ws"):
                pass

        assert exc_info.value.code == 1008

    def test_invalid_token_closes_with_policy_violation(self):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with self._client().websocket_connect("/api/v1/rooms/ws?token=garbage"):
                pass

        assert exc_info.value.code == 1008


class TestRoomFeedErrors:
    """Rejected frames on an authenticated websocket."""

    def _client(self, chat_service) -> tuple[TestClient, str]:
        provider = JWTAuthProvider(secret_key="test-secret-key", algorithm="HS256")
        app = create_app()
        app.dependency_overrides[get_auth_provider] = lambda: provider
        app.dependency_overrides[get_chat_service] = lambda: chat_service
        app.dependency_overrides[get_synchronizer_factory] = lambda: MagicMock
        token = provider.create_token(Identity(id=uuid4(), email="ws@example.com"))
        return TestClient(app), token

    def test_store_failure_on_join_is_reported_as_error_frame(self):
        chat_service = AsyncMock()
        chat_service.join_room.side_effect = ConnectionError("db down")
        client, token = self._client(chat_service)

        with client.websocket_connect(f"/api/v1/rooms/ws?token={token}") as ws:
            ws.send_text('{"action": "select_room", "room_id": "general"}')
            frame = ws.receive_json()

        assert frame["type"] == "error"
        assert frame["error_code"] == "INTERNAL_ERROR"

    def test_unsupported_frame_is_rejected(self):
        client, token = self._client(AsyncMock())

        with client.websocket_connect(f"/api/v1/rooms/ws?token={token}") as ws:
            ws.send_text("not json")
            frame = ws.receive_json()

        assert frame["error_code"] == "VALIDATION_ERROR"
