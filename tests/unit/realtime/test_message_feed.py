"""Unit tests for the in-process message feed and notification parsing."""

import asyncio
from pathlib import Path
from uuid import UUID, uuid4

import orjson
import pytest

from infrastructure.realtime.message_feed import (
    MESSAGE_INSERT_CHANNEL,
    MessageFeed,
    PostgresMessageFeed,
    parse_notification,
)


class TestParseNotification:
    def test_valid_payload(self):
        message_id = uuid4()
        payload = orjson.dumps({"id": str(message_id), "room_id": "general"}).decode()

        assert parse_notification(payload) == ("general", message_id)

    @pytest.mark.parametrize(
        "payload",
        ["not json", "{}", '{"id": "nope", "room_id": "general"}', '{"room_id": "general"}', "[]"],
    )
    def test_invalid_payloads(self, payload: str):
        assert parse_notification(payload) is None


class TestMessageFeed:
    @pytest.mark.asyncio
    async def test_publish_reaches_only_room_subscribers(self):
        feed = MessageFeed()
        received: dict[str, list[UUID]] = {"general": [], "news": []}

        async def on_general(message_id: UUID) -> None:
            received["general"].append(message_id)

        async def on_news(message_id: UUID) -> None:
            received["news"].append(message_id)

        feed.subscribe("general", on_general)
        feed.subscribe("news", on_news)
        message_id = uuid4()

        assert feed.publish("general", message_id) == 1
        await feed.drain()

        assert received == {"general": [message_id], "news": []}

    @pytest.mark.asyncio
    async def test_unsubscribe_is_idempotent_and_stops_delivery(self):
        feed = MessageFeed()
        received: list[UUID] = []

        async def handler(message_id: UUID) -> None:
            received.append(message_id)

        subscription = feed.subscribe("general", handler)
        subscription.unsubscribe()
        subscription.unsubscribe()

        assert not subscription.active
        assert feed.subscriber_count("general") == 0
        assert feed.publish("general", uuid4()) == 0
        await feed.drain()
        assert received == []

    @pytest.mark.asyncio
    async def test_unsubscribe_before_delivery_runs_drops_event(self):
        feed = MessageFeed()
        received: list[UUID] = []

        async def handler(message_id: UUID) -> None:
            received.append(message_id)

        subscription = feed.subscribe("general", handler)
        feed.publish("general", uuid4())
        subscription.unsubscribe()
        await feed.drain()

        assert received == []

    @pytest.mark.asyncio
    async def test_handler_failure_is_contained(self):
        feed = MessageFeed()
        received: list[UUID] = []

        async def broken(message_id: UUID) -> None:
            raise RuntimeError("handler bug")

        async def healthy(message_id: UUID) -> None:
            received.append(message_id)

        feed.subscribe("general", broken)
        feed.subscribe("general", healthy)
        message_id = uuid4()

        feed.publish("general", message_id)
        await feed.drain()

        assert received == [message_id]

    @pytest.mark.asyncio
    async def test_deliveries_start_in_publish_order(self):
        feed = MessageFeed()
        lock = asyncio.Lock()
        order: list[int] = []

        async def handler(message_id: UUID) -> None:
            async with lock:
                order.append(message_id.int)

        feed.subscribe("general", handler)
        for i in range(1, 6):
            feed.publish("general", UUID(int=i))
        await feed.drain()

        assert order == [1, 2, 3, 4, 5]


class TestPostgresMessageFeed:
    @pytest.mark.asyncio
    async def test_notification_is_published_to_room(self):
        feed = PostgresMessageFeed("postgresql://localhost/test")
        received: list[UUID] = []

        async def handler(message_id: UUID) -> None:
            received.append(message_id)

        feed.subscribe("claude", handler)
        message_id = uuid4()

        feed._on_notification(
            None, 1, MESSAGE_INSERT_CHANNEL, f'{{"id": "{message_id}", "room_id": "claude"}}'
        )
        feed._on_notification(None, 1, MESSAGE_INSERT_CHANNEL, "garbage")
        await feed.drain()

        assert received == [message_id]
        assert not feed.running

    def test_listens_on_trigger_channel(self):
        migration = (
            Path(__file__).parents[3]
            / "migrations"
            / "versions"
            / "b7d2f5a8c3e1_add_message_notify_trigger.py"
        )

        assert f"'{MESSAGE_INSERT_CHANNEL}'" in migration.read_text()
        assert PostgresMessageFeed("postgresql://localhost/test")._channel == MESSAGE_INSERT_CHANNEL
