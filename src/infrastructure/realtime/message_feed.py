"""Room-filtered push feed of message inserts.

``MessageFeed`` keeps the in-process subscriber registry. ``PostgresMessageFeed``
fills it from a dedicated asyncpg connection that LISTENs on the channel the
``messages`` insert trigger NOTIFYs::

    {"id": "<message uuid>", "room_id": "<room slug>"}

Handlers are scheduled as tasks in delivery order. Handlers that need strict
ordering serialize themselves (``RoomMessageSynchronizer`` holds a FIFO lock).
"""

import asyncio
from collections import defaultdict
from typing import Any, Optional
from uuid import UUID

import asyncpg
import orjson
import structlog

from domain.repositories.message_feed import MessageHandler

logger = structlog.get_logger()

# Must match the channel in the b7d2f5a8c3e1 trigger migration
MESSAGE_INSERT_CHANNEL = "messages_inserted"


class Subscription:
    """One handler registered for one room."""

    def __init__(self, feed: "MessageFeed", room_id: str, handler: MessageHandler) -> None:
        self._feed = feed
        self._room_id = room_id
        self._handler = handler
        self._active = True

    @property
    def room_id(self) -> str:
        return self._room_id

    @property
    def active(self) -> bool:
        return self._active

    @property
    def handler(self) -> MessageHandler:
        return self._handler

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._feed._remove(self)


class MessageFeed:
    """In-process registry of room subscriptions."""

    def __init__(self) -> None:
        self._subscriptions: dict[str, list[Subscription]] = defaultdict(list)
        self._tasks: set[asyncio.Task[None]] = set()

    def subscribe(self, room_id: str, handler: MessageHandler) -> Subscription:
        subscription = Subscription(self, room_id, handler)
        self._subscriptions[room_id].append(subscription)
        logger.debug("feed_subscribed", room_id=room_id, subscribers=self.subscriber_count(room_id))
        return subscription

    def subscriber_count(self, room_id: str) -> int:
        return len(self._subscriptions.get(room_id, ()))

    def publish(self, room_id: str, message_id: UUID) -> int:
        """Schedule every active handler of ``room_id``. Returns how many were scheduled."""
        scheduled = 0
        for subscription in list(self._subscriptions.get(room_id, ())):
            if not subscription.active:
                continue
            task = asyncio.get_running_loop().create_task(
                self._deliver(subscription, message_id)
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            scheduled += 1
        return scheduled

    async def drain(self) -> None:
        """Wait for in-flight deliveries."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()
        self._subscriptions.clear()

    async def _deliver(self, subscription: Subscription, message_id: UUID) -> None:
        if not subscription.active:
            return
        try:
            await subscription.handler(message_id)
        except Exception:
            logger.exception(
                "feed_handler_failed",
                room_id=subscription.room_id,
                message_id=str(message_id),
            )

    def _remove(self, subscription: Subscription) -> None:
        subscriptions = self._subscriptions.get(subscription.room_id)
        if not subscriptions:
            return
        try:
            subscriptions.remove(subscription)
        except ValueError:
            return
        if not subscriptions:
            del self._subscriptions[subscription.room_id]
        logger.debug("feed_unsubscribed", room_id=subscription.room_id)


def parse_notification(payload: str) -> Optional[tuple[str, UUID]]:
    """Decode a trigger payload into ``(room_id, message_id)``."""
    try:
        data = orjson.loads(payload)
        return str(data["room_id"]), UUID(str(data["id"]))
    except (orjson.JSONDecodeError, KeyError, TypeError, ValueError):
        return None


class PostgresMessageFeed(MessageFeed):
    """Feed driven by Postgres LISTEN/NOTIFY on a dedicated connection."""

    def __init__(self, dsn: str, channel: str = MESSAGE_INSERT_CHANNEL) -> None:
        super().__init__()
        self._dsn = dsn
        self._channel = channel
        self._connection: Optional[asyncpg.Connection] = None

    @property
    def running(self) -> bool:
        return self._connection is not None and not self._connection.is_closed()

    async def start(self) -> None:
        if self.running:
            logger.warning("message_feed_already_running", channel=self._channel)
            return
        self._connection = await asyncpg.connect(self._dsn, statement_cache_size=0)
        await self._connection.add_listener(self._channel, self._on_notification)
        logger.info("message_feed_started", channel=self._channel)

    async def stop(self) -> None:
        connection, self._connection = self._connection, None
        if connection is not None:
            try:
                await connection.remove_listener(self._channel, self._on_notification)
                await connection.close()
            except (asyncpg.PostgresError, OSError) as exc:
                logger.warning("message_feed_close_failed", error=str(exc))
        await self.close()
        logger.info("message_feed_stopped", channel=self._channel)

    def _on_notification(
        self, connection: Any, pid: int, channel: str, payload: str
    ) -> None:
        parsed = parse_notification(payload)
        if parsed is None:
            logger.warning("message_feed_bad_payload", channel=channel, payload=payload)
            return
        room_id, message_id = parsed
        self.publish(room_id, message_id)
