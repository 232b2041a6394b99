"""Live message view for the currently selected chat room.

``RoomMessageSynchronizer`` combines a one-shot backfill with the insert feed
of the selected room::

    IDLE --select_room--> LOADING --backfill--> LIVE --select_room/teardown--> ...

Rules kept by this module:

* at most one feed subscription exists, and it is released before a new one is
  taken (room switches unsubscribe synchronously, before any await);
* every selection bumps a generation counter; a backfill or event fetch that
  resolves under an older generation is discarded, so nothing from a previous
  room reaches the view;
* event handling goes through a FIFO lock, so rows are appended in the order
  the feed delivered them;
* a message id is never appended twice.

Rows are not re-sorted on arrival. A late event whose ``created_at`` is older
than the tail stays where it was appended.
"""

import asyncio
import functools
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional
from uuid import UUID

import structlog

from domain.entities.chat import ChatMessage
from domain.repositories.message_feed import IMessageFeed, ISubscription
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

DEFAULT_BACKFILL_LIMIT = 100


class SyncState(StrEnum):
    """Lifecycle of a room selection."""

    IDLE = "idle"
    LOADING = "loading"
    LIVE = "live"


class ViewChangeKind(StrEnum):
    RESET = "reset"
    APPEND = "append"


@dataclass(frozen=True, slots=True)
class ViewChange:
    """Notification sent to view listeners."""

    kind: ViewChangeKind
    room_id: str
    messages: tuple[ChatMessage, ...]


ViewListener = Callable[[ViewChange], Awaitable[None]]


class RoomMessageSynchronizer:
    """Ordered, duplicate-free message view for one selected room."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        feed: IMessageFeed,
        backfill_limit: int = DEFAULT_BACKFILL_LIMIT,
    ) -> None:
        self._uow_factory = uow_factory
        self._feed = feed
        self._backfill_limit = backfill_limit

        self._state = SyncState.IDLE
        self._room_id: Optional[str] = None
        self._view: list[ChatMessage] = []
        self._seen_ids: set[UUID] = set()
        self._subscription: Optional[ISubscription] = None
        self._generation = 0
        self._event_lock = asyncio.Lock()
        self._listeners: list[ViewListener] = []

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def room_id(self) -> Optional[str]:
        return self._room_id

    @property
    def view(self) -> tuple[ChatMessage, ...]:
        return tuple(self._view)

    @property
    def subscription(self) -> Optional[ISubscription]:
        return self._subscription

    def add_listener(self, listener: ViewListener) -> None:
        self._listeners.append(listener)

    async def select_room(self, room_id: str) -> None:
        """Switch the view to ``room_id`` and load its history."""
        self.teardown()
        self._room_id = room_id
        self._view = []
        self._seen_ids = set()
        self._state = SyncState.LOADING
        logger.debug("room_selected", room_id=room_id, generation=self._generation)
        await self.backfill(room_id)

    async def backfill(self, room_id: str) -> None:
        """Load recent history for the selected room and go live.

        A failed query leaves the view empty but still goes live, so the room
        stays usable for sending.
        """
        generation = self._generation
        rows: list[ChatMessage] = []
        try:
            async with self._uow_factory() as uow:
                rows = await uow.messages.get_recent_joined(room_id, self._backfill_limit)
        except Exception:
            logger.exception("backfill_failed", room_id=room_id)
            rows = []

        if generation != self._generation or room_id != self._room_id:
            logger.debug("backfill_discarded", room_id=room_id)
            return

        self._view = []
        self._seen_ids = set()
        for row in rows:
            self._append_if_new(row)

        self._release_subscription()
        self._state = SyncState.LIVE
        try:
            self._subscription = self._feed.subscribe(
                room_id, functools.partial(self._handle_event, generation)
            )
        except Exception:
            logger.exception("subscribe_failed", room_id=room_id)

        logger.info("room_live", room_id=room_id, backfilled=len(self._view))
        await self._notify(ViewChange(ViewChangeKind.RESET, room_id, tuple(self._view)))

    async def on_event(self, message_id: UUID) -> None:
        """Handle an insert notification for the active room."""
        await self._handle_event(self._generation, message_id)

    def teardown(self) -> None:
        """Release the live subscription and invalidate in-flight work."""
        self._release_subscription()
        self._generation += 1
        self._state = SyncState.IDLE

    async def _handle_event(self, generation: int, message_id: UUID) -> None:
        async with self._event_lock:
            if not self._is_current(generation):
                return

            try:
                async with self._uow_factory() as uow:
                    row = await uow.messages.get_joined(message_id)
            except Exception:
                logger.exception(
                    "event_fetch_failed",
                    room_id=self._room_id,
                    message_id=str(message_id),
                )
                return

            if not self._is_current(generation):
                logger.debug("event_discarded", message_id=str(message_id))
                return

            if row is None:
                logger.warning(
                    "event_dropped",
                    room_id=self._room_id,
                    message_id=str(message_id),
                    reason="joined_record_unavailable",
                )
                return

            if row.room_id != self._room_id:
                logger.warning(
                    "event_dropped",
                    room_id=self._room_id,
                    message_id=str(message_id),
                    reason="room_mismatch",
                )
                return

            if self._append_if_new(row):
                await self._notify(
                    ViewChange(ViewChangeKind.APPEND, row.room_id, (row,))
                )

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation and self._state is SyncState.LIVE

    def _append_if_new(self, row: ChatMessage) -> bool:
        if row.id in self._seen_ids:
            return False
        self._seen_ids.add(row.id)
        self._view.append(row)
        return True

    def _release_subscription(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            logger.debug("room_unsubscribed", room_id=self._subscription.room_id)
            self._subscription = None

    async def _notify(self, change: ViewChange) -> None:
        for listener in list(self._listeners):
            try:
                await listener(change)
            except Exception:
                logger.exception("view_listener_failed", kind=change.kind.value)
