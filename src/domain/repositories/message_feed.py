"""Change feed protocol for newly inserted messages."""

from collections.abc import Awaitable, Callable
from typing import Protocol
from uuid import UUID

MessageHandler = Callable[[UUID], Awaitable[None]]


class ISubscription(Protocol):
    """Handle for one room-filtered feed subscription."""

    @property
    def room_id(self) -> str:
        ...

    @property
    def active(self) -> bool:
        ...

    def unsubscribe(self) -> None:
        """Stop delivery. Synchronous and idempotent."""
        ...


class IMessageFeed(Protocol):
    """Push feed of message inserts, filtered by room."""

    def subscribe(self, room_id: str, handler: MessageHandler) -> ISubscription:
        """Deliver the id of every message inserted into ``room_id`` to ``handler``."""
        ...
