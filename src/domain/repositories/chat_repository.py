"""Chat room and message repository protocols."""

from typing import Protocol
from uuid import UUID

from domain.entities.chat import ChatMessage, ChatRoom, Message


class IRoomRepository(Protocol):
    """Repository interface for ChatRoom entities."""

    async def get(self, id: str) -> ChatRoom | None:
        """Get a room by slug."""
        ...

    async def get_all(self) -> list[ChatRoom]:
        """Get all rooms ordered by creation time."""
        ...

    async def create(self, room: ChatRoom) -> ChatRoom:
        """Create a new room."""
        ...


class IMessageRepository(Protocol):
    """Repository interface for Message entities."""

    async def create(self, message: Message) -> Message:
        """Insert a new message."""
        ...

    async def get_joined(self, id: UUID) -> ChatMessage | None:
        """Get one message joined with its author, or None if either is missing."""
        ...

    async def get_recent_joined(self, room_id: str, limit: int) -> list[ChatMessage]:
        """Get the latest ``limit`` messages of a room, oldest first, with authors."""
        ...
