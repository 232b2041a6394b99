"""Chat room and message domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from domain.entities.profile import Profile


@dataclass
class ChatRoom:
    """Domain entity for a topic chat room. Immutable once created."""

    id: str  # stable slug
    name: str
    description: str = ""
    created_by: UUID | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)


DEFAULT_ROOMS: tuple[ChatRoom, ...] = (
    ChatRoom(id="general", name="General", description="Talk freely about AI"),
    ChatRoom(id="chatgpt", name="ChatGPT", description="Discussion about ChatGPT"),
    ChatRoom(id="claude", name="Claude", description="Discussion about Claude"),
    ChatRoom(id="midjourney", name="Midjourney", description="Image generation AI"),
    ChatRoom(id="news", name="AI News", description="Share the latest AI news"),
)

DEFAULT_ROOM_IDS = frozenset(room.id for room in DEFAULT_ROOMS)


@dataclass
class Message:
    """Domain entity for a chat message. Append-only."""

    room_id: str
    user_id: UUID
    content: str
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """Read-only value object: a Message joined with its author's username."""

    id: UUID
    room_id: str
    user_id: UUID
    content: str
    created_at: datetime
    author: str


def join_author(message: Message, author: Optional[Profile]) -> Optional[ChatMessage]:
    """Merge a message row with its author profile.

    Returns None when the author is missing or belongs to another user, so a
    partially joined row never reaches the view.
    """
    if author is None or author.id != message.user_id:
        return None
    return ChatMessage(
        id=message.id,
        room_id=message.room_id,
        user_id=message.user_id,
        content=message.content,
        created_at=message.created_at,
        author=author.username,
    )
