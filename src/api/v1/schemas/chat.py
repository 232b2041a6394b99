"""Pydantic schemas for chat rooms, messages and websocket frames."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from domain.entities.chat import ChatMessage, ChatRoom, Message


class RoomResponse(BaseModel):
    """Schema for a chat room."""

    id: str
    name: str
    description: str
    created_by: UUID | None = None
    is_default: bool = False

    @classmethod
    def from_entity(cls, room: ChatRoom, is_default: bool = False) -> "RoomResponse":
        return cls(
            id=room.id,
            name=room.name,
            description=room.description,
            created_by=room.created_by,
            is_default=is_default,
        )


class RoomCreate(BaseModel):
    """Schema for creating a room. ``id`` is the URL slug."""

    id: str = Field(..., min_length=1, max_length=50, pattern=r"^[a-z0-9][a-z0-9_-]*$")
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)


class RoomListResponse(BaseModel):
    data: list[RoomResponse]


class RoomDetailResponse(BaseModel):
    data: RoomResponse


class MessageCreate(BaseModel):
    """Schema for sending a message. Content is trimmed server-side."""

    content: str = Field(..., max_length=4000)


class MessageResponse(BaseModel):
    """A message with its author's username."""

    id: UUID
    room_id: str
    user_id: UUID
    username: str
    content: str
    created_at: datetime
    day_separator: str | None = None

    @classmethod
    def from_entity(
        cls, message: ChatMessage, day_separator: str | None = None
    ) -> "MessageResponse":
        return cls(
            id=message.id,
            room_id=message.room_id,
            user_id=message.user_id,
            username=message.author,
            content=message.content,
            created_at=message.created_at,
            day_separator=day_separator,
        )


class MessageListResponse(BaseModel):
    data: list[MessageResponse]


class SentMessageResponse(BaseModel):
    """Acknowledgement of an insert. The row itself arrives through the feed."""

    id: UUID
    room_id: str
    user_id: UUID
    content: str
    created_at: datetime

    @classmethod
    def from_entity(cls, message: Message) -> "SentMessageResponse":
        return cls(
            id=message.id,
            room_id=message.room_id,
            user_id=message.user_id,
            content=message.content,
            created_at=message.created_at,
        )


class SentMessageDetailResponse(BaseModel):
    data: SentMessageResponse


class SelectRoomAction(BaseModel):
    """Client frame: switch the live view to a room."""

    action: Literal["select_room"]
    room_id: str = Field(..., min_length=1, max_length=50)


class SnapshotFrame(BaseModel):
    """Server frame: full view after a room switch."""

    type: Literal["snapshot"] = "snapshot"
    room_id: str
    messages: list[MessageResponse]


class MessageFrame(BaseModel):
    """Server frame: one appended message."""

    type: Literal["message"] = "message"
    room_id: str
    message: MessageResponse


class ErrorFrame(BaseModel):
    """Server frame: a rejected client frame."""

    type: Literal["error"] = "error"
    error_code: str
    message: str
