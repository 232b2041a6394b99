"""Chat room and message service layer."""

from collections.abc import Callable
from typing import List

import structlog

from core.exceptions import (
    AppException,
    MessageSendError,
    RoomAlreadyExistsError,
    RoomNotFoundError,
    ValidationError,
)
from domain.entities.chat import DEFAULT_ROOM_IDS, DEFAULT_ROOMS, ChatMessage, ChatRoom, Message
from domain.entities.identity import Identity
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.message_sync import DEFAULT_BACKFILL_LIMIT
from domain.services.profile_provisioning import ProfileProvisioningGuard

logger = structlog.get_logger()

MAX_MESSAGE_LENGTH = 2000


class ChatService:
    """Service layer for rooms and message sending."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        guard: ProfileProvisioningGuard,
        backfill_limit: int = DEFAULT_BACKFILL_LIMIT,
    ) -> None:
        self._uow_factory = uow_factory
        self._guard = guard
        self._backfill_limit = backfill_limit

    async def list_rooms(self) -> List[ChatRoom]:
        """Default rooms first, then user-created rooms by creation time."""
        try:
            async with self._uow_factory() as uow:
                stored = await uow.rooms.get_all()
        except Exception:
            logger.exception("room_list_failed")
            stored = []

        by_id = {room.id: room for room in stored}
        rooms = [by_id.get(room.id, room) for room in DEFAULT_ROOMS]
        rooms.extend(room for room in stored if room.id not in DEFAULT_ROOM_IDS)
        return rooms

    async def get_room(self, room_id: str) -> ChatRoom:
        """Get a room by slug."""
        async with self._uow_factory() as uow:
            room = await uow.rooms.get(room_id)
        if room:
            return room
        for default in DEFAULT_ROOMS:
            if default.id == room_id:
                return default
        raise RoomNotFoundError(room_id)

    async def create_room(
        self,
        identity: Identity,
        room_id: str,
        name: str,
        description: str = "",
    ) -> ChatRoom:
        """Create a user room. Slugs are unique across default and user rooms."""
        if room_id in DEFAULT_ROOM_IDS:
            raise RoomAlreadyExistsError(room_id)

        await self._guard.ensure_profile(identity)

        async with self._uow_factory() as uow:
            if await uow.rooms.get(room_id):
                raise RoomAlreadyExistsError(room_id)

            room = ChatRoom(
                id=room_id,
                name=name.strip(),
                description=description.strip(),
                created_by=identity.id,
            )
            created = await uow.rooms.create(room)
            await uow.commit()

        logger.info("room_created", room_id=room_id, created_by=str(identity.id))
        return created

    async def join_room(self, identity: Identity, room_id: str) -> ChatRoom:
        """Resolve the room and make sure the caller has a profile before chatting."""
        room = await self.get_room(room_id)
        await self._guard.ensure_profile(identity)
        return room

    async def get_recent_messages(self, room_id: str) -> List[ChatMessage]:
        """Backfill page for a room. A failed read yields an empty page."""
        try:
            await self.get_room(room_id)
            async with self._uow_factory() as uow:
                return await uow.messages.get_recent_joined(room_id, self._backfill_limit)
        except RoomNotFoundError:
            raise
        except Exception:
            logger.exception("backfill_failed", room_id=room_id)
            return []

    async def send_message(self, identity: Identity, room_id: str, content: str) -> Message:
        """Insert a message. The feed delivers it back to every open view.

        Raises:
            MessageSendError: the insert failed; ``details.draft`` holds the
                original content so the client can restore it.
        """
        text = content.strip()
        if not text:
            raise ValidationError("Message must not be empty", field="content")
        if len(text) > MAX_MESSAGE_LENGTH:
            raise ValidationError(
                f"Message must be at most {MAX_MESSAGE_LENGTH} characters",
                field="content",
            )

        try:
            await self.get_room(room_id)
        except AppException:
            raise
        except Exception as exc:
            logger.exception("message_room_lookup_failed", room_id=room_id)
            raise MessageSendError(room_id, content, type(exc).__name__) from exc

        profile = await self._guard.ensure_profile(identity)
        if profile is None:
            logger.warning("sending_without_confirmed_profile", user_id=str(identity.id))

        try:
            async with self._uow_factory() as uow:
                created = await uow.messages.create(
                    Message(room_id=room_id, user_id=identity.id, content=text)
                )
                await uow.commit()
        except Exception as exc:
            logger.exception(
                "message_send_failed",
                room_id=room_id,
                user_id=str(identity.id),
            )
            raise MessageSendError(room_id, content, type(exc).__name__) from exc

        logger.info(
            "message_sent",
            room_id=room_id,
            user_id=str(identity.id),
            message_id=str(created.id),
        )
        return created
