"""SQLAlchemy implementation of chat room and message repositories."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.chat import ChatMessage, ChatRoom, Message, join_author
from domain.entities.profile import Profile
from infrastructure.database.models import ChatRoomModel, MessageModel, ProfileModel


class SQLAlchemyRoomRepository:
    """SQLAlchemy implementation of IRoomRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: str) -> ChatRoom | None:
        """Get a room by slug."""
        stmt = select(ChatRoomModel).where(ChatRoomModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_all(self) -> list[ChatRoom]:
        """Get all rooms ordered by creation time."""
        stmt = select(ChatRoomModel).order_by(ChatRoomModel.created_at)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, room: ChatRoom) -> ChatRoom:
        """Create a new room."""
        model = ChatRoomModel(
            id=room.id,
            name=room.name,
            description=room.description,
            created_by=room.created_by,
            created_at=room.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: ChatRoomModel) -> ChatRoom:
        return ChatRoom(
            id=model.id,
            name=model.name,
            description=model.description,
            created_by=model.created_by,
            created_at=model.created_at,
        )


class SQLAlchemyMessageRepository:
    """SQLAlchemy implementation of IMessageRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message) -> Message:
        """Insert a new message."""
        model = MessageModel(
            id=message.id,
            room_id=message.room_id,
            user_id=message.user_id,
            content=message.content,
            created_at=message.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get_joined(self, id: UUID) -> ChatMessage | None:
        """Get one message with its author's username.

        Returns None while the author profile is not visible.
        """
        stmt = (
            select(MessageModel, ProfileModel)
            .outerjoin(ProfileModel, MessageModel.user_id == ProfileModel.id)
            .where(MessageModel.id == id)
        )
        result = await self._session.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None
        return self._join(*row)

    async def get_recent_joined(self, room_id: str, limit: int) -> list[ChatMessage]:
        """Get the newest ``limit`` messages of a room in ascending order.

        Rows whose author cannot be joined are skipped.
        """
        stmt = (
            select(MessageModel, ProfileModel)
            .outerjoin(ProfileModel, MessageModel.user_id == ProfileModel.id)
            .where(MessageModel.room_id == room_id)
            .order_by(MessageModel.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        rows = [joined for joined in (self._join(*row) for row in result) if joined]
        rows.reverse()
        return rows

    def _join(self, model: MessageModel, author: ProfileModel | None) -> ChatMessage | None:
        profile = None
        if author is not None:
            profile = Profile(id=author.id, username=author.username)
        return join_author(self._to_entity(model), profile)

    @staticmethod
    def _to_entity(model: MessageModel) -> Message:
        return Message(
            id=model.id,
            room_id=model.room_id,
            user_id=model.user_id,
            content=model.content,
            created_at=model.created_at,
        )
