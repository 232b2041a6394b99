"""Shared fixtures for unit tests."""

import asyncio
from datetime import datetime
from typing import Any, Optional
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.chat import ChatMessage
from domain.entities.identity import Identity
from domain.entities.profile import Profile, ProfileInsertResult
from domain.repositories.message_feed import MessageHandler


class InMemoryProfileRepository:
    """Profile store with primary key and unique username semantics.

    ``insert`` yields to the event loop before checking constraints, so
    concurrent provisioning calls interleave the way they do against a real
    database.
    """

    def __init__(self) -> None:
        self.rows: dict[UUID, Profile] = {}
        self.insert_calls = 0
        self.get_calls = 0
        self.fail_inserts_with: Optional[str] = None

    async def get(self, id: UUID) -> Optional[Profile]:
        self.get_calls += 1
        await asyncio.sleep(0)
        return self.rows.get(id)

    async def get_by_username(self, username: str) -> Optional[Profile]:
        return next((p for p in self.rows.values() if p.username == username), None)

    async def get_many(self, ids: list[UUID]) -> dict[UUID, Profile]:
        return {id: self.rows[id] for id in ids if id in self.rows}

    async def insert(self, profile: Profile) -> ProfileInsertResult:
        self.insert_calls += 1
        await asyncio.sleep(0)
        if self.fail_inserts_with:
            return ProfileInsertResult.failed(self.fail_inserts_with)
        if profile.id in self.rows:
            return ProfileInsertResult.conflict("duplicate key value violates profiles_pkey")
        if any(p.username == profile.username for p in self.rows.values()):
            return ProfileInsertResult.conflict("duplicate key value violates uq_profiles_username")
        self.rows[profile.id] = profile
        return ProfileInsertResult.created(profile)

    async def update_username(self, id: UUID, username: str) -> Optional[Profile]:
        profile = self.rows.get(id)
        if profile is None:
            return None
        profile.username = username
        return profile


class FakeUnitOfWork:
    """Fake Unit of Work with repository mocks for unit testing."""

    def __init__(self) -> None:
        self.profiles: Any = AsyncMock()
        self.rooms = AsyncMock()
        self.messages = AsyncMock()
        self.services = AsyncMock()
        self.reviews = AsyncMock()
        self.favorites = AsyncMock()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


class FakeSubscription:
    def __init__(self, feed: "FakeMessageFeed", room_id: str, handler: MessageHandler) -> None:
        self._feed = feed
        self.room_id = room_id
        self.handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._feed.unsubscribed.append(self.room_id)


class FakeMessageFeed:
    """Records subscriptions; ``emit`` delivers an insert to active handlers in order."""

    def __init__(self) -> None:
        self.subscriptions: list[FakeSubscription] = []
        self.unsubscribed: list[str] = []
        self.fail_subscribe = False

    def subscribe(self, room_id: str, handler: MessageHandler) -> FakeSubscription:
        if self.fail_subscribe:
            raise ConnectionError("realtime unavailable")
        subscription = FakeSubscription(self, room_id, handler)
        self.subscriptions.append(subscription)
        return subscription

    @property
    def active(self) -> list[FakeSubscription]:
        return [s for s in self.subscriptions if s.active]

    async def emit(self, room_id: str, message_id: UUID) -> None:
        for subscription in self.active:
            if subscription.room_id == room_id:
                await subscription.handler(message_id)


def make_identity(**metadata: Any) -> Identity:
    email = metadata.pop("email", "")
    return Identity(id=uuid4(), email=email, metadata=metadata)


def make_chat_message(
    room_id: str = "general",
    content: str = "hello",
    author: str = "Taro",
    **kwargs: Any,
) -> ChatMessage:
    return ChatMessage(
        id=kwargs.get("id", uuid4()),
        room_id=room_id,
        user_id=kwargs.get("user_id", uuid4()),
        content=content,
        created_at=kwargs.get("created_at", datetime.utcnow()),
        author=author,
    )


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def profile_store() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def user_id() -> UUID:
    """A random user ID."""
    return uuid4()


@pytest.fixture
def feed() -> FakeMessageFeed:
    return FakeMessageFeed()
