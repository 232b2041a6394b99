"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from core.config import settings
from domain.services.catalog_service import CatalogService
from domain.services.chat_service import ChatService
from domain.services.message_sync import RoomMessageSynchronizer
from domain.services.profile_provisioning import ProfileProvisioningGuard
from domain.services.profile_service import ProfileService
from domain.services.review_service import FavoriteService, ReviewService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.realtime.message_feed import MessageFeed, PostgresMessageFeed


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_profile_guard() -> ProfileProvisioningGuard:
    """Get the shared profile provisioning guard."""
    return ProfileProvisioningGuard(get_uow_factory())


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(get_uow_factory(), guard=get_profile_guard())


@lru_cache
def get_catalog_service() -> CatalogService:
    """Get Catalog service instance."""
    return CatalogService(get_uow_factory(), guard=get_profile_guard())


@lru_cache
def get_review_service() -> ReviewService:
    """Get Review service instance."""
    return ReviewService(get_uow_factory(), guard=get_profile_guard())


@lru_cache
def get_favorite_service() -> FavoriteService:
    """Get Favorite service instance."""
    return FavoriteService(get_uow_factory(), guard=get_profile_guard())


@lru_cache
def get_chat_service() -> ChatService:
    """Get Chat service instance."""
    return ChatService(
        get_uow_factory(),
        guard=get_profile_guard(),
        backfill_limit=settings.chat_backfill_limit,
    )


@lru_cache
def get_message_feed() -> MessageFeed:
    """Get the process-wide message feed.

    With realtime disabled the feed has no source and only carries
    what is published in-process.
    """
    if settings.realtime_enabled:
        return PostgresMessageFeed(settings.listen_dsn)
    return MessageFeed()


def get_synchronizer_factory() -> Callable[[], RoomMessageSynchronizer]:
    """Factory for per-connection room synchronizers."""
    uow_factory = get_uow_factory()
    feed = get_message_feed()

    def factory() -> RoomMessageSynchronizer:
        return RoomMessageSynchronizer(
            uow_factory,
            feed,
            backfill_limit=settings.chat_backfill_limit,
        )

    return factory
