"""Unit of Work protocol."""

from typing import Protocol

from domain.repositories.ai_service_repository import (
    IAIServiceRepository,
    IFavoriteRepository,
    IReviewRepository,
)
from domain.repositories.chat_repository import IMessageRepository, IRoomRepository
from domain.repositories.profile_repository import IProfileRepository


class IUnitOfWork(Protocol):
    """Unit of Work interface for managing transactions."""

    profiles: IProfileRepository
    rooms: IRoomRepository
    messages: IMessageRepository
    services: IAIServiceRepository
    reviews: IReviewRepository
    favorites: IFavoriteRepository

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    async def __aenter__(self) -> "IUnitOfWork":
        """Enter the context manager."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Exit the context manager."""
        ...
