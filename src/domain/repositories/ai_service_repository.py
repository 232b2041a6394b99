"""AI service, review and favorite repository protocols."""

from typing import Protocol
from uuid import UUID

from domain.entities.ai_service import (
    AIService,
    Favorite,
    FavoriteWithService,
    Review,
    ReviewWithAuthor,
    ReviewWithService,
)


class IAIServiceRepository(Protocol):
    """Repository interface for AIService entities."""

    async def get(self, id: UUID) -> AIService | None:
        """Get a service by ID."""
        ...

    async def get_all(self) -> list[AIService]:
        """Get all services, newest first."""
        ...

    async def create(self, service: AIService) -> AIService:
        """Create a new service."""
        ...

    async def update(self, service: AIService) -> AIService:
        """Update an existing service."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a service and return success status."""
        ...


class IReviewRepository(Protocol):
    """Repository interface for Review entities."""

    async def upsert(self, review: Review) -> Review:
        """Insert or replace the review for (user_id, service_id)."""
        ...

    async def get_for_service(self, service_id: UUID) -> list[ReviewWithAuthor]:
        """Get reviews of a service with author usernames, newest first."""
        ...

    async def get_for_user(self, user_id: UUID) -> list[ReviewWithService]:
        """Get a user's reviews with the reviewed services, newest first."""
        ...


class IFavoriteRepository(Protocol):
    """Repository interface for Favorite entities."""

    async def get(self, user_id: UUID, service_id: UUID) -> Favorite | None:
        """Get the favorite for a user and service."""
        ...

    async def create(self, favorite: Favorite) -> Favorite:
        """Create a favorite."""
        ...

    async def delete(self, user_id: UUID, service_id: UUID) -> bool:
        """Delete a favorite and return success status."""
        ...

    async def get_for_user(self, user_id: UUID) -> list[FavoriteWithService]:
        """Get a user's favorites with services, newest first."""
        ...
