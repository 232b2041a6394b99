"""Review and favorite service layer."""

from collections.abc import Callable
from typing import List
from uuid import UUID

import structlog

from core.exceptions import AppException, ReviewSubmitError, ServiceNotFoundError
from domain.entities.ai_service import (
    Favorite,
    FavoriteWithService,
    Review,
    ReviewWithAuthor,
    ReviewWithService,
)
from domain.entities.identity import Identity
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.profile_provisioning import ProfileProvisioningGuard

logger = structlog.get_logger()


class ReviewService:
    """Service layer for ratings and reviews."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        guard: ProfileProvisioningGuard,
    ) -> None:
        self._uow_factory = uow_factory
        self._guard = guard

    async def submit_review(
        self,
        identity: Identity,
        service_id: UUID,
        rating: int,
        comment: str = "",
    ) -> Review:
        """Create or replace the caller's review of a service.

        Raises:
            ServiceNotFoundError: no such service.
            ReviewSubmitError: the write failed; ``details`` carries the
                submitted rating and comment so the form can be restored.
        """
        await self._guard.ensure_profile(identity)

        try:
            async with self._uow_factory() as uow:
                if not await uow.services.get(service_id):
                    raise ServiceNotFoundError(str(service_id))

                review = await uow.reviews.upsert(
                    Review(
                        user_id=identity.id,
                        service_id=service_id,
                        rating=rating,
                        comment=comment.strip(),
                    )
                )
                await uow.commit()
        except AppException:
            raise
        except Exception as exc:
            logger.exception(
                "review_submit_failed",
                service_id=str(service_id),
                user_id=str(identity.id),
            )
            raise ReviewSubmitError(str(service_id), rating, comment, type(exc).__name__) from exc

        logger.info(
            "review_submitted",
            service_id=str(service_id),
            user_id=str(identity.id),
            rating=rating,
        )
        return review

    async def list_for_service(self, service_id: UUID) -> List[ReviewWithAuthor]:
        """Reviews of a service with author usernames, newest first."""
        async with self._uow_factory() as uow:
            if not await uow.services.get(service_id):
                raise ServiceNotFoundError(str(service_id))
            return await uow.reviews.get_for_service(service_id)

    async def list_for_user(self, user_id: UUID) -> List[ReviewWithService]:
        """A user's reviews, newest first. Empty when the store is unavailable."""
        try:
            async with self._uow_factory() as uow:
                return await uow.reviews.get_for_user(user_id)
        except Exception:
            logger.exception("user_reviews_fetch_failed", user_id=str(user_id))
            return []


class FavoriteService:
    """Service layer for bookmarked services."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        guard: ProfileProvisioningGuard,
    ) -> None:
        self._uow_factory = uow_factory
        self._guard = guard

    async def is_favorite(self, user_id: UUID, service_id: UUID) -> bool:
        async with self._uow_factory() as uow:
            return await uow.favorites.get(user_id, service_id) is not None

    async def toggle(self, identity: Identity, service_id: UUID) -> bool:
        """Flip the favorite flag and return the new state."""
        await self._guard.ensure_profile(identity)

        async with self._uow_factory() as uow:
            if not await uow.services.get(service_id):
                raise ServiceNotFoundError(str(service_id))

            if await uow.favorites.get(identity.id, service_id):
                await uow.favorites.delete(identity.id, service_id)
                favorited = False
            else:
                await uow.favorites.create(
                    Favorite(user_id=identity.id, service_id=service_id)
                )
                favorited = True
            await uow.commit()

        logger.info(
            "favorite_toggled",
            service_id=str(service_id),
            user_id=str(identity.id),
            favorited=favorited,
        )
        return favorited

    async def remove(self, user_id: UUID, service_id: UUID) -> bool:
        async with self._uow_factory() as uow:
            removed = await uow.favorites.delete(user_id, service_id)
            await uow.commit()
            return removed

    async def list_for_user(self, user_id: UUID) -> List[FavoriteWithService]:
        """A user's favorites, newest first. Empty when the store is unavailable."""
        try:
            async with self._uow_factory() as uow:
                return await uow.favorites.get_for_user(user_id)
        except Exception:
            logger.exception("favorites_fetch_failed", user_id=str(user_id))
            return []
