"""SQLAlchemy implementation of AI service, review and favorite repositories."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.ai_service import (
    AIService,
    Favorite,
    FavoriteWithService,
    Review,
    ReviewWithAuthor,
    ReviewWithService,
    ServiceCategory,
)
from infrastructure.database.models import (
    AIServiceModel,
    FavoriteModel,
    ProfileModel,
    ReviewModel,
)


def service_to_entity(model: AIServiceModel) -> AIService:
    """Map an ``ai_services`` row to the domain entity."""
    try:
        category = ServiceCategory(model.category)
    except ValueError:
        category = ServiceCategory.OTHER
    return AIService(
        id=model.id,
        name=model.name,
        url=model.url,
        category=category,
        features=list(model.features or []),
        pricing=dict(model.pricing or {}),
        created_by=model.created_by,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class SQLAlchemyAIServiceRepository:
    """SQLAlchemy implementation of IAIServiceRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> AIService | None:
        """Get a service by ID."""
        stmt = select(AIServiceModel).where(AIServiceModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return service_to_entity(model) if model else None

    async def get_all(self) -> list[AIService]:
        """Get all services, newest first."""
        stmt = select(AIServiceModel).order_by(AIServiceModel.created_at.desc())
        result = await self._session.execute(stmt)
        return [service_to_entity(model) for model in result.scalars()]

    async def create(self, service: AIService) -> AIService:
        """Create a new service."""
        model = AIServiceModel(
            id=service.id,
            name=service.name,
            category=service.category.value,
            url=service.url,
            features=list(service.features),
            pricing=dict(service.pricing),
            created_by=service.created_by,
            created_at=service.created_at,
            updated_at=service.updated_at,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return service_to_entity(model)

    async def update(self, service: AIService) -> AIService:
        """Update an existing service."""
        stmt = select(AIServiceModel).where(AIServiceModel.id == service.id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError(f"Service {service.id} not found")

        model.name = service.name
        model.category = service.category.value
        model.url = service.url
        model.features = list(service.features)
        model.pricing = dict(service.pricing)

        await self._session.flush()
        await self._session.refresh(model)
        return service_to_entity(model)

    async def delete(self, id: UUID) -> bool:
        """Delete a service and its reviews and favorites."""
        stmt = select(AIServiceModel).where(AIServiceModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            return False

        await self._session.execute(delete(ReviewModel).where(ReviewModel.service_id == id))
        await self._session.execute(delete(FavoriteModel).where(FavoriteModel.service_id == id))
        await self._session.delete(model)
        await self._session.flush()
        return True


class SQLAlchemyReviewRepository:
    """SQLAlchemy implementation of IReviewRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, review: Review) -> Review:
        """Insert or replace the review for (user_id, service_id)."""
        stmt = select(ReviewModel).where(
            ReviewModel.user_id == review.user_id,
            ReviewModel.service_id == review.service_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model:
            model.rating = review.rating
            model.comment = review.comment
            model.created_at = datetime.utcnow()
        else:
            model = ReviewModel(
                id=review.id,
                user_id=review.user_id,
                service_id=review.service_id,
                rating=review.rating,
                comment=review.comment,
                created_at=review.created_at,
            )
            self._session.add(model)

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get_for_service(self, service_id: UUID) -> list[ReviewWithAuthor]:
        """Get reviews of a service with author usernames, newest first."""
        stmt = (
            select(ReviewModel, ProfileModel.username)
            .join(ProfileModel, ReviewModel.user_id == ProfileModel.id)
            .where(ReviewModel.service_id == service_id)
            .order_by(ReviewModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [
            ReviewWithAuthor(review=self._to_entity(model), author=username)
            for model, username in result
        ]

    async def get_for_user(self, user_id: UUID) -> list[ReviewWithService]:
        """Get a user's reviews with the reviewed services, newest first."""
        stmt = (
            select(ReviewModel, AIServiceModel.name, AIServiceModel.category)
            .join(AIServiceModel, ReviewModel.service_id == AIServiceModel.id)
            .where(ReviewModel.user_id == user_id)
            .order_by(ReviewModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [
            ReviewWithService(
                review=self._to_entity(model),
                service_name=name,
                service_category=category,
            )
            for model, name, category in result
        ]

    @staticmethod
    def _to_entity(model: ReviewModel) -> Review:
        return Review(
            id=model.id,
            user_id=model.user_id,
            service_id=model.service_id,
            rating=model.rating,
            comment=model.comment,
            created_at=model.created_at,
        )


class SQLAlchemyFavoriteRepository:
    """SQLAlchemy implementation of IFavoriteRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: UUID, service_id: UUID) -> Favorite | None:
        """Get the favorite for a user and service."""
        stmt = select(FavoriteModel).where(
            FavoriteModel.user_id == user_id,
            FavoriteModel.service_id == service_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, favorite: Favorite) -> Favorite:
        """Create a favorite."""
        model = FavoriteModel(
            id=favorite.id,
            user_id=favorite.user_id,
            service_id=favorite.service_id,
            created_at=favorite.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def delete(self, user_id: UUID, service_id: UUID) -> bool:
        """Delete a favorite."""
        stmt = select(FavoriteModel).where(
            FavoriteModel.user_id == user_id,
            FavoriteModel.service_id == service_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    async def get_for_user(self, user_id: UUID) -> list[FavoriteWithService]:
        """Get a user's favorites with services, newest first."""
        stmt = (
            select(FavoriteModel, AIServiceModel)
            .join(AIServiceModel, FavoriteModel.service_id == AIServiceModel.id)
            .where(FavoriteModel.user_id == user_id)
            .order_by(FavoriteModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [
            FavoriteWithService(
                favorite=self._to_entity(favorite),
                service=service_to_entity(service),
            )
            for favorite, service in result
        ]

    @staticmethod
    def _to_entity(model: FavoriteModel) -> Favorite:
        return Favorite(
            id=model.id,
            user_id=model.user_id,
            service_id=model.service_id,
            created_at=model.created_at,
        )
