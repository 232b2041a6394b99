"""AI service catalog layer with business logic."""

from collections.abc import Callable
from typing import List, Optional
from uuid import UUID

import structlog

from core.exceptions import AuthorizationError, ServiceNotFoundError
from domain.entities.ai_service import (
    AIService,
    ServiceCategory,
    ServiceDetail,
    clean_features,
    clean_pricing,
)
from domain.entities.identity import Identity
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.profile_provisioning import ProfileProvisioningGuard

logger = structlog.get_logger()


class CatalogService:
    """Service layer for AI service listings."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        guard: ProfileProvisioningGuard,
    ) -> None:
        self._uow_factory = uow_factory
        self._guard = guard

    async def list_services(self) -> List[AIService]:
        """All listings, newest first."""
        async with self._uow_factory() as uow:
            return await uow.services.get_all()

    async def get_service(self, service_id: UUID) -> AIService:
        """Get a single listing."""
        async with self._uow_factory() as uow:
            service = await uow.services.get(service_id)
        if not service:
            raise ServiceNotFoundError(str(service_id))
        return service

    async def get_service_detail(self, service_id: UUID) -> ServiceDetail:
        """Listing with its reviews. Reviews that fail to load come back empty."""
        service = await self.get_service(service_id)
        try:
            async with self._uow_factory() as uow:
                reviews = await uow.reviews.get_for_service(service_id)
        except Exception:
            logger.exception("reviews_fetch_failed", service_id=str(service_id))
            reviews = []
        return ServiceDetail(service=service, reviews=reviews)

    async def create_service(
        self,
        identity: Identity,
        name: str,
        url: str,
        category: ServiceCategory = ServiceCategory.OTHER,
        features: Optional[List[str]] = None,
        pricing: Optional[dict[str, Optional[str]]] = None,
    ) -> AIService:
        """Create a listing owned by the caller."""
        await self._guard.ensure_profile(identity)

        service = AIService(
            name=name.strip(),
            url=url.strip(),
            category=category,
            features=list(features or []),
            pricing=dict(pricing or {}),  # type: ignore[arg-type]
            created_by=identity.id,
        )
        async with self._uow_factory() as uow:
            created = await uow.services.create(service)
            await uow.commit()

        logger.info("service_created", service_id=str(created.id), user_id=str(identity.id))
        return created

    async def update_service(
        self,
        service_id: UUID,
        identity: Identity,
        name: Optional[str] = None,
        url: Optional[str] = None,
        category: Optional[ServiceCategory] = None,
        features: Optional[List[str]] = None,
        pricing: Optional[dict[str, Optional[str]]] = None,
    ) -> AIService:
        """Update a listing. Only its creator may edit a listing that has one."""
        async with self._uow_factory() as uow:
            service = await uow.services.get(service_id)
            if not service:
                raise ServiceNotFoundError(str(service_id))
            self._require_editor(service, identity)

            if name is not None:
                service.name = name.strip()
            if url is not None:
                service.url = url.strip()
            if category is not None:
                service.category = category
            if features is not None:
                service.features = clean_features(features)
            if pricing is not None:
                service.pricing = clean_pricing(pricing)

            updated = await uow.services.update(service)
            await uow.commit()
            return updated

    async def delete_service(self, service_id: UUID, identity: Identity) -> bool:
        """Delete a listing together with its reviews and favorites."""
        async with self._uow_factory() as uow:
            service = await uow.services.get(service_id)
            if not service:
                raise ServiceNotFoundError(str(service_id))
            self._require_editor(service, identity)

            deleted = await uow.services.delete(service_id)
            await uow.commit()

        logger.info("service_deleted", service_id=str(service_id), user_id=str(identity.id))
        return deleted

    @staticmethod
    def _require_editor(service: AIService, identity: Identity) -> None:
        if service.created_by is not None and service.created_by != identity.id:
            raise AuthorizationError("Only the creator can modify this service")
