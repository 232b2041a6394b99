"""Profile service layer."""

from collections.abc import Callable

import structlog

from core.exceptions import ProfileUnavailableError, UsernameTakenError, ValidationError
from domain.entities.identity import Identity
from domain.entities.profile import Profile
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.profile_provisioning import MAX_USERNAME_LENGTH, ProfileProvisioningGuard

logger = structlog.get_logger()


class ProfileService:
    """Service layer for reading and editing the caller's profile."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        guard: ProfileProvisioningGuard,
    ) -> None:
        self._uow_factory = uow_factory
        self._guard = guard

    async def get_me(self, identity: Identity) -> Profile:
        """Get the caller's profile, provisioning it on first access."""
        profile = await self._guard.ensure_profile(identity)
        if profile is None:
            raise ProfileUnavailableError(str(identity.id))
        return profile

    async def update_username(self, identity: Identity, username: str) -> Profile:
        """Rename the caller. Usernames are trimmed and must be unique."""
        username = username.strip()
        if not username:
            raise ValidationError("Username must not be empty", field="username")
        if len(username) > MAX_USERNAME_LENGTH:
            raise ValidationError(
                f"Username must be at most {MAX_USERNAME_LENGTH} characters",
                field="username",
            )

        current = await self.get_me(identity)
        if current.username == username:
            return current

        async with self._uow_factory() as uow:
            holder = await uow.profiles.get_by_username(username)
            if holder and holder.id != identity.id:
                raise UsernameTakenError(username)

            updated = await uow.profiles.update_username(identity.id, username)
            if updated is None:
                raise ProfileUnavailableError(str(identity.id))
            await uow.commit()

        logger.info(
            "profile_username_changed",
            user_id=str(identity.id),
            old_username=current.username,
            username=username,
        )
        return updated
